#!/usr/bin/env python
"""Database initialization script for the translations service.

This script creates the translations table and its read view.
Run this once before starting the application for the first time
(or use `flask db upgrade` with the Alembic migrations).

Usage:
    python init_db.py
"""

import os
import sys

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from translatable import create_app, db


def init_database():
    """Initialize the database by creating all tables and the read view."""

    # Create Flask app
    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name)

    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")

    # Push app context
    with app.app_context():
        try:
            print("Creating database tables...")
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")

            # Create all tables (the view is created by the table's DDL hook)
            db.create_all()

            inspector = sa.inspect(db.engine)
            tables_info = [
                ("translations", "One row per entity and locale", inspector.get_table_names()),
                ("translations_view", "Read view over translations", inspector.get_view_names()),
            ]

            print("Created objects:")
            for name, description, existing in tables_info:
                mark = "✓" if name in existing else "✗"
                print(f"  {mark} {name:<25} - {description}")

            print(f"\n{'='*60}")
            print("✅ Database initialization complete!")
            print(f"{'='*60}\n")
            print("Next steps:")
            print("  1. Start the Flask server: python wsgi.py")
            print("  2. Try the API: GET /api/translations/stats/<type>")
            print("\n")

            return True

        except SQLAlchemyError as e:
            print(f"❌ Error creating database: {e}\n")
            print(f"Traceback: {type(e).__name__}: {str(e)}")
            return False


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)
