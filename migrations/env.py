import logging
from logging.config import fileConfig

from alembic import context

import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from translatable import create_app, db
from translatable.models import Translation  # noqa: F401

config = context.config
fileConfig(config.config_file_name)
logger = logging.getLogger('alembic.env')

app = create_app(os.getenv('FLASK_ENV', 'development'))
target_metadata = db.metadata


def include_object(object, name, type_, reflected, compare_to):
    # translations_view has its own revision; autogenerate must not touch it
    return not (type_ == 'table' and name == 'translations_view')


def run_migrations_offline():
    """Emit SQL for the app's database URL without connecting."""
    context.configure(
        url=app.config['SQLALCHEMY_DATABASE_URI'],
        target_metadata=target_metadata,
        literal_binds=True,
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    """Run migrations on the app's own engine."""

    def process_revision_directives(context, revision, directives):
        if getattr(config.cmd_opts, 'autogenerate', False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info('No changes in schema detected.')

    with app.app_context():
        with db.engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                process_revision_directives=process_revision_directives,
                include_object=include_object,
            )

            with context.begin_transaction():
                context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
