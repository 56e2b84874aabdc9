from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import logging
import os
from dotenv import load_dotenv

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()

from translatable.extension import Translations  # noqa: E402

translations = Translations()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _database_url():
    url = os.getenv('DATABASE_URL', 'sqlite:///translations.db')
    # SQLAlchemy only accepts the postgresql:// scheme
    if url.startswith('postgres://'):
        url = url.replace('postgres://', 'postgresql://', 1)
    return url


def _env_list(name, default):
    value = os.getenv(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(',') if item.strip()]


def create_app(config_name='development', overrides=None):
    app = Flask(__name__)

    logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO').upper())

    # Config
    app.config['SQLALCHEMY_DATABASE_URI'] = _database_url()
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    app.config['TRANSLATIONS_DEFAULT_LOCALE'] = os.getenv('APP_LOCALE', 'ar')
    app.config['TRANSLATIONS_SUPPORTED_LOCALES'] = _env_list(
        'TRANSLATIONS_SUPPORTED_LOCALES', ['ar', 'en', 'fr']
    )
    app.config['TRANSLATIONS_CACHE_ENABLED'] = _env_flag('TRANSLATIONS_CACHE_ENABLED', True)
    app.config['TRANSLATIONS_CACHE_TTL'] = int(os.getenv('TRANSLATIONS_CACHE_TTL', 3600))
    app.config['TRANSLATIONS_CACHE_BACKEND'] = os.getenv('TRANSLATIONS_CACHE_BACKEND', 'memory')
    app.config['TRANSLATIONS_USE_VIEW'] = _env_flag('TRANSLATIONS_USE_VIEW', True)

    if config_name == 'testing':
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'

    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    translations.init_app(app)

    # Create tables (and the read view) with error handling
    with app.app_context():
        try:
            db.create_all()
        except Exception as e:
            app.logger.warning(f"Could not create database tables: {e}")

    from translatable.routes import register_routes
    register_routes(app)

    @app.route('/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'}), 200

    return app
