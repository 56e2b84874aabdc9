"""
Pytest configuration and fixtures for testing the translation engine.
"""

import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from translatable import create_app, db, translations
from translatable.locale import set_current_locale
from translatable.models import TranslatableMixin

fake = Faker()

TEST_SETTINGS = {
    'TRANSLATIONS_DEFAULT_LOCALE': 'ar',
    'TRANSLATIONS_SUPPORTED_LOCALES': ['ar', 'en', 'fr'],
    'TRANSLATIONS_CACHE_ENABLED': True,
    'TRANSLATIONS_CACHE_BACKEND': 'memory',
    'TRANSLATIONS_CACHE_TTL': 3600,
    'TRANSLATIONS_USE_VIEW': True,
}


class Article(TranslatableMixin, db.Model):
    """Host model with an explicit translatable field list."""

    __tablename__ = 'articles'
    __translatable__ = ('title', 'slug', 'content')

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=True)


class Page(TranslatableMixin, db.Model):
    """Host model whose translatable fields are auto-detected from its columns."""

    __tablename__ = 'pages'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=True)
    content = db.Column(db.Text, nullable=True)
    position = db.Column(db.Integer, nullable=True)


class LegacyPost(TranslatableMixin, db.Model):
    """Host model still declaring the deprecated default_locale attribute."""

    __tablename__ = 'legacy_posts'
    __translatable__ = ('title',)

    default_locale = 'fr'

    id = db.Column(db.Integer, primary_key=True)


class Profile(TranslatableMixin, db.Model):
    """Host model with its own default_locale column."""

    __tablename__ = 'profiles'
    __translatable__ = ('title',)

    id = db.Column(db.Integer, primary_key=True)
    default_locale = db.Column(db.String(10))


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing', TEST_SETTINGS)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session (and an empty cache) for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        translations.cache.flush()
        yield db.session
        db.session.rollback()


@pytest.fixture
def store(db_session):
    """The app's translation store."""
    return translations.store


@pytest.fixture(params=[True, False], ids=['view', 'table'])
def any_store(request, store, monkeypatch):
    """The store reading through the view, then straight from the table."""
    monkeypatch.setattr(store.config, 'use_view', request.param)
    return store


def _create_article(**overrides):
    data = {'name': fake.sentence(nb_words=3)}
    data.update(overrides)
    article = Article(**data)
    db.session.add(article)
    db.session.commit()
    return article


@pytest.fixture
def article(db_session):
    """A persisted Article with no translations."""
    return _create_article()


@pytest.fixture
def second_article(db_session):
    return _create_article()


@pytest.fixture
def locale(db_session):
    """Set the ambient locale of the current context."""
    def _set(value):
        set_current_locale(value)
        return value
    return _set
