"""
Tests for loading and validating translation settings.
"""

import pytest

from translatable import _database_url, create_app
from translatable.config import DEFAULTS, TranslationConfig, load_translation_config
from translatable.exceptions import TranslationConfigError


class TestTranslationConfig:
    """Tests for TranslationConfig.validate"""

    def test_defaults_are_valid(self):
        config = TranslationConfig()

        assert config.default_locale == 'ar'
        assert config.supported_locales == ('ar', 'en', 'fr')
        assert 'content' in config.known_fields

    def test_default_locale_must_be_supported(self):
        with pytest.raises(TranslationConfigError):
            TranslationConfig(default_locale='de')

    def test_supported_locales_required(self):
        with pytest.raises(TranslationConfigError):
            TranslationConfig(default_locale='ar', supported_locales=())

    def test_empty_locale_entry_rejected(self):
        with pytest.raises(TranslationConfigError):
            TranslationConfig(supported_locales=('ar', ''))

    def test_searchable_field_needs_a_column(self):
        with pytest.raises(TranslationConfigError) as exc_info:
            TranslationConfig(searchable_fields=('title', 'subtitle'))
        assert 'subtitle' in str(exc_info.value)

    def test_negative_ttl_rejected(self):
        with pytest.raises(TranslationConfigError):
            TranslationConfig(cache_ttl=-1)

    def test_unknown_backend_rejected(self):
        with pytest.raises(TranslationConfigError):
            TranslationConfig(cache_backend='memcached')


class TestLoadTranslationConfig:
    """Tests for load_translation_config"""

    def test_missing_keys_use_defaults(self):
        config = load_translation_config({})

        assert config.default_locale == DEFAULTS['TRANSLATIONS_DEFAULT_LOCALE']
        assert config.cache_ttl == DEFAULTS['TRANSLATIONS_CACHE_TTL']
        assert config.use_view is True

    def test_reads_flask_style_keys(self):
        config = load_translation_config({
            'TRANSLATIONS_DEFAULT_LOCALE': 'en',
            'TRANSLATIONS_SUPPORTED_LOCALES': ['en', 'de'],
            'TRANSLATIONS_CACHE_ENABLED': False,
            'TRANSLATIONS_USE_VIEW': False,
        })

        assert config.default_locale == 'en'
        assert config.supported_locales == ('en', 'de')
        assert config.cache_enabled is False
        assert config.use_view is False

    def test_create_app_rejects_ambiguous_fields(self):
        with pytest.raises(TranslationConfigError):
            create_app('testing', {
                'TRANSLATIONS_SEARCHABLE_FIELDS': ['title', 'description'],
                'TRANSLATIONS_LARGE_FIELDS': ['content', 'description'],
            })

    def test_database_url_normalizes_postgres_scheme(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgres://user:secret@db:5432/translations')

        assert _database_url() == 'postgresql://user:secret@db:5432/translations'

    def test_database_url_defaults_to_sqlite(self, monkeypatch):
        monkeypatch.delenv('DATABASE_URL', raising=False)

        assert _database_url() == 'sqlite:///translations.db'
