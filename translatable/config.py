"""Translation settings - single source of truth for the engine.

Settings are read from the Flask app config (``TRANSLATIONS_*`` keys, filled
from the environment by ``create_app``) and validated once at load time.
"""

from translatable.exceptions import TranslationConfigError

# Searchable fields that exist as columns on the translations table.
# Must stay in sync with translatable/models/translation.py and the migration.
TABLE_SEARCHABLE_COLUMNS = (
    'title',
    'slug',
    'description',
    'excerpt',
    'meta_title',
    'meta_description',
)

DEFAULT_LARGE_FIELDS = ('content', 'body', 'full_text')

DEFAULT_TRANSLATABLE_FIELDS = (
    'title',
    'slug',
    'content',
    'description',
    'excerpt',
    'meta_title',
    'meta_description',
)

CACHE_BACKENDS = ('memory', 'redis')

DEFAULTS = {
    'TRANSLATIONS_DEFAULT_LOCALE': 'ar',
    'TRANSLATIONS_SUPPORTED_LOCALES': ['ar', 'en', 'fr'],
    'TRANSLATIONS_SEARCHABLE_FIELDS': list(TABLE_SEARCHABLE_COLUMNS),
    'TRANSLATIONS_LARGE_FIELDS': list(DEFAULT_LARGE_FIELDS),
    'TRANSLATIONS_CACHE_ENABLED': True,
    'TRANSLATIONS_CACHE_TTL': 3600,
    'TRANSLATIONS_CACHE_PREFIX': 'translations',
    'TRANSLATIONS_CACHE_BACKEND': 'memory',
    'TRANSLATIONS_AUTO_DETECT_FIELDS': True,
    'TRANSLATIONS_DEFAULT_FIELDS': list(DEFAULT_TRANSLATABLE_FIELDS),
    'TRANSLATIONS_USE_VIEW': True,
}


class TranslationConfig:
    """Validated, read-only view of the translation settings."""

    def __init__(
        self,
        default_locale='ar',
        supported_locales=('ar', 'en', 'fr'),
        searchable_fields=TABLE_SEARCHABLE_COLUMNS,
        large_fields=DEFAULT_LARGE_FIELDS,
        cache_enabled=True,
        cache_ttl=3600,
        cache_prefix='translations',
        cache_backend='memory',
        auto_detect_fields=True,
        default_translatable_fields=DEFAULT_TRANSLATABLE_FIELDS,
        use_view=True,
    ):
        self.default_locale = default_locale
        self.supported_locales = tuple(supported_locales)
        self.searchable_fields = tuple(searchable_fields)
        self.large_fields = tuple(large_fields)
        self.cache_enabled = bool(cache_enabled)
        self.cache_ttl = int(cache_ttl)
        self.cache_prefix = cache_prefix
        self.cache_backend = cache_backend
        self.auto_detect_fields = bool(auto_detect_fields)
        self.default_translatable_fields = tuple(default_translatable_fields)
        self.use_view = bool(use_view)

        self.validate()

    def validate(self):
        """Reject inconsistent settings. Raises TranslationConfigError."""
        if not self.supported_locales:
            raise TranslationConfigError('supported_locales must not be empty')

        if any(not locale for locale in self.supported_locales):
            raise TranslationConfigError('supported_locales must not contain empty locales')

        if self.default_locale not in self.supported_locales:
            raise TranslationConfigError(
                f"default_locale '{self.default_locale}' is not in supported_locales "
                f"({', '.join(self.supported_locales)})"
            )

        overlap = sorted(set(self.searchable_fields) & set(self.large_fields))
        if overlap:
            raise TranslationConfigError(
                f"Fields configured as both searchable and large: {', '.join(overlap)}"
            )

        not_columns = [f for f in self.searchable_fields if f not in TABLE_SEARCHABLE_COLUMNS]
        if not_columns:
            raise TranslationConfigError(
                f"Searchable fields without a column on the translations table: "
                f"{', '.join(not_columns)}"
            )

        if self.cache_ttl < 0:
            raise TranslationConfigError('cache_ttl must be zero or positive')

        if self.cache_backend not in CACHE_BACKENDS:
            raise TranslationConfigError(
                f"Unknown cache backend '{self.cache_backend}'. "
                f"Expected one of: {', '.join(CACHE_BACKENDS)}"
            )

    @property
    def known_fields(self):
        return self.searchable_fields + self.large_fields

    def __repr__(self):
        return (
            f'<TranslationConfig default={self.default_locale} '
            f'locales={",".join(self.supported_locales)} cache={self.cache_backend}>'
        )


def load_translation_config(settings) -> TranslationConfig:
    """Build a TranslationConfig from a Flask config (or any mapping).

    Missing keys fall back to DEFAULTS.
    """
    def value(key):
        return settings.get(key, DEFAULTS[key])

    return TranslationConfig(
        default_locale=value('TRANSLATIONS_DEFAULT_LOCALE'),
        supported_locales=value('TRANSLATIONS_SUPPORTED_LOCALES'),
        searchable_fields=value('TRANSLATIONS_SEARCHABLE_FIELDS'),
        large_fields=value('TRANSLATIONS_LARGE_FIELDS'),
        cache_enabled=value('TRANSLATIONS_CACHE_ENABLED'),
        cache_ttl=value('TRANSLATIONS_CACHE_TTL'),
        cache_prefix=value('TRANSLATIONS_CACHE_PREFIX'),
        cache_backend=value('TRANSLATIONS_CACHE_BACKEND'),
        auto_detect_fields=value('TRANSLATIONS_AUTO_DETECT_FIELDS'),
        default_translatable_fields=value('TRANSLATIONS_DEFAULT_FIELDS'),
        use_view=value('TRANSLATIONS_USE_VIEW'),
    )
