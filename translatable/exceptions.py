"""Error types raised by the translation engine.

Validation errors (bad locale, bad field, bad configuration) always reach the
caller. Storage errors are logged and downgraded on read paths; the
``TranslationStorageError`` type exists for callers that need to re-raise one.
"""


class TranslationError(Exception):
    """Base class for every error raised by this package."""


class InvalidLocaleError(TranslationError, ValueError):
    """Locale is empty or not one of the supported locales."""

    def __init__(self, locale, supported_locales=None):
        self.value = locale
        self.allowed = list(supported_locales or [])

        message = f"Invalid locale '{locale}'."
        if self.allowed:
            message += f" Supported locales: {', '.join(self.allowed)}"
        super().__init__(message)


class InvalidTranslationFieldError(TranslationError, ValueError):
    """Field is empty or not declared as translatable for the entity."""

    def __init__(self, field, translatable_fields=None):
        self.value = field
        self.allowed = list(translatable_fields or [])

        message = f"Invalid translation field '{field}'."
        if self.allowed:
            message += f" Translatable fields: {', '.join(self.allowed)}"
        super().__init__(message)


class TranslationStorageError(TranslationError):
    """Persistence or cache I/O failed. Not a caller mistake."""

    def __init__(self, message, context=None, original=None):
        self.context = dict(context or {})
        self.original = original
        super().__init__(message)


class TranslationConfigError(TranslationError):
    """The translation configuration is inconsistent."""
