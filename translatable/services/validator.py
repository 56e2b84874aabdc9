"""Locale and field validation.

Every check has two modes: ``throw=True`` (default) raises a typed error that
carries the offending value and the allowed list, ``throw=False`` returns
False instead. Batch variants stop at the first bad element.
"""

from flask import current_app, has_app_context

from translatable.config import DEFAULTS
from translatable.exceptions import InvalidLocaleError, InvalidTranslationFieldError


def _configured_locales():
    if has_app_context():
        ext = current_app.extensions.get('translatable')
        if ext is not None:
            return list(ext.config.supported_locales)
        return list(current_app.config.get(
            'TRANSLATIONS_SUPPORTED_LOCALES', DEFAULTS['TRANSLATIONS_SUPPORTED_LOCALES']
        ))
    return list(DEFAULTS['TRANSLATIONS_SUPPORTED_LOCALES'])


def validate_locale(locale, supported_locales=None, throw=True) -> bool:
    """Check that ``locale`` is a supported locale.

    An empty locale is invalid whatever the supported list says.
    """
    if supported_locales is None:
        supported_locales = _configured_locales()

    if not locale or not isinstance(locale, str):
        if throw:
            raise InvalidLocaleError(locale, supported_locales)
        return False

    if locale not in supported_locales:
        if throw:
            raise InvalidLocaleError(locale, supported_locales)
        return False

    return True


def validate_field(field, translatable_fields, throw=True) -> bool:
    """Check that ``field`` is one of the entity's translatable fields."""
    translatable_fields = list(translatable_fields or [])

    if not field or field not in translatable_fields:
        if throw:
            raise InvalidTranslationFieldError(field, translatable_fields)
        return False

    return True


def validate_locales(locales, supported_locales=None, throw=True) -> bool:
    if supported_locales is None:
        supported_locales = _configured_locales()

    for locale in locales:
        if not validate_locale(locale, supported_locales, throw):
            return False
    return True


def validate_fields(fields, translatable_fields, throw=True) -> bool:
    for field in fields:
        if not validate_field(field, translatable_fields, throw):
            return False
    return True
