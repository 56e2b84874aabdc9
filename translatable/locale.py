"""Request-scoped current locale.

The locale of a request is picked once in ``before_request`` (``?locale=``,
then the best ``Accept-Language`` match, then the default locale) and kept on
``flask.g``. Resolvers read it once, when they are built.
"""

from flask import current_app, g, has_app_context, has_request_context, request

from translatable.config import DEFAULTS
from translatable.services.validator import validate_locale


def _config():
    if has_app_context():
        ext = current_app.extensions.get('translatable')
        if ext is not None:
            return ext.config
    return None


def default_locale() -> str:
    config = _config()
    if config is not None:
        return config.default_locale
    return DEFAULTS['TRANSLATIONS_DEFAULT_LOCALE']


def supported_locales() -> list:
    config = _config()
    if config is not None:
        return list(config.supported_locales)
    return list(DEFAULTS['TRANSLATIONS_SUPPORTED_LOCALES'])


def get_current_locale() -> str:
    if has_app_context():
        locale = g.get('translation_locale')
        if locale:
            return locale
    return default_locale()


def set_current_locale(locale):
    """Set the ambient locale for the current app/request context."""
    validate_locale(locale, supported_locales())
    g.translation_locale = locale


def select_request_locale():
    """``before_request`` hook: pick the locale for this request."""
    if not has_request_context():
        return

    supported = supported_locales()
    requested = request.args.get('locale')
    if requested and requested in supported:
        g.translation_locale = requested
        return

    best = request.accept_languages.best_match(supported)
    g.translation_locale = best or default_locale()
