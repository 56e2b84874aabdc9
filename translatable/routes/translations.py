"""Translation routes - JSON access to the translation store."""

import logging

from flask import Blueprint, request, jsonify

from translatable import translations
from translatable.exceptions import InvalidLocaleError, InvalidTranslationFieldError
from translatable.locale import get_current_locale
from translatable.services.validator import validate_field

logger = logging.getLogger(__name__)

translations_bp = Blueprint('translations', __name__)


@translations_bp.errorhandler(InvalidLocaleError)
@translations_bp.errorhandler(InvalidTranslationFieldError)
def handle_validation_error(error):
    return jsonify({
        'error': str(error),
        'value': error.value,
        'allowed': error.allowed,
    }), 400


def _requested_locale():
    return request.args.get('locale') or get_current_locale()


@translations_bp.route('/<entity_type>/<int:entity_id>', methods=['GET'])
def get_entity_translations(entity_type, entity_id):
    """Get every translated field of an entity in one locale.

    Query params:
    - locale: locale to read (default: request locale)
    """
    locale = _requested_locale()
    fields = translations.store.get_all(entity_type, entity_id, locale)

    return jsonify({
        'translatable_type': entity_type,
        'translatable_id': entity_id,
        'locale': locale,
        'translations': fields,
    }), 200


@translations_bp.route('/<entity_type>/<int:entity_id>/<field>', methods=['GET'])
def get_entity_translation(entity_type, entity_id, field):
    """Get one translated field.

    Query params:
    - locale: locale to read (default: request locale)
    - fallback: fall back to the default locale when missing (default: true)
    """
    store = translations.store
    validate_field(field, store.classifier.known_fields)

    locale = _requested_locale()
    fallback = request.args.get('fallback', 'true').lower() not in ('0', 'false', 'no')

    value = store.get(entity_type, entity_id, locale, field)
    resolved_locale = locale
    default_locale = store.config.default_locale
    if value is None and fallback and locale != default_locale:
        value = store.get(entity_type, entity_id, default_locale, field)
        resolved_locale = default_locale if value is not None else locale

    if value is None:
        return jsonify({'error': 'Translation not found', 'locale': locale, 'field': field}), 404

    return jsonify({
        'field': field,
        'value': value,
        'locale': resolved_locale,
    }), 200


@translations_bp.route('/<entity_type>/<int:entity_id>', methods=['PUT'])
def put_entity_translations(entity_type, entity_id):
    """Upsert several fields of one entity in one locale.

    Body: {"locale": "en", "translations": {"title": "...", "content": "..."}}
    """
    data = request.get_json(silent=True) or {}
    values = data.get('translations')

    if not isinstance(values, dict) or not values:
        return jsonify({'error': 'translations must be a non-empty object'}), 400

    locale = data.get('locale') or get_current_locale()
    result = translations.store.bulk_set(entity_type, entity_id, locale, values)

    if not result.ok:
        return jsonify({'error': 'Translations could not be saved'}), 503

    return jsonify({
        'message': 'Translations saved',
        'locale': locale,
        'written': result.written,
        'skipped': result.skipped,
        'translations': translations.store.get_all(entity_type, entity_id, locale),
    }), 200


@translations_bp.route('/bulk', methods=['POST'])
def bulk_get_translations():
    """Fetch translations of many entities in one locale.

    Body: {"items": [{"type": "Article", "id": 1}, ...], "locale": "en", "fields": ["title"]}
    """
    data = request.get_json(silent=True) or {}
    items = data.get('items')

    if not isinstance(items, list):
        return jsonify({'error': 'items must be a list'}), 400

    try:
        results = translations.store.bulk_get(
            items,
            data.get('locale') or get_current_locale(),
            data.get('fields') or [],
        )
    except (InvalidLocaleError, InvalidTranslationFieldError):
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        return jsonify({'error': f'Invalid items: {e}'}), 400

    return jsonify({'results': results}), 200


@translations_bp.route('/stats/<entity_type>', methods=['GET'])
def translation_stats(entity_type):
    """Count entities with a record per locale.

    Query params:
    - locales: comma separated locales (default: all supported)
    """
    raw = request.args.get('locales', '')
    locales = [locale.strip() for locale in raw.split(',') if locale.strip()]

    stats = translations.store.count_by_locale(entity_type, locales or None)
    return jsonify({'translatable_type': entity_type, 'stats': stats}), 200
