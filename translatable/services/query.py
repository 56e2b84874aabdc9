"""Query helpers for host models with translations.

Filters join the read view (or the translations table when ``use_view`` is
off) on ``(translatable_type, translatable_id, locale)``. Both sources
return the same rows. Only searchable fields can be filtered on, since large
fields live inside a JSON blob.

    query = where_translation_like(Article.query, Article, 'title', 'flask', 'en')
    articles = with_translations(query.all(), ['en', 'ar'])
"""

import logging
import operator

import sqlalchemy as sa

from translatable.exceptions import InvalidTranslationFieldError
from translatable.locale import get_current_locale
from translatable.models.mixins import get_translation_type
from translatable.models.translation import Translation
from translatable.services.validator import validate_locale, validate_locales

logger = logging.getLogger(__name__)

_OPERATORS = {
    '=': operator.eq,
    '==': operator.eq,
    '!=': operator.ne,
    '<>': operator.ne,
    '<': operator.lt,
    '<=': operator.le,
    '>': operator.gt,
    '>=': operator.ge,
    'like': lambda column, value: column.like(value),
    'ilike': lambda column, value: column.ilike(value),
    'not like': lambda column, value: column.notlike(value),
}


def _store(store):
    if store is not None:
        return store
    from translatable import translations
    return translations.store


def _searchable_column(store, source, field):
    if not store.classifier.is_searchable(field):
        raise InvalidTranslationFieldError(field, store.classifier.searchable_fields)
    return source.c[field]


def _join_translations(query, model, store, locale):
    source = store.source.alias('t')
    onclause = sa.and_(
        source.c.translatable_id == model.id,
        source.c.translatable_type == get_translation_type(model),
        source.c.locale == locale,
    )
    return query.join(source, onclause), source


def _resolve_locale(store, locale):
    locale = locale or get_current_locale()
    validate_locale(locale, store.config.supported_locales)
    return locale


def where_translation(query, model, field, op, value=None, locale=None, store=None):
    """Keep rows whose translation ``field`` compares to ``value`` in ``locale``."""
    store = _store(store)
    locale = _resolve_locale(store, locale)

    compare = _OPERATORS.get(op.lower() if isinstance(op, str) else op)
    if compare is None:
        raise ValueError(f"Unsupported operator '{op}'")

    query, source = _join_translations(query, model, store, locale)
    column = _searchable_column(store, source, field)
    return query.filter(compare(column, value))


def where_translation_like(query, model, field, value, locale=None, store=None):
    return where_translation(query, model, field, 'like', f'%{value}%', locale, store)


def has_translation(query, model, locale=None, field=None, store=None):
    """Keep rows that have a record in ``locale`` (with ``field`` non-empty, if given)."""
    store = _store(store)
    locale = _resolve_locale(store, locale)

    query, source = _join_translations(query, model, store, locale)
    if field:
        column = _searchable_column(store, source, field)
        query = query.filter(column.isnot(None), column != '')
    return query


def missing_translation(query, model, locale=None, field=None, store=None):
    """Keep rows with no record in ``locale`` (or with ``field`` empty there)."""
    store = _store(store)
    locale = _resolve_locale(store, locale)

    table = Translation.__table__
    conditions = [
        table.c.translatable_id == model.id,
        table.c.translatable_type == get_translation_type(model),
        table.c.locale == locale,
    ]
    if field:
        column = _searchable_column(store, table, field)
        conditions.extend([column.isnot(None), column != ''])

    return query.filter(~sa.exists().where(*conditions))


def with_translations(entities, locales=None, store=None):
    """Preload translations of many entities, one query per locale.

    Each entity's resolver is primed, so reading those locales afterwards
    hits neither the cache nor the database.
    """
    store = _store(store)
    entities = [e for e in entities if getattr(e, 'id', None) is not None]
    locales = list(locales or [get_current_locale()])
    validate_locales(locales, store.config.supported_locales)
    if not entities:
        return entities

    items = [{'type': get_translation_type(e), 'id': e.id} for e in entities]
    for locale in locales:
        results = store.bulk_get(items, locale)
        for entity, result in zip(entities, results):
            entity.translations.prime(locale, result['translations'])

    logger.debug(f"Preloaded translations for {len(entities)} entities in {locales}")
    return entities


def translation_stats(model, locales=None, store=None) -> dict:
    return _store(store).count_by_locale(get_translation_type(model), locales)
