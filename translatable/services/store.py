"""Translation store: reads and writes rows of the translations table.

Reads go through ``translations_view`` (or straight to the table when
``use_view`` is off) and are cached. Writes upsert the single row of a
(type, id, locale) triple and invalidate the cache keys they touch.

Failure policy:
- Bad locale: InvalidLocaleError always reaches the caller.
- Database errors on reads: logged with the entity context, the caller
  gets an absent value (None / {}). Nothing is cached for the failed read.
- Database errors on writes: logged, the session is rolled back, and the
  caller gets the current record (set) or a result with ok=False (bulk_set).
"""

import logging
from collections import namedtuple

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError

from translatable import db
from translatable.exceptions import TranslationStorageError
from translatable.models.translation import Translation, translations_view
from translatable.services.field_classifier import FieldKind
from translatable.services.validator import validate_locale, validate_locales

logger = logging.getLogger(__name__)

BulkSetResult = namedtuple('BulkSetResult', ['record', 'written', 'skipped', 'ok'])

# session.info key for cache invalidations owed when the transaction ends
DEFERRED_INVALIDATIONS_KEY = 'translatable_deferred_invalidations'


def run_deferred_invalidations(session):
    """Replay the cache invalidations of writes flushed into this transaction."""
    for cache, translatable_type, translatable_id, locale, fields in session.info.pop(
        DEFERRED_INVALIDATIONS_KEY, []
    ):
        cache.forget_entity(translatable_type, translatable_id, locale, fields)


def _normalize_items(items):
    """Accept {'type', 'id'} or {'translatable_type', 'translatable_id'} dicts."""
    normalized = []
    for item in items:
        translatable_type = item.get('type', item.get('translatable_type'))
        translatable_id = item.get('id', item.get('translatable_id'))
        normalized.append({'type': translatable_type, 'id': int(translatable_id)})
    return normalized


class TranslationStore:
    """Persistence and cached lookup of translation rows."""

    def __init__(self, config, classifier, cache, database=None):
        self.config = config
        self.classifier = classifier
        self.cache = cache
        self.db = database if database is not None else db

    # -- helpers --------------------------------------------------------------

    @property
    def source(self):
        """Table used by the read path."""
        return translations_view if self.config.use_view else Translation.__table__

    def _validate_locale(self, locale):
        validate_locale(locale, self.config.supported_locales)

    def _row_to_fields(self, row):
        """Merge searchable columns and the large-field map of one row."""
        fields = {}
        for field in self.classifier.searchable_fields:
            value = row[field]
            if value is not None:
                fields[field] = value

        large = row['large_fields']
        if isinstance(large, dict):
            for field, value in large.items():
                if value is not None:
                    fields[field] = value
        return fields

    def _where_entity(self, source, translatable_type, translatable_id, locale):
        return sa.and_(
            source.c.translatable_type == translatable_type,
            source.c.translatable_id == translatable_id,
            source.c.locale == locale,
        )

    def _load_row(self, translatable_type, translatable_id, locale):
        source = self.source
        stmt = sa.select(source).where(
            self._where_entity(source, translatable_type, translatable_id, locale)
        ).limit(1)
        try:
            return self.db.session.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise TranslationStorageError(
                'Translation read failed',
                context={
                    'type': translatable_type,
                    'id': translatable_id,
                    'locale': locale,
                },
                original=e,
            ) from e

    def _load_field(self, translatable_type, translatable_id, locale, field):
        kind = self.classifier.classify(field)
        if kind is FieldKind.UNKNOWN:
            return None

        row = self._load_row(translatable_type, translatable_id, locale)
        if row is None:
            return None

        if kind is FieldKind.SEARCHABLE:
            return row[field]

        large = row['large_fields']
        return large.get(field) if isinstance(large, dict) else None

    def _load_all(self, translatable_type, translatable_id, locale):
        row = self._load_row(translatable_type, translatable_id, locale)
        return {} if row is None else self._row_to_fields(row)

    # -- reads ----------------------------------------------------------------

    def get(self, translatable_type, translatable_id, locale, field):
        """Return one translated field, or None when it is not set."""
        self._validate_locale(locale)

        key = self.cache.entity_key(translatable_type, translatable_id, locale, field)
        try:
            return self.cache.remember(
                key,
                self.config.cache_ttl,
                lambda: self._load_field(translatable_type, translatable_id, locale, field),
            )
        except TranslationStorageError as e:
            logger.error(
                f"Translation get failed: type={translatable_type} id={translatable_id} "
                f"locale={locale} field={field} error={e.original}"
            )
            return None

    def get_all(self, translatable_type, translatable_id, locale) -> dict:
        """Return every populated field of one record (searchable first, then large)."""
        self._validate_locale(locale)

        key = self.cache.entity_key(translatable_type, translatable_id, locale, 'all')
        try:
            return self.cache.remember(
                key,
                self.config.cache_ttl,
                lambda: self._load_all(translatable_type, translatable_id, locale),
            )
        except TranslationStorageError as e:
            logger.error(
                f"Translation get_all failed: type={translatable_type} id={translatable_id} "
                f"locale={locale} error={e.original}"
            )
            return {}

    def bulk_get(self, items, locale, fields=None) -> list:
        """Fetch translations for many entities in one locale with one query.

        Returns one entry per input item, in input order. Items without a
        record get empty ``translations``.
        """
        self._validate_locale(locale)
        items = _normalize_items(items)
        fields = list(fields or [])
        if not items:
            return []

        key = self.cache.bulk_key(items, locale, fields)
        try:
            return self.cache.remember(
                key,
                self.config.cache_ttl,
                lambda: self._load_bulk(items, locale, fields),
            )
        except TranslationStorageError as e:
            logger.error(
                f"Translation bulk_get failed: items={len(items)} locale={locale} "
                f"error={e.original}"
            )
            return [self._bulk_entry(item, locale, {}) for item in items]

    def _bulk_entry(self, item, locale, translations):
        return {
            'translatable_type': item['type'],
            'translatable_id': item['id'],
            'locale': locale,
            'translations': translations,
        }

    def _load_bulk(self, items, locale, fields):
        source = self.source

        ids_by_type = {}
        for item in items:
            ids_by_type.setdefault(item['type'], set()).add(item['id'])

        conditions = [
            sa.and_(source.c.translatable_type == t, source.c.translatable_id.in_(sorted(ids)))
            for t, ids in ids_by_type.items()
        ]
        stmt = sa.select(source).where(source.c.locale == locale, sa.or_(*conditions))

        try:
            rows = self.db.session.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            self.db.session.rollback()
            raise TranslationStorageError(
                'Translation bulk read failed',
                context={'locale': locale, 'items': len(items)},
                original=e,
            ) from e

        by_entity = {
            (row['translatable_type'], row['translatable_id']): self._row_to_fields(row)
            for row in rows
        }

        results = []
        for item in items:
            translations = by_entity.get((item['type'], item['id']), {})
            if fields:
                translations = {f: translations[f] for f in fields if f in translations}
            results.append(self._bulk_entry(item, locale, dict(translations)))
        return results

    def find_record(self, translatable_type, translatable_id, locale):
        self._validate_locale(locale)
        try:
            return Translation.find_for_locale(translatable_type, translatable_id, locale)
        except SQLAlchemyError as e:
            logger.error(
                f"Translation record lookup failed: type={translatable_type} "
                f"id={translatable_id} locale={locale} error={e}"
            )
            self.db.session.rollback()
            return None

    def has_record(self, translatable_type, translatable_id, locale, field=None) -> bool:
        """True if a record exists for the locale (with ``field`` non-empty, if given)."""
        self._validate_locale(locale)
        try:
            row = self._load_row(translatable_type, translatable_id, locale)
        except TranslationStorageError as e:
            logger.error(
                f"Translation has_record failed: type={translatable_type} "
                f"id={translatable_id} locale={locale} error={e.original}"
            )
            return False

        if row is None:
            return False
        if field is None:
            return True
        value = self._row_to_fields(row).get(field)
        return value is not None and value != ''

    def available_locales(self, translatable_type, translatable_id) -> list:
        stmt = (
            sa.select(Translation.locale)
            .where(
                Translation.translatable_type == translatable_type,
                Translation.translatable_id == translatable_id,
            )
            .distinct()
            .order_by(Translation.locale)
        )
        try:
            return list(self.db.session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            logger.error(
                f"Translation available_locales failed: type={translatable_type} "
                f"id={translatable_id} error={e}"
            )
            self.db.session.rollback()
            return []

    def count_by_locale(self, translatable_type, locales=None) -> dict:
        """Number of distinct entities of a type that have a record in each locale."""
        locales = list(locales or self.config.supported_locales)
        validate_locales(locales, self.config.supported_locales)

        stmt = (
            sa.select(
                Translation.locale,
                sa.func.count(sa.distinct(Translation.translatable_id)),
            )
            .where(
                Translation.translatable_type == translatable_type,
                Translation.locale.in_(locales),
            )
            .group_by(Translation.locale)
        )
        try:
            counts = dict(self.db.session.execute(stmt).all())
        except SQLAlchemyError as e:
            logger.error(f"Translation count_by_locale failed: type={translatable_type} error={e}")
            self.db.session.rollback()
            counts = {}

        return {locale: int(counts.get(locale, 0)) for locale in locales}

    # -- writes ---------------------------------------------------------------

    def _current_record(self, translatable_type, translatable_id, locale):
        """Best-effort record to hand back after a failed write."""
        try:
            record = Translation.find_for_locale(translatable_type, translatable_id, locale)
        except SQLAlchemyError:
            self.db.session.rollback()
            record = None
        if record is None:
            record = Translation(
                translatable_type=translatable_type,
                translatable_id=translatable_id,
                locale=locale,
            )
        return record

    def set(self, translatable_type, translatable_id, locale, field, value):
        """Upsert one field. Returns the record, or None if the field is unknown.

        ``None`` on a large field removes the key from the JSON map.
        """
        self._validate_locale(locale)

        kind = self.classifier.classify(field)
        if kind is FieldKind.UNKNOWN:
            logger.warning(
                f"Unknown translation field skipped: field={field} "
                f"type={translatable_type} locale={locale}"
            )
            return None

        try:
            translation = Translation.get_or_create_for_locale(
                translatable_type, translatable_id, locale
            )
            if kind is FieldKind.SEARCHABLE:
                setattr(translation, field, value)
            else:
                translation.set_large_field(field, value)
            self.db.session.commit()
        except SQLAlchemyError as e:
            logger.error(
                f"Translation set failed: type={translatable_type} id={translatable_id} "
                f"locale={locale} field={field} error={e}"
            )
            self.db.session.rollback()
            return self._current_record(translatable_type, translatable_id, locale)

        self.clear_cache(translatable_type, translatable_id, locale, field)
        return translation

    def bulk_set(self, translatable_type, translatable_id, locale, values, commit=True):
        """Write several fields of one record with a single read-modify-write.

        With ``commit=False`` the changes are flushed into the caller's
        transaction and a database error propagates as TranslationStorageError.
        """
        self._validate_locale(locale)

        searchable, large, skipped = self.classifier.partition(values.keys())
        for field in skipped:
            logger.warning(
                f"Unknown translation field skipped: field={field} "
                f"type={translatable_type} locale={locale}"
            )

        written = searchable + large
        if not written:
            return BulkSetResult(None, [], skipped, True)

        try:
            translation = Translation.get_or_create_for_locale(
                translatable_type, translatable_id, locale
            )
            for field in searchable:
                setattr(translation, field, values[field])

            if large:
                data = dict(translation.large_fields or {})
                for field in large:
                    if values[field] is None:
                        data.pop(field, None)
                    else:
                        data[field] = values[field]
                translation.large_fields = data

            if commit:
                self.db.session.commit()
            else:
                self.db.session.flush()
        except SQLAlchemyError as e:
            logger.error(
                f"Translation bulk_set failed: type={translatable_type} id={translatable_id} "
                f"locale={locale} fields={written} error={e}"
            )
            if not commit:
                raise TranslationStorageError(
                    'Translation bulk write failed',
                    context={
                        'type': translatable_type,
                        'id': translatable_id,
                        'locale': locale,
                    },
                    original=e,
                ) from e
            self.db.session.rollback()
            record = self._current_record(translatable_type, translatable_id, locale)
            return BulkSetResult(record, [], skipped, False)

        self.cache.forget_entity(translatable_type, translatable_id, locale, written)
        if not commit:
            # Readers may re-cache the old row before the caller commits
            self.db.session.info.setdefault(DEFERRED_INVALIDATIONS_KEY, []).append(
                (self.cache, translatable_type, translatable_id, locale, written)
            )
        return BulkSetResult(translation, written, skipped, True)

    def clear_cache(self, translatable_type, translatable_id, locale, field=None):
        """Forget cached reads of one record.

        With a field: that field's key and the ``all`` key. Without: the
        ``all`` key and every known field key.
        """
        fields = [field] if field else self.classifier.known_fields
        self.cache.forget_entity(translatable_type, translatable_id, locale, fields)
