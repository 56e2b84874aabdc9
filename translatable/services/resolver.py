"""Entity-facing translation API.

A ``TranslationResolver`` is attached to one entity instance. Reads run
validate -> cache -> store, and fall back once to the default locale when
the requested locale has no value. Writes are staged in a pending buffer
(locale -> field -> value) and flushed by ``save_translations``.

Locale used when a call does not pass one:
1. the instance override set with ``set_locale``,
2. the ambient request locale captured when the resolver was built.

A model-level ``default_locale`` attribute is recognised for backward
compatibility and ignored. It never changes which locale a
read or write uses.
"""

import copy
import logging
from collections.abc import Mapping

from translatable.locale import get_current_locale
from translatable.services.validator import validate_field, validate_locale

logger = logging.getLogger(__name__)

_warned_default_locale = set()


def _warn_deprecated_default_locale(entity_cls):
    if entity_cls in _warned_default_locale:
        return
    # A real column of that name is host data, not the old setting
    if 'default_locale' in _mapped_column_names(entity_cls):
        return
    if getattr(entity_cls, 'default_locale', None) is not None:
        _warned_default_locale.add(entity_cls)
        logger.warning(
            f"{entity_cls.__name__}.default_locale is deprecated and ignored; "
            f"translations use the instance or request locale"
        )


def _mapped_column_names(entity_cls):
    table = getattr(entity_cls, '__table__', None)
    if table is None:
        return set()
    return {column.name for column in table.columns}


def translatable_fields_for(entity, config) -> list:
    """Fields an entity accepts: explicit ``__translatable__`` or auto-detected."""
    declared = getattr(entity, '__translatable__', None)
    if declared is not None:
        return list(declared)

    if config.auto_detect_fields:
        cls = type(entity)
        candidates = _mapped_column_names(cls) | set(getattr(cls, '__fillable__', ()))
        return [f for f in config.default_translatable_fields if f in candidates]

    return []


class TranslationResolver:
    """Translation reads and staged writes for a single entity."""

    def __init__(self, entity, store, locale=None):
        self.entity = entity
        self.store = store
        self.config = store.config

        self._ambient_locale = locale or get_current_locale()
        self._locale_override = None
        self._pending = {}
        self._preloaded = {}
        self._saving = False
        # locale -> values flushed into a transaction that has not committed yet
        self._flushed = {}

        _warn_deprecated_default_locale(type(entity))

    def __repr__(self):
        return f'<TranslationResolver {self.translation_type}#{self.entity_id} [{self.get_locale()}]>'

    # -- identity -------------------------------------------------------------

    @property
    def translation_type(self) -> str:
        return getattr(self.entity, 'translation_type', None) or type(self.entity).__name__

    @property
    def entity_id(self):
        return getattr(self.entity, 'id', None)

    def translatable_fields(self) -> list:
        getter = getattr(self.entity, 'get_translatable_fields', None)
        if callable(getter):
            return list(getter())
        return translatable_fields_for(self.entity, self.config)

    # -- locale ---------------------------------------------------------------

    def set_locale(self, locale=None):
        """Override the locale for this instance. ``None`` clears the override."""
        if locale is not None:
            validate_locale(locale, self.config.supported_locales)
        self._locale_override = locale
        return self

    def get_locale(self) -> str:
        return self._locale_override or self._ambient_locale

    def reset_locale(self):
        self._locale_override = None
        return self

    def _resolve_locale(self, locale):
        locale = self.get_locale() if locale is None else locale
        validate_locale(locale, self.config.supported_locales)
        return locale

    # -- reads ----------------------------------------------------------------

    def _read(self, field, locale):
        if self.entity_id is None:
            return None
        if locale in self._preloaded:
            return self._preloaded[locale].get(field)
        return self.store.get(self.translation_type, self.entity_id, locale, field)

    def get_translation(self, field, locale=None, fallback=True):
        """Translated value of ``field``, falling back to the default locale.

        Raises InvalidLocaleError / InvalidTranslationFieldError on bad input.
        """
        locale = self._resolve_locale(locale)
        validate_field(field, self.translatable_fields())

        value = self._read(field, locale)
        default = self.config.default_locale
        if value is None and fallback and locale != default:
            value = self._read(field, default)
        return value

    def get_translations(self, locale=None) -> dict:
        """Every populated field of the entity in one locale (no fallback)."""
        locale = self._resolve_locale(locale)
        if self.entity_id is None:
            return {}
        if locale in self._preloaded:
            return dict(self._preloaded[locale])
        return self.store.get_all(self.translation_type, self.entity_id, locale)

    def has_translation(self, field, locale=None) -> bool:
        return self.get_translation(field, locale, fallback=False) is not None

    def translate_field(self, field, locale=None, fallback_locale=None):
        """Like get_translation, with an explicit fallback locale."""
        locale = self._resolve_locale(locale)
        fallback_locale = fallback_locale or self.config.default_locale

        value = self.get_translation(field, locale, fallback=False)
        if value is None and locale != fallback_locale:
            value = self.get_translation(field, fallback_locale, fallback=False)
        return value

    def get_available_locales(self) -> list:
        if self.entity_id is None:
            return []
        return self.store.available_locales(self.translation_type, self.entity_id)

    def translation(self, locale=None):
        """The stored Translation record for a locale, or None."""
        locale = self._resolve_locale(locale)
        if self.entity_id is None:
            return None
        return self.store.find_record(self.translation_type, self.entity_id, locale)

    def has_translation_for(self, locale=None, field=None) -> bool:
        locale = self._resolve_locale(locale)
        if self.entity_id is None:
            return False
        return self.store.has_record(self.translation_type, self.entity_id, locale, field)

    def prime(self, locale, translations):
        """Seed reads for a locale with already-fetched values (eager loading)."""
        self._preloaded[locale] = dict(translations)

    # -- staged writes --------------------------------------------------------

    @property
    def pending(self) -> dict:
        return copy.deepcopy(self._pending)

    def has_pending(self) -> bool:
        return bool(self._pending)

    @property
    def is_saving(self) -> bool:
        return self._saving

    def discard_pending(self):
        self._pending = {}
        self._flushed = {}
        return self

    def set_translation(self, field, value, locale=None):
        """Stage one value. Nothing is written until save_translations()."""
        locale = self._resolve_locale(locale)
        self._pending.setdefault(locale, {})[field] = value
        return self

    def set_translations(self, values, locale=None):
        locale = self._resolve_locale(locale)
        for field, value in values.items():
            self.set_translation(field, value, locale)
        return self

    def set_for_locale(self, locale, values):
        return self.set_translations(values, locale)

    def set_attribute_across_locales(self, field, values_by_locale):
        for locale, value in values_by_locale.items():
            self.set_translation(field, value, locale)
        return self

    def fill_translations(self, values_by_locale):
        for locale, values in values_by_locale.items():
            self.set_translations(values, locale)
        return self

    def translate(self, values):
        return self.set_translations(values, self.get_locale())

    def translate_to(self, locale_or_values, values=None):
        """Stage values given in one of several shapes.

        - ``translate_to('en', {'title': ...})``
        - ``translate_to({'title': ...})`` for the current locale
        - ``translate_to({'en': {'title': ...}, 'ar': {...}})``
        - ``translate_to({'title': {'en': ..., 'ar': ...}})``

        The shape of a single mapping is decided by its first entry only.
        Prefer set_for_locale / set_attribute_across_locales in new code.
        """
        if isinstance(locale_or_values, str):
            return self.set_for_locale(locale_or_values, values or {})

        data = locale_or_values
        if not data:
            return self

        first_key, first_value = next(iter(data.items()))
        if not isinstance(first_value, Mapping):
            return self.set_translations(data, self.get_locale())

        if first_key in self.translatable_fields():
            for field, values_by_locale in data.items():
                self.set_attribute_across_locales(field, values_by_locale)
            return self

        return self.fill_translations(data)

    def save_translations(self, commit=True) -> list:
        """Flush the pending buffer. Returns the locales that were written.

        Fields outside the translatable list are dropped. A locale whose
        remaining values are all empty is skipped. Locales whose write failed
        stay pending. Without an entity id this is a no-op (the buffer is
        kept until the entity is persisted).

        With ``commit=False`` the written locales are only flushed into the
        open transaction. They stay pending until ``confirm_flushed`` runs
        after the commit, so a rolled back commit loses nothing.
        """
        if not self._pending or self.entity_id is None or self._saving:
            return []

        self._saving = True
        try:
            saved = self._flush_pending(commit)
        finally:
            self._saving = False

        self._preloaded.clear()
        self.clear_translation_cache()
        return saved

    def _flush_pending(self, commit):
        allowed = self.translatable_fields()
        saved = []

        for locale, values in list(self._pending.items()):
            valid = {f: v for f, v in values.items() if f in allowed}
            dropped = [f for f in values if f not in allowed]
            if dropped:
                logger.warning(
                    f"Dropping non-translatable fields {dropped} for "
                    f"{self.translation_type}#{self.entity_id} [{locale}]"
                )

            if all(v is None or v == '' for v in valid.values()):
                self._pending.pop(locale, None)
                continue

            result = self.store.bulk_set(
                self.translation_type, self.entity_id, locale, valid, commit=commit
            )
            if result.ok:
                saved.append(locale)
                if commit:
                    self._pending.pop(locale, None)
                    self._flushed.pop(locale, None)
                else:
                    self._flushed[locale] = dict(values)
            else:
                logger.warning(
                    f"Translations for {self.translation_type}#{self.entity_id} "
                    f"[{locale}] were not saved and stay pending"
                )
        return saved

    def confirm_flushed(self):
        """The transaction holding flushed locales committed: drop them from the buffer.

        A field restaged with a different value since the flush stays pending.
        """
        for locale, flushed in self._flushed.items():
            values = self._pending.get(locale)
            if values is None:
                continue
            for field, value in flushed.items():
                if field in values and values[field] == value:
                    del values[field]
            if not values:
                self._pending.pop(locale, None)
        self._flushed = {}

    def discard_flushed(self):
        """The transaction holding flushed locales rolled back: keep them pending."""
        if self._flushed:
            logger.warning(
                f"Translations for {self.translation_type}#{self.entity_id} "
                f"{sorted(self._flushed)} were rolled back and stay pending"
            )
        self._flushed = {}

    def save_translations_now(self):
        if self.entity_id is None:
            raise RuntimeError('Entity must be saved before saving translations.')
        self.save_translations()
        return self

    def clear_translation_cache(self, field=None, locale=None):
        """Forget cached reads for this entity (one field/locale, or everything)."""
        if self.entity_id is None:
            return
        if field and locale:
            self.store.clear_cache(self.translation_type, self.entity_id, locale, field)
            return
        locales = [locale] if locale else self.config.supported_locales
        for loc in locales:
            self.store.clear_cache(self.translation_type, self.entity_id, loc)
