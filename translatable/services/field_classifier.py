"""Decides where a translatable field lives on the translations table.

Searchable fields are dedicated columns. Large fields share the
``large_fields`` JSON column. Anything else is unknown and is never
stored or read.
"""

import enum

from translatable.exceptions import TranslationConfigError


class FieldKind(enum.Enum):
    SEARCHABLE = 'searchable'
    LARGE = 'large'
    UNKNOWN = 'unknown'


class FieldClassifier:
    """Classify field names against the configured searchable/large lists."""

    def __init__(self, searchable_fields, large_fields):
        self._searchable = tuple(searchable_fields)
        self._large = tuple(large_fields)

        overlap = sorted(set(self._searchable) & set(self._large))
        if overlap:
            raise TranslationConfigError(
                f"Fields configured as both searchable and large: {', '.join(overlap)}"
            )

    @classmethod
    def from_config(cls, config):
        return cls(config.searchable_fields, config.large_fields)

    @property
    def searchable_fields(self) -> tuple:
        return self._searchable

    @property
    def large_fields(self) -> tuple:
        return self._large

    @property
    def known_fields(self) -> tuple:
        return self._searchable + self._large

    def classify(self, field: str) -> FieldKind:
        if field in self._searchable:
            return FieldKind.SEARCHABLE
        if field in self._large:
            return FieldKind.LARGE
        return FieldKind.UNKNOWN

    def is_searchable(self, field: str) -> bool:
        return self.classify(field) is FieldKind.SEARCHABLE

    def is_large(self, field: str) -> bool:
        return self.classify(field) is FieldKind.LARGE

    def is_known(self, field: str) -> bool:
        return self.classify(field) is not FieldKind.UNKNOWN

    def partition(self, fields):
        """Split field names into (searchable, large, unknown) lists, order kept."""
        searchable, large, unknown = [], [], []
        for field in fields:
            kind = self.classify(field)
            if kind is FieldKind.SEARCHABLE:
                searchable.append(field)
            elif kind is FieldKind.LARGE:
                large.append(field)
            else:
                unknown.append(field)
        return searchable, large, unknown
