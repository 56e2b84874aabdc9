"""Translation model: one row per (translatable type, id, locale).

Searchable fields are plain columns. Large fields live in the
``large_fields`` JSON column. ``translations_view`` is a read-only
projection of the same table used by the read path.
"""

from datetime import datetime, timezone

import sqlalchemy as sa

from translatable import db


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Translation(db.Model):
    """Translated values of one entity in one locale."""

    __tablename__ = 'translations'

    id = db.Column(db.Integer, primary_key=True)
    translatable_type = db.Column(db.String(255), nullable=False, index=True)
    translatable_id = db.Column(db.Integer, nullable=False, index=True)
    locale = db.Column(db.String(10), nullable=False, index=True)

    # Searchable fields (columns, filterable and indexable)
    title = db.Column(db.String(255), nullable=True, index=True)
    slug = db.Column(db.String(255), nullable=True, index=True)
    description = db.Column(db.Text, nullable=True)
    excerpt = db.Column(db.Text, nullable=True)
    meta_title = db.Column(db.String(255), nullable=True)
    meta_description = db.Column(db.Text, nullable=True)

    # Large fields: {"content": "...", "body": "..."}
    large_fields = db.Column(db.JSON, nullable=True)

    # Legacy key/value pair, kept for rows written by the old schema
    key = db.Column(db.String(255), nullable=True, index=True)
    value = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint(
            'translatable_type', 'translatable_id', 'locale',
            name='unique_translation_locale'
        ),
        db.Index('idx_translatable', 'translatable_type', 'translatable_id', 'locale'),
        db.Index('idx_locale_slug', 'locale', 'slug'),
        db.Index('idx_locale_title', 'locale', 'title'),
        db.Index('idx_type_locale', 'translatable_type', 'locale'),
    )

    def __repr__(self):
        return f'<Translation {self.translatable_type}#{self.translatable_id} [{self.locale}]>'

    @classmethod
    def for_locale(cls, locale):
        return cls.query.filter_by(locale=locale)

    @classmethod
    def for_type(cls, translatable_type):
        return cls.query.filter_by(translatable_type=translatable_type)

    @classmethod
    def for_key(cls, key):
        """Legacy key/value rows only."""
        return cls.query.filter_by(key=key)

    @classmethod
    def find_for_locale(cls, translatable_type, translatable_id, locale):
        return cls.query.filter_by(
            translatable_type=translatable_type,
            translatable_id=translatable_id,
            locale=locale,
        ).first()

    @classmethod
    def get_or_create_for_locale(cls, translatable_type, translatable_id, locale, data=None):
        """Return the row for the locale, creating it (with ``data``) if missing.

        The new row is added to the session but not committed.
        """
        translation = cls.find_for_locale(translatable_type, translatable_id, locale)
        if translation is None:
            translation = cls(
                translatable_type=translatable_type,
                translatable_id=translatable_id,
                locale=locale,
                **(data or {})
            )
            db.session.add(translation)
        return translation

    @classmethod
    def update_or_create_for_locale(cls, translatable_type, translatable_id, locale, data=None):
        translation = cls.get_or_create_for_locale(translatable_type, translatable_id, locale)
        for name, value in (data or {}).items():
            setattr(translation, name, value)
        return translation

    def get_large_field(self, name):
        return (self.large_fields or {}).get(name)

    def set_large_field(self, name, value):
        """Set one large field. ``None`` removes the key instead of storing null."""
        data = dict(self.large_fields or {})
        if value is None:
            data.pop(name, None)
        else:
            data[name] = value
        # Reassign so the JSON column is marked dirty
        self.large_fields = data

    def to_dict(self):
        return {
            'id': self.id,
            'translatable_type': self.translatable_type,
            'translatable_id': self.translatable_id,
            'locale': self.locale,
            'title': self.title,
            'slug': self.slug,
            'description': self.description,
            'excerpt': self.excerpt,
            'meta_title': self.meta_title,
            'meta_description': self.meta_description,
            'large_fields': dict(self.large_fields or {}),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


VIEW_NAME = 'translations_view'

VIEW_COLUMNS = (
    'translatable_type',
    'translatable_id',
    'locale',
    'title',
    'slug',
    'description',
    'excerpt',
    'meta_title',
    'meta_description',
    'large_fields',
    'updated_at',
    'created_at',
)

CREATE_VIEW_SQL = (
    f"CREATE VIEW {VIEW_NAME} AS SELECT "
    + ', '.join(f't.{column}' for column in VIEW_COLUMNS)
    + f" FROM {Translation.__tablename__} t"
)

DROP_VIEW_SQL = f'DROP VIEW IF EXISTS {VIEW_NAME}'

# Lives on its own MetaData so db.create_all() never creates it as a table
view_metadata = sa.MetaData()

translations_view = sa.Table(
    VIEW_NAME,
    view_metadata,
    sa.Column('translatable_type', sa.String(255)),
    sa.Column('translatable_id', sa.Integer),
    sa.Column('locale', sa.String(10)),
    sa.Column('title', sa.String(255)),
    sa.Column('slug', sa.String(255)),
    sa.Column('description', sa.Text),
    sa.Column('excerpt', sa.Text),
    sa.Column('meta_title', sa.String(255)),
    sa.Column('meta_description', sa.Text),
    sa.Column('large_fields', sa.JSON),
    sa.Column('updated_at', sa.DateTime),
    sa.Column('created_at', sa.DateTime),
)

sa.event.listen(Translation.__table__, 'after_create', sa.DDL(DROP_VIEW_SQL))
sa.event.listen(Translation.__table__, 'after_create', sa.DDL(CREATE_VIEW_SQL))
sa.event.listen(Translation.__table__, 'before_drop', sa.DDL(DROP_VIEW_SQL))
