"""Create translations table.

Revision ID: create_translations_table
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_translations_table'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('translations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('translatable_type', sa.String(length=255), nullable=False),
        sa.Column('translatable_id', sa.Integer(), nullable=False),
        sa.Column('locale', sa.String(length=10), nullable=False),
        # Searchable fields
        sa.Column('title', sa.String(length=255), nullable=True),
        sa.Column('slug', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('meta_title', sa.String(length=255), nullable=True),
        sa.Column('meta_description', sa.Text(), nullable=True),
        # Large fields: content, body, full_text
        sa.Column('large_fields', sa.JSON(), nullable=True),
        # Legacy key/value pair
        sa.Column('key', sa.String(length=255), nullable=True),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('translatable_type', 'translatable_id', 'locale',
                            name='unique_translation_locale')
    )

    op.create_index(op.f('ix_translations_translatable_type'), 'translations', ['translatable_type'], unique=False)
    op.create_index(op.f('ix_translations_translatable_id'), 'translations', ['translatable_id'], unique=False)
    op.create_index(op.f('ix_translations_locale'), 'translations', ['locale'], unique=False)
    op.create_index(op.f('ix_translations_title'), 'translations', ['title'], unique=False)
    op.create_index(op.f('ix_translations_slug'), 'translations', ['slug'], unique=False)
    op.create_index(op.f('ix_translations_key'), 'translations', ['key'], unique=False)

    # Composite indexes for the read paths
    op.create_index('idx_translatable', 'translations', ['translatable_type', 'translatable_id', 'locale'], unique=False)
    op.create_index('idx_locale_slug', 'translations', ['locale', 'slug'], unique=False)
    op.create_index('idx_locale_title', 'translations', ['locale', 'title'], unique=False)
    op.create_index('idx_type_locale', 'translations', ['translatable_type', 'locale'], unique=False)

    # Full-text search index (MySQL/MariaDB only)
    if op.get_bind().dialect.name in ('mysql', 'mariadb'):
        op.create_index('idx_fulltext_search', 'translations', ['title', 'description'],
                        unique=False, mysql_prefix='FULLTEXT')


def downgrade():
    op.execute('DROP VIEW IF EXISTS translations_view')

    if op.get_bind().dialect.name in ('mysql', 'mariadb'):
        op.drop_index('idx_fulltext_search', table_name='translations')

    op.drop_index('idx_type_locale', table_name='translations')
    op.drop_index('idx_locale_title', table_name='translations')
    op.drop_index('idx_locale_slug', table_name='translations')
    op.drop_index('idx_translatable', table_name='translations')
    op.drop_index(op.f('ix_translations_key'), table_name='translations')
    op.drop_index(op.f('ix_translations_slug'), table_name='translations')
    op.drop_index(op.f('ix_translations_title'), table_name='translations')
    op.drop_index(op.f('ix_translations_locale'), table_name='translations')
    op.drop_index(op.f('ix_translations_translatable_id'), table_name='translations')
    op.drop_index(op.f('ix_translations_translatable_type'), table_name='translations')

    op.drop_table('translations')
