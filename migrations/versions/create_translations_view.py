"""Create translations_view over the translations table.

Revision ID: create_translations_view
Revises: create_translations_table
Create Date: 2026-10-19
"""
from alembic import op


# revision identifiers, used by Alembic.
revision = 'create_translations_view'
down_revision = 'create_translations_table'
branch_labels = None
depends_on = None

VIEW_SELECT = """
    SELECT
        t.translatable_type,
        t.translatable_id,
        t.locale,
        t.title,
        t.slug,
        t.description,
        t.excerpt,
        t.meta_title,
        t.meta_description,
        t.large_fields,
        t.updated_at,
        t.created_at
    FROM translations t
"""


def upgrade():
    dialect = op.get_bind().dialect.name

    if dialect in ('mysql', 'mariadb'):
        op.execute('DROP VIEW IF EXISTS `translations_view`')
        op.execute(f'CREATE VIEW `translations_view` AS {VIEW_SELECT}')
    elif dialect == 'postgresql':
        op.execute('DROP VIEW IF EXISTS translations_view CASCADE')
        op.execute(f'CREATE VIEW translations_view AS {VIEW_SELECT}')
    else:
        op.execute('DROP VIEW IF EXISTS translations_view')
        op.execute(f'CREATE VIEW translations_view AS {VIEW_SELECT}')


def downgrade():
    op.execute('DROP VIEW IF EXISTS translations_view')
