"""add_stored_documents_table

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-17 09:12:44.518203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # create_all() may already have created the table on a fresh database
    from sqlalchemy import inspect
    conn = op.get_bind()
    inspector = inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'stored_documents' not in existing_tables:
        op.create_table(
            'stored_documents',
            sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
            sa.Column('key', sa.String(length=255), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('version', sa.Integer(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_stored_documents_key', 'stored_documents', ['key'], unique=True)


def downgrade():
    op.drop_index('ix_stored_documents_key', table_name='stored_documents')
    op.drop_table('stored_documents')
