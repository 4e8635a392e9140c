"""create entries table

Revision ID: 1
Revises: None
Create Date: 2025-10-06
"""
from alembic import op
import sqlalchemy as sa

revision = 1
name = "create_entries_table"


def upgrade():
    op.create_table(
        'entries',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('date', sa.String(10), nullable=False),
        sa.Column('week_of_year', sa.Integer(), nullable=False),
        sa.Column('iso_year', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_entries_date', 'entries', ['date'])
    op.create_index('ix_entries_created_at', 'entries', ['created_at'])
    op.create_index('ix_entries_iso_week', 'entries', ['iso_year', 'week_of_year'])
