"""create weekly summaries table

Revision ID: 3
Revises: 2
Create Date: 2025-10-13
"""
from alembic import op
import sqlalchemy as sa

revision = 3
name = "create_weekly_summaries_table"


def upgrade():
    op.create_table(
        'weekly_summaries',
        sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
        sa.Column('iso_year', sa.Integer(), nullable=False),
        sa.Column('week_of_year', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.String(10), nullable=False),
        sa.Column('end_date', sa.String(10), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('iso_year', 'week_of_year', name='uq_weekly_summaries_iso_week')
    )
