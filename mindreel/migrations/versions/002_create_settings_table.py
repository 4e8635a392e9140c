"""create singleton settings table and seed the default row

Revision ID: 2
Revises: 1
Create Date: 2025-10-06
"""
from alembic import op
import sqlalchemy as sa

from mindreel.config import DEFAULT_GLOBAL_SHORTCUT, DEFAULT_POPUP_INTERVAL_MINUTES

revision = 2
name = "create_settings_table"


def upgrade():
    settings = op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('popup_interval_minutes', sa.Integer(), nullable=False),
        sa.Column('global_shortcut', sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('id = 1', name='ck_settings_singleton'),
        sa.CheckConstraint('popup_interval_minutes >= 0', name='ck_settings_interval_non_negative')
    )

    # Runner passes the configured defaults; fall back to the documented ones
    defaults = op.get_context().opts.get('settings_defaults') or {}
    op.bulk_insert(settings, [
        {
            'id': 1,
            'popup_interval_minutes': defaults.get('popup_interval_minutes', DEFAULT_POPUP_INTERVAL_MINUTES),
            'global_shortcut': defaults.get('global_shortcut', DEFAULT_GLOBAL_SHORTCUT),
        }
    ])
