"""add onboarding_completed flag to settings

Revision ID: 4
Revises: 3
Create Date: 2025-11-03
"""
from alembic import op
import sqlalchemy as sa

revision = 4
name = "add_onboarding_completed_to_settings"


def upgrade():
    op.add_column(
        'settings',
        sa.Column('onboarding_completed', sa.Boolean(), nullable=False, server_default=sa.text("0"))
    )
