"""initial_schema_baseline

Revision ID: 202610010000
Revises: 
Create Date: 2026-10-01 00:00:00.000000

Baseline migration that creates every table from the current model
definitions: organization, member, professionals, patients, appointments,
blocked_days, holidays, conversations, conversation_members, messages and
outbox_events, with their indexes and constraints.
"""
from typing import Sequence, Union
import sys
import os

# Add src directory to path to import models
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from alembic import op

# Import all models to ensure they're registered with Base.metadata
from core.database import Base
import models  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '202610010000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all database tables from SQLAlchemy models."""
    Base.metadata.create_all(bind=op.get_bind())


def downgrade() -> None:
    """
    Drop all tables.

    WARNING: This will permanently delete all data.
    """
    Base.metadata.drop_all(bind=op.get_bind())
