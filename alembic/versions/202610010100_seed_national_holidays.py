"""seed_national_holidays

Revision ID: 202610010100
Revises: 202610010000
Create Date: 2026-10-01 01:00:00.000000

Seed national holidays for the seed years into every existing organization.
Dates an organization already has as national holidays are skipped, so the
migration is safe to run on partially seeded data. Organizations created
later are seeded by the admin create path.
"""
from typing import Sequence, Union
import sys
import os

# Add src directory to path to import helpers
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from alembic import op
import sqlalchemy as sa

from core.constants import HOLIDAY_SEED_YEARS
from utils.datetime_utils import clinic_now
from utils.holiday_calendar import national_holidays_for_years


# revision identifiers, used by Alembic.
revision: str = '202610010100'
down_revision: Union[str, None] = '202610010000'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


organization_table = sa.table(
    'organization',
    sa.column('id', sa.Uuid),
)

holidays_table = sa.table(
    'holidays',
    sa.column('organization_id', sa.Uuid),
    sa.column('date', sa.Date),
    sa.column('name', sa.String),
    sa.column('type', sa.String),
    sa.column('created_at', sa.TIMESTAMP(timezone=True)),
)


def upgrade() -> None:
    conn = op.get_bind()
    calendar = national_holidays_for_years(HOLIDAY_SEED_YEARS)
    now = clinic_now()

    organization_ids = conn.execute(sa.select(organization_table.c.id)).scalars().all()
    for organization_id in organization_ids:
        existing = set(conn.execute(
            sa.select(holidays_table.c.date).where(
                holidays_table.c.organization_id == organization_id,
                holidays_table.c.type == 'national',
            )
        ).scalars().all())

        rows = [
            {
                'organization_id': organization_id,
                'date': entry.date,
                'name': entry.name,
                'type': 'national',
                'created_at': now,
            }
            for entry in calendar
            if entry.date not in existing
        ]
        if rows:
            op.bulk_insert(holidays_table, rows)


def downgrade() -> None:
    dates = [entry.date for entry in national_holidays_for_years(HOLIDAY_SEED_YEARS)]
    op.execute(
        holidays_table.delete().where(
            holidays_table.c.type == 'national',
            holidays_table.c.date.in_(dates),
        )
    )
