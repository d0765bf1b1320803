"""initial schema - leads, cadence steps, activities, pipeline history

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

For EXISTING databases created by the startup sync: run `alembic stamp 001_initial`.
For NEW databases: run `alembic upgrade head` (creates all tables from models).
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables from the SQLAlchemy models on the migration connection.

    checkfirst=True makes it safe on a database the startup sync already built.
    """
    from outreach.models import Base

    Base.metadata.create_all(bind=op.get_bind(), checkfirst=True)


def downgrade() -> None:
    """Drop all tables. DESTRUCTIVE: dev/test environments only."""
    from outreach.models import Base

    Base.metadata.drop_all(bind=op.get_bind())
