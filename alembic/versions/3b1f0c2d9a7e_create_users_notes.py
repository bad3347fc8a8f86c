"""create users and notes

Revision ID: 3b1f0c2d9a7e
Revises: 
Create Date: 2026-10-18 09:12:40.118503

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from notes_api.database import Base
from notes_api.models import note, user  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '3b1f0c2d9a7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema by creating the users and notes tables."""
    bind = op.get_bind()
    Base.metadata.create_all(bind)


def downgrade() -> None:
    """Downgrade schema by dropping the users and notes tables."""
    bind = op.get_bind()
    Base.metadata.drop_all(bind)
