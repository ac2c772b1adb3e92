"""fold calculations into archives

Revision ID: 9d3c7a1e6f20
Revises: 5b8e2f4a9c1d
Create Date: 2026-10-12 10:18:47.550212

Databases imported from the old app carry a `calculations` table
({id, name, date, pricing, freight}, camelCase input keys). Each row
becomes a type="calculator" archive and the table is dropped. No-op when the
table is absent.
"""
import json
import re
from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '9d3c7a1e6f20'
down_revision: Union[str, None] = '5b8e2f4a9c1d'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _snake(key):
    return re.sub(r"(?<!^)([A-Z])", r"_\1", key).lower()


def _inputs(value):
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            return {}
    if not isinstance(value, dict):
        return {}
    return {_snake(k): v for k, v in value.items()}


def _saved_at(value):
    """Old save time: a datetime, an ISO string or epoch milliseconds. None when unusable."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        value = datetime.fromtimestamp(value / 1000, timezone.utc)
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _bag_weight_grams(pricing):
    # Old bag weights were stored in kg
    if "bag_weight" in pricing:
        try:
            pricing["bag_weight"] = float(pricing["bag_weight"]) * 1000
        except (TypeError, ValueError):
            pricing["bag_weight"] = 0
    return pricing


def upgrade() -> None:
    bind = op.get_bind()
    if "calculations" not in inspect(bind).get_table_names():
        return

    archives = sa.table(
        "archives",
        sa.column("type", sa.String),
        sa.column("company_name", sa.String),
        sa.column("record_name", sa.String),
        sa.column("data", sa.JSON),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )

    rows = bind.execute(sa.text("SELECT * FROM calculations")).mappings().all()
    now = datetime.utcnow()
    for row in rows:
        pricing = _bag_weight_grams(_inputs(row.get("pricing")))
        saved_at = _saved_at(row.get("date")) or _saved_at(row.get("created_at")) or now
        op.bulk_insert(archives, [{
            "type": "calculator",
            "company_name": row.get("name") or "Unnamed",
            "record_name": row.get("name"),
            "data": {"type": "calculator", "pricing": pricing, "freight": _inputs(row.get("freight"))},
            "created_at": saved_at,
            "updated_at": now,
        }])

    op.drop_table("calculations")


def downgrade() -> None:
    pass  # Folded rows stay in archives
