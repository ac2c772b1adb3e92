"""
Workspace state — the live schedule and products screens, one JSON value per key.

Keys are namespaced (leocalc_poDetails, leocalc_vendors, ...). Short names
("po_details", "vendors", ...) resolve to the same entries. Writes replace the
whole value; last write wins.
"""

import copy
from datetime import datetime
from typing import List

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from . import models, schemas
from .calculators.base import to_number
from .schedule import assign_ids, sort_supplies, week_label

DEFAULTS = {
    "po_details": {"customer_name": "", "customer_email": "", "po_number": "", "total_qty": 0},
    "vendors": [],
    "supplies": [],
    "products": [],
}

# Whole-value writes are checked against the same row models the row endpoints use
SCHEMAS = {
    "po_details": TypeAdapter(schemas.PODetails),
    "vendors": TypeAdapter(List[schemas.VendorAllocation]),
    "supplies": TypeAdapter(List[schemas.SupplyRow]),
    "products": TypeAdapter(List[schemas.Product]),
}

NUMBER_FIELDS = {
    "po_details": ("total_qty",),
    "vendors": ("allocated_qty",),
    "supplies": ("planned_qty",),
    "products": ("qty", "vendor_cost", "customer_price"),
}


def resolve_key(key: str):
    """Short or namespaced key → short name. None if the key is not a workspace key."""
    if key in models.WORKSPACE_KEYS:
        return key
    for name, namespaced in models.WORKSPACE_KEYS.items():
        if namespaced == key:
            return name
    return None


def clean(name: str, value):
    """
    Validate a whole workspace value and normalize it for storage.

    Numbers are coerced, supply and product ids are made unique and supply week
    labels are derived from their dates. Raises pydantic.ValidationError.
    """
    validated = SCHEMAS[name].validate_python(value)
    if name == "po_details":
        items = [validated.model_dump()]
    else:
        items = [item.model_dump() for item in validated]

    for item in items:
        for field in NUMBER_FIELDS[name]:
            item[field] = to_number(item[field])

    if name == "po_details":
        return items[0]
    if name in ("supplies", "products"):
        items = assign_ids(items)
    if name == "supplies":
        for item in items:
            item["week"] = week_label(item["date"])
    return items


def load(db: Session, name: str):
    entry = db.query(models.WorkspaceEntry).filter(
        models.WorkspaceEntry.key == models.WORKSPACE_KEYS[name]
    ).first()
    if entry is None or entry.value is None:
        return copy.deepcopy(DEFAULTS[name])
    return copy.deepcopy(entry.value)


def save(db: Session, name: str, value):
    """Replace a workspace value. Supplies are stored date-sorted."""
    if name == "supplies":
        value = sort_supplies(value or [])
    key = models.WORKSPACE_KEYS[name]
    entry = db.query(models.WorkspaceEntry).filter(models.WorkspaceEntry.key == key).first()
    if entry is None:
        entry = models.WorkspaceEntry(key=key)
        db.add(entry)
    entry.value = value
    entry.updated_at = datetime.utcnow()
    db.commit()
    return value


def load_state(db: Session) -> dict:
    return {name: load(db, name) for name in models.WORKSPACE_KEYS}
