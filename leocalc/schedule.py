"""
Supply schedule — dated delivery rows against a customer PO.

Rows are plain dicts: {id, week, vendor, planned_qty, date, status, notes}.
`date` is an ISO string (YYYY-MM-DD) or empty. `vendor` is a free-text name
that usually matches a vendor allocation, but nothing enforces that.

Every function that changes rows returns a new list sorted by date, rows
without a usable date last.
"""

import calendar
import math
from datetime import date, timedelta

from .calculators.base import to_number


SUPPLY_STATUSES = ["Planned", "In Transit", "Partial", "Received"]
DEFAULT_STATUS = "Planned"

# Undated rows sort as if due on this day
FAR_FUTURE = date(9999, 12, 31)

ORDINALS = {1: "1st", 2: "2nd", 3: "3rd"}


def parse_date(value):
    """ISO date string (or date) → date. Anything unusable → None."""
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None


def week_label(value) -> str:
    """
    "{ordinal} week of {Month}" for a date.

    Ordinal is ceil(day / 7), capped at "4th" — days 29-31 are the 4th week too.
    """
    d = parse_date(value)
    if d is None:
        return ""
    week_num = math.ceil(d.day / 7)
    ordinal = ORDINALS.get(week_num, "4th")
    return f"{ordinal} week of {calendar.month_name[d.month]}"


def _sort_key(row: dict):
    return parse_date(row.get("date")) or FAR_FUTURE


def sort_supplies(rows: list) -> list:
    """Stable sort by date ascending, undated rows last."""
    return sorted(rows, key=_sort_key)


def next_id(items: list) -> int:
    return max([int(to_number(i.get("id"))) for i in items] + [0]) + 1


def assign_ids(items: list) -> list:
    """Give items with a missing or repeated id the next free id. The first holder of an id keeps it."""
    free = next_id(items)
    seen = set()
    result = []
    for item in items:
        item = dict(item)
        if item.get("id") is None or item["id"] in seen:
            item["id"] = free
            free += 1
        seen.add(item["id"])
        result.append(item)
    return result


def add_supply_row(rows: list, allocations: list, today: date = None) -> list:
    """
    Append a new row one week after the last row's date (today if there is none),
    assigned to the first allocated vendor.
    """
    today = today or date.today()
    last = rows[-1] if rows else None
    last_date = parse_date(last.get("date")) if last else None
    next_date = last_date + timedelta(days=7) if last_date else today

    new_row = {
        "id": next_id(rows),
        "week": week_label(next_date),
        "vendor": allocations[0]["name"] if allocations else "",
        "planned_qty": 0,
        "date": next_date.isoformat(),
        "status": DEFAULT_STATUS,
        "notes": "",
    }
    return sort_supplies(list(rows) + [new_row])


def insert_supply_row(rows: list, row: dict) -> list:
    """Insert a fully specified row. A missing or taken id is replaced with the next free one."""
    new_row = dict(row)
    if new_row.get("id") is None or any(r.get("id") == new_row["id"] for r in rows):
        new_row["id"] = next_id(rows)
    if new_row.get("date"):
        new_row["week"] = week_label(new_row["date"])
    new_row.setdefault("status", DEFAULT_STATUS)
    return sort_supplies(list(rows) + [new_row])


def update_supply_row(rows: list, row_id: int, changes: dict) -> list:
    """
    Apply field changes to one row and re-sort. A date change relabels the week.
    Raises KeyError if no row has `row_id`.
    """
    if not any(r.get("id") == row_id for r in rows):
        raise KeyError(row_id)

    updated = []
    for row in rows:
        if row.get("id") != row_id:
            updated.append(row)
            continue
        new_row = {**row, **changes}
        if "date" in changes:
            new_row["week"] = week_label(changes["date"])
        updated.append(new_row)
    return sort_supplies(updated)


def delete_supply_row(rows: list, row_id: int) -> list:
    """Remove a row. Unknown ids are a no-op."""
    return [r for r in rows if r.get("id") != row_id]


# --- Totals ---

def planned_total(rows: list) -> float:
    return sum(to_number(r.get("planned_qty")) for r in rows)


def balance_and_excess(target_qty, planned: float) -> dict:
    target = to_number(target_qty)
    return {
        "balance": max(0.0, target - planned),
        "excess": max(0.0, planned - target),
    }


def date_stats(rows: list) -> dict:
    """Span of the schedule in days (inclusive) and its closure (last) date."""
    dates = [d for d in (parse_date(r.get("date")) for r in rows) if d is not None]
    if not dates:
        return {"total_days": 0, "closure_date": "-"}
    first, last = min(dates), max(dates)
    return {
        "total_days": (last - first).days + 1,
        "closure_date": last.isoformat(),
    }


def schedule_summary(po_details: dict, rows: list) -> dict:
    """PO-level totals: planned quantity against the PO total, plus date span."""
    planned = planned_total(rows)
    summary = {
        "total_qty": to_number((po_details or {}).get("total_qty")),
        "total_planned": planned,
        **balance_and_excess((po_details or {}).get("total_qty"), planned),
        **date_stats(rows),
    }
    return summary


def vendor_summary(allocations: list, rows: list, vendor_name: str) -> dict:
    """Allocation vs planned quantity for one vendor's rows."""
    allocation = next((a for a in allocations if a.get("name") == vendor_name), None)
    vendor_rows = [r for r in rows if r.get("vendor") == vendor_name]
    allocated = to_number(allocation.get("allocated_qty")) if allocation else 0.0
    planned = planned_total(vendor_rows)
    return {
        "vendor": vendor_name,
        "total_qty": allocated,
        "total_planned": planned,
        **balance_and_excess(allocated, planned),
        "rows": vendor_rows,
    }


# --- Vendor allocations ---

def add_allocation(allocations: list, name: str, email: str = "", allocated_qty=0) -> list:
    """
    Register a vendor allocation. Names are trimmed and must be unique.
    Raises ValueError for a blank or duplicate name.
    """
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValueError("Vendor name is required")
    if any(a.get("name") == clean_name for a in allocations):
        raise ValueError(f"Vendor '{clean_name}' already exists")
    return list(allocations) + [{
        "name": clean_name,
        "email": (email or "").strip(),
        "allocated_qty": to_number(allocated_qty),
    }]


def remove_allocation(allocations: list, name: str) -> list:
    """Drop an allocation. Rows naming the vendor are left as they are."""
    return [a for a in allocations if a.get("name") != name]
