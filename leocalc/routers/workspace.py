"""
Workspace endpoints — the supply schedule and quantities screens.

State lives in the workspace table under namespaced keys. Row operations load
the current list, apply a schedule/quantities function and write the result
back, so the supply list is date-sorted after every change.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .. import schemas, workspace
from ..auth import get_current_user
from ..calculators.base import to_number
from ..calculators.quantities import QuantitiesCalculator, price_for_margin
from ..database import get_db
from ..schedule import (
    add_allocation,
    add_supply_row,
    delete_supply_row,
    insert_supply_row,
    next_id,
    remove_allocation,
    schedule_summary,
    update_supply_row,
    vendor_summary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspace", tags=["workspace"], dependencies=[Depends(get_current_user)])


def _resolve_or_404(key: str) -> str:
    name = workspace.resolve_key(key)
    if name is None:
        raise HTTPException(status_code=404, detail=f"Unknown workspace key: {key}")
    return name


@router.get("/")
def get_state(db: Session = Depends(get_db)):
    return workspace.load_state(db)


# --- Summaries ---

@router.get("/summary")
def get_schedule_summary(db: Session = Depends(get_db)):
    """PO totals plus allocation stats for every vendor."""
    po_details = workspace.load(db, "po_details")
    vendors = workspace.load(db, "vendors")
    supplies = workspace.load(db, "supplies")
    summary = schedule_summary(po_details, supplies)
    summary["vendors"] = [
        {k: v for k, v in vendor_summary(vendors, supplies, a["name"]).items() if k != "rows"}
        for a in vendors
    ]
    return summary


@router.get("/vendors/{name}/summary")
def get_vendor_summary(name: str, db: Session = Depends(get_db)):
    vendors = workspace.load(db, "vendors")
    if not any(a.get("name") == name for a in vendors):
        raise HTTPException(status_code=404, detail=f"Vendor '{name}' not found")
    return vendor_summary(vendors, workspace.load(db, "supplies"), name)


@router.get("/products/summary")
def get_products_summary(db: Session = Depends(get_db)):
    return QuantitiesCalculator().calculate({"products": workspace.load(db, "products")})


# --- Supply rows ---

@router.post("/supplies")
def add_supply(row: Optional[schemas.SupplyRow] = None, db: Session = Depends(get_db)):
    """
    With no body: append the next weekly row for the first vendor.
    With a row: insert it where its date belongs.
    """
    supplies = workspace.load(db, "supplies")
    if row is None:
        supplies = add_supply_row(supplies, workspace.load(db, "vendors"))
    else:
        new_row = row.model_dump()
        new_row["planned_qty"] = to_number(new_row["planned_qty"])
        supplies = insert_supply_row(supplies, new_row)
    return workspace.save(db, "supplies", supplies)


@router.patch("/supplies/{row_id}")
def update_supply(row_id: int, update: schemas.SupplyRowUpdate, db: Session = Depends(get_db)):
    changes = update.model_dump(exclude_unset=True)
    if "planned_qty" in changes:
        changes["planned_qty"] = to_number(changes["planned_qty"])
    try:
        supplies = update_supply_row(workspace.load(db, "supplies"), row_id, changes)
    except KeyError:
        raise HTTPException(status_code=404, detail="Supply row not found")
    return workspace.save(db, "supplies", supplies)


@router.delete("/supplies/{row_id}")
def delete_supply(row_id: int, db: Session = Depends(get_db)):
    supplies = workspace.load(db, "supplies")
    if not any(r.get("id") == row_id for r in supplies):
        raise HTTPException(status_code=404, detail="Supply row not found")
    return workspace.save(db, "supplies", delete_supply_row(supplies, row_id))


# --- Vendor allocations ---

@router.post("/vendors", status_code=201)
def add_vendor(allocation: schemas.VendorAllocation, db: Session = Depends(get_db)):
    if not allocation.name.strip():
        raise HTTPException(status_code=422, detail="Vendor name is required")
    try:
        vendors = add_allocation(
            workspace.load(db, "vendors"),
            allocation.name,
            allocation.email,
            allocation.allocated_qty,
        )
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    logger.info("Added vendor allocation %s", allocation.name.strip())
    return workspace.save(db, "vendors", vendors)


@router.delete("/vendors/{name}")
def remove_vendor(name: str, db: Session = Depends(get_db)):
    vendors = workspace.load(db, "vendors")
    if not any(a.get("name") == name for a in vendors):
        raise HTTPException(status_code=404, detail=f"Vendor '{name}' not found")
    return workspace.save(db, "vendors", remove_allocation(vendors, name))


# --- Products ---

@router.post("/products", status_code=201)
def add_product(product: Optional[schemas.Product] = None, db: Session = Depends(get_db)):
    products = workspace.load(db, "products")
    new_product = (product or schemas.Product()).model_dump()
    new_product["id"] = next_id(products)
    for field in ("qty", "vendor_cost", "customer_price"):
        new_product[field] = to_number(new_product[field])
    return workspace.save(db, "products", products + [new_product])


@router.patch("/products/{product_id}")
def update_product(product_id: int, update: schemas.ProductUpdate, db: Session = Depends(get_db)):
    """
    Edit a product. A margin_percent back-solves customer_price from vendor_cost;
    a margin of 100% or more leaves the price as it was.
    """
    products = workspace.load(db, "products")
    product = next((p for p in products if p.get("id") == product_id), None)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")

    changes = update.model_dump(exclude_unset=True)
    margin = changes.pop("margin_percent", None)
    for field, value in changes.items():
        product[field] = value if field == "name" else to_number(value)

    if margin is not None:
        price = price_for_margin(product.get("vendor_cost"), margin)
        if price is not None:
            product["customer_price"] = price

    return workspace.save(db, "products", products)


@router.delete("/products/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db)):
    products = workspace.load(db, "products")
    if not any(p.get("id") == product_id for p in products):
        raise HTTPException(status_code=404, detail="Product not found")
    return workspace.save(db, "products", [p for p in products if p.get("id") != product_id])


# --- Whole values ---

@router.get("/{key}")
def get_entry(key: str, db: Session = Depends(get_db)):
    return workspace.load(db, _resolve_or_404(key))


@router.put("/{key}")
def put_entry(key: str, value: Any = Body(...), db: Session = Depends(get_db)):
    """Replace a whole workspace value. Last write wins."""
    name = _resolve_or_404(key)
    try:
        value = workspace.clean(name, value)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    return workspace.save(db, name, value)
