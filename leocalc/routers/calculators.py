"""
Calculator endpoints — one POST per screen.

POST /api/calculators/{name} takes the screen's raw inputs and returns every
derived figure. Bad numbers never fail the request; they count as 0.
"""

from fastapi import APIRouter, Body, Depends, HTTPException

from ..auth import get_current_user
from ..calculators.packing import MAX_LAYOUT_ITEMS, PackingCalculator
from ..calculators.registry import get_calculator, has_calculator, list_calculators
from ..units import SUPPORTED_UNITS, convert_length

router = APIRouter(prefix="/calculators", tags=["calculators"], dependencies=[Depends(get_current_user)])


@router.get("/")
def available_calculators():
    return {"calculators": list_calculators(), "units": list(SUPPORTED_UNITS)}


@router.get("/units/convert")
def convert(value: str, from_unit: str, to_unit: str):
    """Convert a length between m / ft / cm / in / mm (4 decimals)."""
    try:
        converted = convert_length(value, from_unit, to_unit)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"value": converted, "unit": to_unit}


@router.post("/freight/layout")
def freight_layout(fields: dict = Body(...)):
    """Pallet positions for the loading view, capped at MAX_LAYOUT_ITEMS."""
    calc = PackingCalculator()
    result = calc.calculate(fields)
    positions = calc.layout(fields, limit=result["effective_count"])
    return {
        "effective_count": result["effective_count"],
        "rendered": len(positions),
        "capped": result["effective_count"] > MAX_LAYOUT_ITEMS,
        "vehicle_cm": result["vehicle_cm"],
        "bale_cm": result["bale_cm"],
        "positions": positions,
    }


@router.post("/{name}")
def run_calculator(name: str, fields: dict = Body(...)):
    if not has_calculator(name):
        raise HTTPException(status_code=404, detail=f"Unknown calculator: {name}")
    return get_calculator(name).calculate(fields)
