"""
Freight / pallet loading estimator.

Given a vehicle and a pallet (bale) in any supported unit, works out how many
whole pallets fit, derates by loading efficiency, and spreads the freight
charge over the pieces carried.

Axis naming follows the loading view: length runs along the truck, width is
the depth of the load, height stacks up. Layout positions are pallet centres
measured in cm from the centre of the vehicle box.
"""

import math

from ..units import length_unit, to_centimeters
from .base import BaseCalculator, is_blank, safe_divide

MAX_LAYOUT_ITEMS = 1000

PALLET_OK = "ok"
PALLET_NEEDS_INPUT = "needs_input"


class PackingCalculator(BaseCalculator):

    name = "freight"

    def calculate(self, fields: dict) -> dict:
        unit = length_unit(fields.get("unit"))

        vehicle = [to_centimeters(fields.get(k), unit) for k in ("vehicle_l", "vehicle_w", "vehicle_h")]
        bale = [to_centimeters(fields.get(k), unit) for k in ("bale_l", "bale_w", "bale_h")]

        axis_counts = [self.axis_count(v, b) for v, b in zip(vehicle, bale)]
        total_slots = axis_counts[0] * axis_counts[1] * axis_counts[2]

        efficiency = self.parse_number(fields.get("efficiency"))
        effective_count = math.floor(total_slots * (efficiency / 100))

        custom_count = fields.get("custom_count")
        overridden = not is_blank(custom_count)
        if overridden:
            effective_count = max(0, self.parse_int(custom_count))

        pallet = self.pallet_stats(
            fields.get("pallet_capacity"),
            fields.get("unit_weight"),
        )
        total_pieces = effective_count * pallet["pieces_per_pallet"]
        freight_charge = self.parse_number(fields.get("freight_charge"))

        return {
            "unit": unit,
            "vehicle_cm": {"l": vehicle[0], "w": vehicle[1], "h": vehicle[2]},
            "bale_cm": {"l": bale[0], "w": bale[1], "h": bale[2]},
            "axis_counts": {"l": axis_counts[0], "w": axis_counts[1], "h": axis_counts[2]},
            "total_slots": total_slots,
            "effective_count": effective_count,
            "count_overridden": overridden,
            "pieces_per_pallet": pallet["pieces_per_pallet"],
            "pallet_status": pallet["status"],
            "total_pieces": total_pieces,
            "freight_charge": freight_charge,
            "freight_per_piece": safe_divide(freight_charge, total_pieces),
        }

    def axis_count(self, container_cm: float, item_cm: float) -> int:
        """Whole items along one axis. A zero-length item counts as 1 rather than dividing by 0."""
        if item_cm <= 0:
            return 1
        return math.floor(container_cm / item_cm)

    def pallet_stats(self, capacity_kg, unit_weight_kg) -> dict:
        """
        Pieces per pallet from capacity and per-piece weight.
        Weight 0 is not a valid zero-piece answer — the screen must ask for input.
        """
        capacity = self.parse_number(capacity_kg)
        weight = self.parse_number(unit_weight_kg)
        if weight <= 0:
            return {"pieces_per_pallet": 0, "status": PALLET_NEEDS_INPUT}
        return {"pieces_per_pallet": math.floor(capacity / weight), "status": PALLET_OK}

    def layout(self, fields: dict, limit: int = None) -> list:
        """
        Pallet centre positions for the 3D loading view.

        Fills a stack to full height, then moves across the width, then
        along the length. Stops at the effective count (or `limit`) and never
        returns more than MAX_LAYOUT_ITEMS positions. Display only — counts
        come from calculate().
        """
        unit = length_unit(fields.get("unit"))
        v_l, v_w, v_h = (to_centimeters(fields.get(k), unit) for k in ("vehicle_l", "vehicle_w", "vehicle_h"))
        b_l, b_w, b_h = (to_centimeters(fields.get(k), unit) for k in ("bale_l", "bale_w", "bale_h"))
        if b_l <= 0 or b_w <= 0 or b_h <= 0:
            return []

        if limit is None:
            limit = self.calculate(fields)["effective_count"]
        limit = min(max(limit, 0), MAX_LAYOUT_ITEMS)

        n_l = math.floor(v_l / b_l)
        n_w = math.floor(v_w / b_w)
        n_h = math.floor(v_h / b_h)

        start_l = -v_l / 2 + b_l / 2
        start_w = -v_w / 2 + b_w / 2
        start_h = -v_h / 2 + b_h / 2

        positions = []
        for i in range(n_l):
            for j in range(n_w):
                for k in range(n_h):
                    if len(positions) >= limit:
                        return positions
                    positions.append({
                        "index": len(positions) + 1,
                        "l": start_l + i * b_l,
                        "w": start_w + j * b_w,
                        "h": start_h + k * b_h,
                    })
        return positions
