"""
Vendor comparison — true landed cost, L1 ranking and value score.

For each quote:
    credit_savings = base × credit_days × (rate / 100) / 365
    landed_cost    = base + freight − credit_savings

The lowest landed cost is L1. The value score (0–100) blends price 40%,
credit terms 20%, logistics 20% and quality 20%.
"""

from ..config import settings
from .base import BaseCalculator, round_half_up, safe_divide
from .financing import financing_cost

PRICE_WEIGHT = 40
CREDIT_WEIGHT = 20
LOGISTICS_WEIGHT = 20
QUALITY_WEIGHT = 20

# Freight under this share of base price earns the "Good" logistics badge
LOGISTICS_GOOD_RATIO = 0.05


def assign_ranks(rows: list, key: str = "landed_cost") -> list:
    """
    Rank rows by ascending `key` as "L1", "L2", ...

    Stable: equal values keep input order, and every row takes the rank of
    the first row holding its value, so ties share a rank.
    """
    ordered = sorted(rows, key=lambda r: r[key])
    for row in rows:
        position = next(i for i, r in enumerate(ordered) if r[key] == row[key])
        row["rank"] = f"L{position + 1}"
        row["is_l1"] = position == 0
    return rows


def first_min(rows: list, key: str):
    """First row (input order) with the smallest `key`, or None."""
    best = None
    for row in rows:
        if best is None or row[key] < best[key]:
            best = row
    return best


def first_max(rows: list, key: str):
    """First row (input order) with the largest `key`, or None."""
    best = None
    for row in rows:
        if best is None or row[key] > best[key]:
            best = row
    return best


class VendorComparisonCalculator(BaseCalculator):

    name = "vendor_comparison"

    def landed_cost(self, base: float, freight: float, days: float, rate: float) -> dict:
        credit_savings = financing_cost(base, days, rate)
        return {
            "credit_savings": credit_savings,
            "landed_cost": base + freight - credit_savings,
        }

    def parse_vendor(self, vendor: dict) -> dict:
        return {
            "id": vendor.get("id"),
            "name": vendor.get("name") or "",
            "base_price": self.parse_number(vendor.get("base_price")),
            "freight": self.parse_number(vendor.get("freight")),
            "credit_days": self.parse_number(vendor.get("credit_days")),
            "interest_rate": self.parse_optional(vendor.get("interest_rate"), settings.DEFAULT_INTEREST_RATE),
            "quality": self.parse_optional(vendor.get("quality"), 100.0),
        }

    def value_score(self, row: dict, min_base: float, max_days: float, min_freight: float) -> dict:
        base = row["base_price"]
        freight = row["freight"]

        price_score = safe_divide(min_base, base) * PRICE_WEIGHT if base > 0 else 0.0
        credit_score = safe_divide(row["credit_days"], max_days) * CREDIT_WEIGHT

        if freight > 0:
            logistics_score = min_freight / freight * LOGISTICS_WEIGHT
        elif freight == 0 and min_freight == 0:
            logistics_score = float(LOGISTICS_WEIGHT)
        else:
            logistics_score = 0.0

        quality_score = row["quality"] / 100 * QUALITY_WEIGHT

        scored = base > 0
        total = round_half_up(price_score + credit_score + logistics_score + quality_score) if scored else 0
        return {
            "price_score": price_score,
            "credit_score": credit_score,
            "logistics_score": logistics_score,
            "quality_score": quality_score,
            "total_score": total,
            "scored": scored,
        }

    def calculate(self, fields: dict) -> dict:
        vendors = [self.parse_vendor(v) for v in fields.get("vendors") or []]
        if not vendors:
            return {
                "vendors": [],
                "l1_winner": None,
                "best_value": None,
                "avg_base_price": 0.0,
                "avg_freight": 0.0,
                "projected_savings": 0.0,
                "yield_variance": None,
            }

        # Normalizers for the score. Blank prices never become the benchmark.
        positive_bases = [v["base_price"] for v in vendors if v["base_price"] > 0]
        min_base = min(positive_bases) if positive_bases else 0.0
        max_days = max(v["credit_days"] for v in vendors) or 1
        min_freight = min(v["freight"] for v in vendors)

        for row in vendors:
            row.update(self.landed_cost(row["base_price"], row["freight"], row["credit_days"], row["interest_rate"]))
            row["logistics_good"] = row["freight"] < row["base_price"] * LOGISTICS_GOOD_RATIO
            row.update(self.value_score(row, min_base, max_days, min_freight))

        assign_ranks(vendors)
        l1 = first_min(vendors, "landed_cost")
        best = first_max(vendors, "total_score")

        for row in vendors:
            if row is l1 or l1["landed_cost"] == 0:
                row["pct_above_l1"] = 0.0
            else:
                row["pct_above_l1"] = (row["landed_cost"] - l1["landed_cost"]) / l1["landed_cost"] * 100

        count = len(vendors)
        max_landed = max(v["landed_cost"] for v in vendors)
        return {
            "vendors": vendors,
            "l1_winner": {"id": l1["id"], "name": l1["name"], "landed_cost": l1["landed_cost"]},
            "best_value": {"id": best["id"], "name": best["name"], "total_score": best["total_score"]},
            "avg_base_price": sum(v["base_price"] for v in vendors) / count,
            "avg_freight": sum(v["freight"] for v in vendors) / count,
            "projected_savings": max_landed - l1["landed_cost"],
            "yield_variance": 100 - l1["quality"],
        }
