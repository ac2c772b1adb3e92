"""
Two-sided cost analysis — buy from a vendor, sell to a customer.

Landed cost comes from the vendor comparison. On top of it, the gap
between customer and vendor credit terms is financed at the vendor's rate:

    cash_gap_days    = customer_credit_days − vendor_credit_days
    gap_financing    = landed_cost × cash_gap_days × (rate / 100) / 365
    realized_margin  = (sell − landed) × qty − gap_financing × qty

A positive gap means we pay the vendor before the customer pays us, so the
gap costs money. A negative gap earns it back.
"""

from ..config import settings
from .base import BaseCalculator, safe_divide
from .financing import financing_cost
from .vendor_ranking import VendorComparisonCalculator, assign_ranks, first_max, first_min

EMPTY_NAME = "-"


class BuyingAnalysisCalculator(BaseCalculator):

    name = "buying"

    def __init__(self):
        self.comparison = VendorComparisonCalculator()

    def analyse_entry(self, entry: dict) -> dict:
        base = self.parse_number(entry.get("base_price"))
        freight = self.parse_number(entry.get("freight"))
        days = self.parse_number(entry.get("credit_days"))
        qty = self.parse_number(entry.get("quantity"))
        rate = self.parse_optional(entry.get("interest_rate"), settings.DEFAULT_INTEREST_RATE)
        selling_price = self.parse_number(entry.get("selling_price"))
        customer_days = self.parse_number(entry.get("customer_credit_days"))

        landed = self.comparison.landed_cost(base, freight, days, rate)
        landed_cost = landed["landed_cost"]

        cash_gap_days = customer_days - days
        gap_financing = financing_cost(landed_cost, cash_gap_days, rate)

        revenue = selling_price * qty
        cogs = landed_cost * qty
        gross_margin = revenue - cogs
        realized_margin = (selling_price - landed_cost) * qty - gap_financing * qty

        return {
            "id": entry.get("id"),
            "name": entry.get("name") or "",
            "product_name": entry.get("product_name") or "",
            "base_price": base,
            "freight": freight,
            "credit_days": days,
            "quantity": qty,
            "interest_rate": rate,
            "selling_price": selling_price,
            "customer_credit_days": customer_days,
            "credit_savings": landed["credit_savings"],
            "landed_cost": landed_cost,
            "landed_cost_total": cogs,
            "cash_gap_days": cash_gap_days,
            "gap_financing": gap_financing,
            "gap_financing_total": gap_financing * qty,
            "revenue": revenue,
            "gross_margin": gross_margin,
            "realized_margin": realized_margin,
            "margin_percent": safe_divide(realized_margin, revenue) * 100,
        }

    def calculate(self, fields: dict) -> dict:
        rows = [self.analyse_entry(e) for e in fields.get("vendors") or []]
        if not rows:
            return {
                "vendors": [],
                "best_profit": {"name": EMPTY_NAME, "profit": 0.0},
                "lowest_cost": {"name": EMPTY_NAME, "cost": 0.0},
                "total_realized_margin": 0.0,
                "avg_cash_gap_days": 0.0,
            }

        assign_ranks(rows)
        top_profit = max(r["realized_margin"] for r in rows)
        for row in rows:
            row["is_top_profit"] = row["realized_margin"] == top_profit

        best = first_max(rows, "realized_margin")
        cheapest = first_min(rows, "landed_cost")

        return {
            "vendors": rows,
            "best_profit": {"name": best["name"] or "N/A", "profit": best["realized_margin"]},
            "lowest_cost": {"name": cheapest["name"] or "N/A", "cost": cheapest["landed_cost"]},
            "total_realized_margin": sum(r["realized_margin"] for r in rows),
            "avg_cash_gap_days": sum(r["cash_gap_days"] for r in rows) / len(rows),
        }
