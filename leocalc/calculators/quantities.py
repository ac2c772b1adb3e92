"""
Quantities dashboard — profit across a list of products.
"""

import math

from .base import BaseCalculator, safe_divide, to_number

# Margin (% of price) thresholds for the dashboard colour bands
MARGIN_BANDS = [
    (30, "strong"),
    (15, "healthy"),
]


def margin_band(margin: float) -> str:
    for threshold, band in MARGIN_BANDS:
        if margin >= threshold:
            return band
    return "thin" if margin > 0 else "loss"


def price_for_margin(vendor_cost, margin_pct):
    """
    Back-solve the customer price that yields `margin_pct` (of price).
    Returns None when the margin cannot be reached (unparseable or >= 100%).
    """
    margin = to_number(margin_pct, default=float("nan"))
    if math.isnan(margin) or margin >= 100:
        return None
    cost = to_number(vendor_cost)
    return round(cost / (1 - margin / 100), 2)


class QuantitiesCalculator(BaseCalculator):

    name = "quantities"

    def analyse_product(self, product: dict) -> dict:
        qty = self.parse_number(product.get("qty"))
        vendor_cost = self.parse_number(product.get("vendor_cost"))
        customer_price = self.parse_number(product.get("customer_price"))

        unit_profit = customer_price - vendor_cost
        margin = safe_divide(unit_profit, customer_price) * 100
        return {
            "id": product.get("id"),
            "name": product.get("name") or "",
            "qty": qty,
            "vendor_cost": vendor_cost,
            "customer_price": customer_price,
            "unit_profit": unit_profit,
            "total_profit": unit_profit * qty,
            "margin_percent": margin,
            "margin_band": margin_band(margin),
        }

    def calculate(self, fields: dict) -> dict:
        rows = [self.analyse_product(p) for p in fields.get("products") or []]

        total_revenue = sum(r["qty"] * r["customer_price"] for r in rows)
        total_cost = sum(r["qty"] * r["vendor_cost"] for r in rows)
        total_profit = total_revenue - total_cost

        return {
            "products": rows,
            "total_revenue": total_revenue,
            "total_cost": total_cost,
            "total_profit": total_profit,
            "net_margin": safe_divide(total_profit, total_revenue) * 100,
            "avg_profit_per_product": safe_divide(total_profit, len(rows)),
            "total_sales_volume": sum(r["qty"] for r in rows),
        }
