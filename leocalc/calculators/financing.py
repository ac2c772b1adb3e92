"""
Payment delay calculator — what a late-paying customer costs in interest.

financing_cost = cost × days × (rate / 100) / 365

Simple daily proration, never compounded. Days are unbounded: a 400-day
delay is valid input and simply costs more than a year's interest.
"""

from .base import BaseCalculator, safe_divide

DAYS_PER_YEAR = 365


def financing_cost(cost: float, days: float, annual_rate_pct: float) -> float:
    """Interest on `cost` carried for `days` at a simple annual rate."""
    return cost * days * (annual_rate_pct / 100) / DAYS_PER_YEAR


class PaymentDelayCalculator(BaseCalculator):

    name = "payment_delay"

    def calculate(self, fields: dict) -> dict:
        cost = self.parse_number(fields.get("vendor_cost"))
        price = self.parse_number(fields.get("selling_price"))
        rate = self.parse_number(fields.get("interest_rate"))
        days = self.parse_number(fields.get("payment_delay"))

        gross_profit = price - cost
        interest = financing_cost(cost, days, rate)
        net_profit = gross_profit - interest

        erosion = interest / gross_profit * 100 if gross_profit > 0 else 0.0

        # Cost of carrying the receivable for one more day
        daily_carry = financing_cost(cost, 1, rate)

        return {
            "product_name": fields.get("product_name") or "",
            "gross_profit": gross_profit,
            "gross_margin": safe_divide(gross_profit, price) * 100,
            "financing_cost": interest,
            "net_profit": net_profit,
            "net_margin": safe_divide(net_profit, price) * 100,
            "erosion_percent": erosion,
            "profit_loss": gross_profit - net_profit,
            "daily_carry_cost": daily_carry,
            "monthly_carry_cost": daily_carry * 30,
        }
