"""
Unit economics of one bag — pricing screen.

Five inputs: PP rate (INR/kg), conversion cost (INR/bag), bag weight (grams),
transport (INR/bag) and profit margin (%). Everything else is derived.
"""

from .base import BaseCalculator, safe_divide


class UnitEconomicsCalculator(BaseCalculator):

    name = "unit_economics"

    def calculate(self, fields: dict) -> dict:
        pp_rate = self.parse_number(fields.get("pp_rate"))
        conversion_cost = self.parse_number(fields.get("conversion_cost"))
        bag_weight_grams = self.parse_number(fields.get("bag_weight"))
        transport = self.parse_number(fields.get("transport_per_bag"))
        margin = self.parse_number(fields.get("profit_margin"))

        bag_weight_kg = bag_weight_grams / 1000
        material_cost = pp_rate * bag_weight_kg
        effective_conversion = conversion_cost + transport
        vendor_cost = material_cost + effective_conversion

        sell_price = vendor_cost * (1 + margin / 100)
        net_profit = sell_price - vendor_cost
        price_per_kg = safe_divide(sell_price, bag_weight_kg)

        # Conversion the customer is implicitly paying for, per kg
        customer_conversion_per_kg = price_per_kg - pp_rate

        return {
            "bag_weight_kg": bag_weight_kg,
            "material_cost": material_cost,
            "effective_conversion": effective_conversion,
            "vendor_cost": vendor_cost,
            "sell_price": sell_price,
            "net_profit": net_profit,
            "profit_percent": safe_divide(net_profit, vendor_cost) * 100,
            "price_per_kg": price_per_kg,
            "customer_conversion_per_kg": customer_conversion_per_kg,
            "conversion_diff": customer_conversion_per_kg - effective_conversion,
        }
