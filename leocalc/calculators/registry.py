"""
Calculator registry — maps screen names to calculator classes.
"""

from .base import BaseCalculator
from .buying import BuyingAnalysisCalculator
from .financing import PaymentDelayCalculator
from .packing import PackingCalculator
from .quantities import QuantitiesCalculator
from .unit_economics import UnitEconomicsCalculator
from .vendor_ranking import VendorComparisonCalculator

CALCULATOR_REGISTRY: dict[str, type] = {
    "unit_economics": UnitEconomicsCalculator,
    "freight": PackingCalculator,
    "payment_delay": PaymentDelayCalculator,
    "vendor_comparison": VendorComparisonCalculator,
    "buying": BuyingAnalysisCalculator,
    "quantities": QuantitiesCalculator,
}


def get_calculator(name: str) -> BaseCalculator:
    """Returns an instance of the calculator for a screen, or raises ValueError."""
    if name not in CALCULATOR_REGISTRY:
        raise ValueError(
            f"No calculator registered for: {name}. "
            f"Available: {list(CALCULATOR_REGISTRY.keys())}"
        )
    return CALCULATOR_REGISTRY[name]()


def has_calculator(name: str) -> bool:
    """Check if a calculator exists for a screen."""
    return name in CALCULATOR_REGISTRY


def list_calculators() -> list[str]:
    """List all registered calculator names."""
    return list(CALCULATOR_REGISTRY.keys())
