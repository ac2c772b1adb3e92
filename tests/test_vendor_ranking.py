"""
Vendor comparison, two-sided buying analysis and quantities dashboard.
"""

import pytest

from leocalc.calculators.buying import BuyingAnalysisCalculator
from leocalc.calculators.quantities import QuantitiesCalculator, margin_band, price_for_margin
from leocalc.calculators.vendor_ranking import VendorComparisonCalculator, assign_ranks


VENDOR_A = {"id": 1, "name": "A", "base_price": 100, "freight": 10, "credit_days": 30, "interest_rate": 12}
VENDOR_B = {"id": 2, "name": "B", "base_price": 90, "freight": 20, "credit_days": 0, "interest_rate": 12}


def _by_name(result):
    return {v["name"]: v for v in result["vendors"]}


# ============================================================
# Landed cost + ranking
# ============================================================

def test_landed_cost_nets_out_credit_savings():
    result = VendorComparisonCalculator().calculate({"vendors": [VENDOR_A, VENDOR_B]})
    vendors = _by_name(result)
    assert vendors["A"]["credit_savings"] == pytest.approx(100 * 30 * 0.12 / 365)
    assert vendors["A"]["landed_cost"] == pytest.approx(100 + 10 - 100 * 30 * 0.12 / 365)
    assert vendors["B"]["landed_cost"] == 110


def test_lowest_landed_cost_is_l1():
    result = VendorComparisonCalculator().calculate({"vendors": [VENDOR_B, VENDOR_A]})
    vendors = _by_name(result)
    assert vendors["A"]["rank"] == "L1"
    assert vendors["A"]["is_l1"] is True
    assert vendors["B"]["rank"] == "L2"
    assert result["l1_winner"]["name"] == "A"
    assert vendors["B"]["pct_above_l1"] == pytest.approx(
        (110 - vendors["A"]["landed_cost"]) / vendors["A"]["landed_cost"] * 100
    )


def test_ties_share_rank_and_first_in_input_wins():
    first = {"id": 1, "name": "First", "base_price": 50, "freight": 5}
    second = {"id": 2, "name": "Second", "base_price": 50, "freight": 5}
    third = {"id": 3, "name": "Third", "base_price": 60, "freight": 5}
    result = VendorComparisonCalculator().calculate({"vendors": [third, first, second]})
    vendors = _by_name(result)
    assert vendors["First"]["rank"] == "L1"
    assert vendors["Second"]["rank"] == "L1"
    assert vendors["Third"]["rank"] == "L3"
    assert result["l1_winner"]["name"] == "First"


def test_assign_ranks_keeps_input_order():
    rows = [{"landed_cost": 3}, {"landed_cost": 1}, {"landed_cost": 2}]
    assign_ranks(rows)
    assert [r["rank"] for r in rows] == ["L3", "L1", "L2"]


def test_interest_rate_defaults_to_twelve_when_unset():
    vendor = {"name": "X", "base_price": 365, "freight": 0, "credit_days": 10, "interest_rate": ""}
    result = VendorComparisonCalculator().calculate({"vendors": [vendor]})
    assert result["vendors"][0]["interest_rate"] == 12
    assert result["vendors"][0]["credit_savings"] == pytest.approx(365 * 10 * 0.12 / 365)


def test_explicit_zero_rate_is_kept():
    vendor = {"name": "X", "base_price": 100, "freight": 0, "credit_days": 30, "interest_rate": 0}
    result = VendorComparisonCalculator().calculate({"vendors": [vendor]})
    assert result["vendors"][0]["landed_cost"] == 100


# ============================================================
# Value score
# ============================================================

def test_value_score_components():
    result = VendorComparisonCalculator().calculate({"vendors": [VENDOR_A, VENDOR_B]})
    a = _by_name(result)["A"]
    b = _by_name(result)["B"]
    # A: price 90/100*40=36, credit 30/30*20=20, logistics 10/10*20=20, quality 20
    assert a["price_score"] == pytest.approx(36)
    assert a["credit_score"] == pytest.approx(20)
    assert a["logistics_score"] == pytest.approx(20)
    assert a["quality_score"] == pytest.approx(20)
    assert a["total_score"] == 96
    # B: price 40, credit 0, logistics 10/20*20=10, quality 20
    assert b["total_score"] == 70
    assert result["best_value"]["name"] == "A"


def test_zero_freight_everywhere_scores_full_logistics():
    vendors = [
        {"name": "P", "base_price": 100, "freight": 0},
        {"name": "Q", "base_price": 100, "freight": 0},
    ]
    result = VendorComparisonCalculator().calculate({"vendors": vendors})
    assert all(v["logistics_score"] == 20 for v in result["vendors"])
    assert all(v["logistics_good"] for v in result["vendors"])


def test_paid_freight_against_free_minimum_scores_zero_logistics():
    vendors = [
        {"name": "Free", "base_price": 100, "freight": 0},
        {"name": "Paid", "base_price": 100, "freight": 8},
    ]
    result = VendorComparisonCalculator().calculate({"vendors": vendors})
    assert _by_name(result)["Paid"]["logistics_score"] == 0


def test_no_base_price_means_unscored():
    vendors = [{"name": "Blank", "base_price": "", "freight": 5}, VENDOR_A]
    result = VendorComparisonCalculator().calculate({"vendors": vendors})
    blank = _by_name(result)["Blank"]
    assert blank["scored"] is False
    assert blank["total_score"] == 0
    assert _by_name(result)["A"]["price_score"] == pytest.approx(40)


def test_quality_defaults_to_full_marks():
    result = VendorComparisonCalculator().calculate({"vendors": [VENDOR_A]})
    assert result["vendors"][0]["quality"] == 100
    assert result["yield_variance"] == 0


def test_summary_metrics():
    result = VendorComparisonCalculator().calculate({"vendors": [VENDOR_A, VENDOR_B]})
    a = _by_name(result)["A"]
    assert result["avg_base_price"] == 95
    assert result["avg_freight"] == 15
    assert result["projected_savings"] == pytest.approx(110 - a["landed_cost"])


def test_empty_vendor_set():
    result = VendorComparisonCalculator().calculate({"vendors": []})
    assert result["vendors"] == []
    assert result["l1_winner"] is None
    assert result["projected_savings"] == 0


def test_comparison_is_idempotent():
    calc = VendorComparisonCalculator()
    fields = {"vendors": [VENDOR_A, VENDOR_B]}
    assert calc.calculate(fields) == calc.calculate(fields)


# ============================================================
# Two-sided buying analysis
# ============================================================

ENTRY = {
    "id": 1, "name": "Acme Poly", "product_name": "50kg sack",
    "base_price": 100, "freight": 10, "credit_days": 30, "interest_rate": 12,
    "quantity": 1000, "selling_price": 130, "customer_credit_days": 90,
}


def test_cash_gap_financing_and_realized_margin():
    row = BuyingAnalysisCalculator().analyse_entry(ENTRY)
    landed = 110 - 100 * 30 * 0.12 / 365
    gap_financing = landed * 60 * 0.12 / 365
    assert row["cash_gap_days"] == 60
    assert row["landed_cost"] == pytest.approx(landed)
    assert row["gap_financing"] == pytest.approx(gap_financing)
    assert row["revenue"] == 130000
    assert row["gross_margin"] == pytest.approx(130000 - landed * 1000)
    assert row["realized_margin"] == pytest.approx((130 - landed) * 1000 - gap_financing * 1000)
    assert row["margin_percent"] == pytest.approx(row["realized_margin"] / 130000 * 100)


def test_negative_cash_gap_is_a_benefit():
    row = BuyingAnalysisCalculator().analyse_entry({**ENTRY, "customer_credit_days": 0})
    assert row["cash_gap_days"] == -30
    assert row["gap_financing"] < 0
    assert row["realized_margin"] > row["gross_margin"]


def test_best_profit_and_lowest_cost():
    cheap = {**ENTRY, "id": 2, "name": "Cheap", "base_price": 80, "selling_price": 100}
    result = BuyingAnalysisCalculator().calculate({"vendors": [ENTRY, cheap]})
    assert result["lowest_cost"]["name"] == "Cheap"
    assert result["best_profit"]["name"] == "Acme Poly"
    assert result["total_realized_margin"] == pytest.approx(
        sum(v["realized_margin"] for v in result["vendors"])
    )
    assert result["avg_cash_gap_days"] == 60


def test_buying_empty_set_uses_placeholder():
    result = BuyingAnalysisCalculator().calculate({"vendors": []})
    assert result["best_profit"] == {"name": "-", "profit": 0.0}
    assert result["lowest_cost"] == {"name": "-", "cost": 0.0}


def test_zero_revenue_margin_percent_is_zero():
    row = BuyingAnalysisCalculator().analyse_entry({**ENTRY, "selling_price": 0})
    assert row["margin_percent"] == 0


# ============================================================
# Quantities dashboard
# ============================================================

def test_product_profit_and_totals():
    products = [
        {"id": 1, "name": "Woven sack", "qty": 1000, "vendor_cost": 10, "customer_price": 12.5},
        {"id": 2, "name": "Liner", "qty": 500, "vendor_cost": 4, "customer_price": 4},
    ]
    result = QuantitiesCalculator().calculate({"products": products})
    sack, liner = result["products"]
    assert sack["unit_profit"] == 2.5
    assert sack["total_profit"] == 2500
    assert sack["margin_percent"] == pytest.approx(20)
    assert sack["margin_band"] == "healthy"
    assert liner["margin_band"] == "loss"
    assert result["total_revenue"] == 14500
    assert result["total_cost"] == 12000
    assert result["total_profit"] == 2500
    assert result["net_margin"] == pytest.approx(2500 / 14500 * 100)
    assert result["avg_profit_per_product"] == 1250
    assert result["total_sales_volume"] == 1500


def test_margin_bands():
    assert margin_band(30) == "strong"
    assert margin_band(15) == "healthy"
    assert margin_band(0.1) == "thin"
    assert margin_band(0) == "loss"
    assert margin_band(-5) == "loss"


def test_price_for_margin_back_solve():
    assert price_for_margin(80, 20) == 100.0
    assert price_for_margin("42.5", 15) == round(42.5 / 0.85, 2)


def test_price_for_margin_unreachable():
    assert price_for_margin(80, 100) is None
    assert price_for_margin(80, 150) is None
    assert price_for_margin(80, "abc") is None


def test_empty_products():
    result = QuantitiesCalculator().calculate({"products": []})
    assert result["total_profit"] == 0
    assert result["net_margin"] == 0
    assert result["avg_profit_per_product"] == 0
