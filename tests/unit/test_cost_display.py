"""
Unit tests for the cost display policy.

Tests cover:
- cost_or_none turning costing failures into None with a WARNING log
- Non-costing errors still propagating
- Currency and percentage formatting
- Sorting by COGS with unpriced recipes last
"""

import logging
from decimal import Decimal

import pytest

from bakery_costing.services.cost_display import (
    cogs_sort_key,
    cost_or_none,
    format_cost,
    format_percentage,
)
from bakery_costing.services.unit_converter import (
    PackPricing,
    compute_cost_per_output_unit,
    compute_ingredient_usage_cost,
)
from bakery_costing.utils.constants import MISSING_VALUE_DISPLAY


class TestCostOrNone:
    """Test the 'show a dash instead of failing' policy."""

    def test_returns_value_on_success(self, flour_pack):
        assert cost_or_none(compute_ingredient_usage_cost, 250, "g", flour_pack) == Decimal("0.60")

    def test_keyword_arguments_are_forwarded(self):
        assert cost_or_none(
            compute_cost_per_output_unit, total_cost="12.00", yield_quantity=24
        ) == Decimal("0.5")

    def test_costing_error_becomes_none(self, caplog):
        oat_drink = PackPricing(pack_quantity=1000, pack_unit="ml", pack_price="1.50")

        with caplog.at_level(logging.WARNING, logger="bakery_costing.services"):
            result = cost_or_none(
                compute_ingredient_usage_cost,
                100,
                "g",
                oat_drink,
                context={"recipe_id": 7},
            )

        assert result is None
        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.levelno == logging.WARNING
        assert record.name == "bakery_costing.services.cost_display"
        assert record.operation == "compute_ingredient_usage_cost"
        assert record.outcome == "costing_failed"
        assert record.error_type == "MissingDensity"
        assert record.recipe_id == 7
        assert "Density" in record.error

    def test_invalid_yield_becomes_none(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert cost_or_none(compute_cost_per_output_unit, "12.00", 0) is None
        assert caplog.records[0].error_type == "InvalidYield"

    def test_other_errors_propagate(self):
        def broken():
            raise ValueError("not a costing problem")

        with pytest.raises(ValueError):
            cost_or_none(broken)


class TestFormatCost:
    """Test currency formatting."""

    def test_two_decimal_places(self):
        assert format_cost(Decimal("0.6"), "£") == "£0.60"

    def test_rounds_half_up(self):
        assert format_cost(Decimal("0.125"), "£") == "£0.13"

    def test_negative(self):
        assert format_cost(Decimal("-0.6"), "£") == "-£0.60"

    def test_precision(self):
        assert format_cost(Decimal("0.0875"), "£", precision=4) == "£0.0875"

    def test_missing_value(self):
        assert format_cost(None) == MISSING_VALUE_DISPLAY

    def test_default_symbol_from_config(self):
        assert format_cost(Decimal("1")) == "£1.00"

    def test_symbol_from_environment(self, monkeypatch):
        from bakery_costing.utils.config import reset_config

        monkeypatch.setenv("BAKERY_COSTING_CURRENCY_SYMBOL", "$")
        reset_config()
        assert format_cost(2.5) == "$2.50"


class TestFormatPercentage:
    """Test percentage formatting."""

    def test_one_decimal_place(self):
        assert format_percentage(Decimal("25")) == "25.0%"
        assert format_percentage(Decimal("17.55")) == "17.6%"

    def test_missing_value(self):
        assert format_percentage(None) == MISSING_VALUE_DISPLAY


class TestCogsSortKey:
    """Test ordering of recipes by COGS."""

    def test_unpriced_last(self):
        values = [None, Decimal("30"), Decimal("20"), None]
        assert sorted(values, key=cogs_sort_key) == [Decimal("20"), Decimal("30"), None, None]
