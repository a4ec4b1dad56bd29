"""
Unit tests for ingredient usage cost, recipe roll-up, per-unit cost and COGS.

Tests cover:
- Pricing a usage against the purchased pack
- Mass <-> volume bridging through density
- Recipe aggregation (items and sections)
- Cost per output unit and COGS percentage
- The worked flour example end to end
"""

from decimal import Decimal

import pytest

from bakery_costing.services.exceptions import (
    DivisionByZero,
    IncompatibleUnitKind,
    InvalidYield,
    MissingDensity,
    UnknownUnit,
)
from bakery_costing.services.unit_converter import (
    PackPricing,
    RecipeSection,
    UsageItem,
    compute_cogs_percentage,
    compute_cost_per_output_unit,
    compute_ingredient_usage_cost,
    compute_recipe_cost,
    cost_per_base_unit,
    flatten_sections,
)


class TestComputeIngredientUsageCost:
    """Test pricing one usage against a pack."""

    def test_same_unit(self, flour_pack):
        assert compute_ingredient_usage_cost(250, "g", flour_pack) == Decimal("0.60")

    def test_usage_in_larger_unit(self, flour_pack):
        assert compute_ingredient_usage_cost("0.5", "kg", flour_pack) == Decimal("1.20")

    def test_pack_entered_in_non_base_unit(self):
        bag = PackPricing(pack_quantity="1.5", pack_unit="kg", pack_price="1.20")
        assert compute_ingredient_usage_cost(300, "g", bag) == Decimal("0.24")

    def test_zero_usage_costs_nothing(self, flour_pack):
        assert compute_ingredient_usage_cost(0, "g", flour_pack) == 0

    def test_negative_usage_gives_negative_cost(self, flour_pack):
        assert compute_ingredient_usage_cost(-250, "g", flour_pack) == Decimal("-0.60")

    def test_scales_linearly(self, flour_pack):
        single = compute_ingredient_usage_cost(333, "g", flour_pack)
        double = compute_ingredient_usage_cost(666, "g", flour_pack)
        assert double == single * 2

    def test_count_units(self, egg_pack):
        assert compute_ingredient_usage_cost(3, "each", egg_pack) == Decimal("0.75")

    def test_free_ingredient(self):
        sample = PackPricing(pack_quantity=100, pack_unit="g", pack_price=0)
        assert compute_ingredient_usage_cost(50, "g", sample) == 0

    def test_volume_usage_against_mass_pack(self, flour_pack):
        # 1 cup = 236.588 ml -> 141.9528 g at 0.6 g/ml
        assert compute_ingredient_usage_cost(1, "cup", flour_pack) == Decimal("0.34068672")

    def test_mass_usage_against_volume_pack(self, milk_pack):
        # 103 g / 1.03 g/ml = 100 ml of a 1000 ml pack
        assert compute_ingredient_usage_cost(103, "g", milk_pack) == Decimal("0.1")

    def test_density_bridge_ml_to_g(self):
        butter = PackPricing(
            pack_quantity=1030, pack_unit="g", pack_price="2.06", density_g_per_ml=1.03
        )
        # 100 ml -> 103 g at 0.002 per g
        assert compute_ingredient_usage_cost(100, "ml", butter) == Decimal("0.206")

    def test_missing_density(self):
        oat_drink = PackPricing(pack_quantity=1000, pack_unit="ml", pack_price="1.50")
        with pytest.raises(MissingDensity):
            compute_ingredient_usage_cost(100, "g", oat_drink)

    def test_count_against_mass_is_incompatible(self, flour_pack):
        with pytest.raises(IncompatibleUnitKind):
            compute_ingredient_usage_cost(2, "each", flour_pack)

    def test_each_against_slices_is_incompatible(self):
        loaf = PackPricing(pack_quantity=20, pack_unit="slices", pack_price="1.40")
        with pytest.raises(IncompatibleUnitKind):
            compute_ingredient_usage_cost(1, "each", loaf)

    def test_unknown_usage_unit(self, flour_pack):
        with pytest.raises(UnknownUnit):
            compute_ingredient_usage_cost(1, "handful", flour_pack)

    def test_unknown_pack_unit(self):
        odd = PackPricing(pack_quantity=1, pack_unit="sack", pack_price="10")
        with pytest.raises(UnknownUnit):
            compute_ingredient_usage_cost(1, "g", odd)

    def test_zero_pack_quantity(self):
        broken = PackPricing(pack_quantity=0, pack_unit="g", pack_price="1.00")
        with pytest.raises(DivisionByZero):
            compute_ingredient_usage_cost(10, "g", broken)

    def test_batch_pricing_is_not_used(self, flour_pack):
        tiered = PackPricing(
            pack_quantity=1000,
            pack_unit="g",
            pack_price=Decimal("2.40"),
            batch_pricing=[{"pack_quantity": 10000, "pack_price": "18.00"}],
        )
        assert compute_ingredient_usage_cost(250, "g", tiered) == compute_ingredient_usage_cost(
            250, "g", flour_pack
        )


class TestCostPerBaseUnit:
    """Test the unit price of a pack."""

    def test_grams(self):
        assert cost_per_base_unit("2.40", 1000, "g") == Decimal("0.0024")

    def test_normalises_pack_unit(self):
        assert cost_per_base_unit("3.00", 3, "kg") == Decimal("0.001")

    def test_zero_pack(self):
        with pytest.raises(DivisionByZero):
            cost_per_base_unit("1.00", 0, "kg")


class TestComputeRecipeCost:
    """Test aggregation of item costs."""

    def test_empty_recipe(self):
        assert compute_recipe_cost() == Decimal("0")

    def test_sum_of_items(self, flour_pack, egg_pack):
        flour = UsageItem(250, "g", flour_pack)
        eggs = UsageItem(2, "each", egg_pack)
        total = compute_recipe_cost(items=[flour, eggs])
        assert total == Decimal("0.60") + Decimal("0.50")

    def test_additive_across_recipes(self, flour_pack, milk_pack):
        first = [UsageItem(250, "g", flour_pack)]
        second = [UsageItem(200, "ml", milk_pack)]
        assert compute_recipe_cost(items=first + second) == compute_recipe_cost(
            items=first
        ) + compute_recipe_cost(items=second)

    def test_sections_are_flattened(self, flour_pack, milk_pack, egg_pack):
        flat = [
            UsageItem(250, "g", flour_pack),
            UsageItem(200, "ml", milk_pack),
            UsageItem(2, "each", egg_pack),
        ]
        sectioned = [
            RecipeSection("Dough", (flat[0], flat[1])),
            RecipeSection("Glaze", (flat[2],)),
        ]
        assert compute_recipe_cost(sections=sectioned) == compute_recipe_cost(items=flat)
        assert flatten_sections(sectioned) == flat

    def test_items_and_sections_together(self, flour_pack, egg_pack):
        loose = [UsageItem(250, "g", flour_pack)]
        sections = [RecipeSection("Glaze", (UsageItem(2, "each", egg_pack),))]
        assert compute_recipe_cost(items=loose, sections=sections) == Decimal("1.10")

    def test_one_failing_item_fails_the_recipe(self, flour_pack):
        oat_drink = PackPricing(pack_quantity=1000, pack_unit="ml", pack_price="1.50")
        items = [UsageItem(250, "g", flour_pack), UsageItem(100, "g", oat_drink)]
        with pytest.raises(MissingDensity):
            compute_recipe_cost(items=items)


class TestCostPerOutputUnit:
    """Test cost per unit of yield."""

    def test_divides_by_yield(self):
        assert compute_cost_per_output_unit(Decimal("12.00"), 24) == Decimal("0.50")

    def test_fractional_yield(self):
        assert compute_cost_per_output_unit("3.00", "1.5") == Decimal("2")

    @pytest.mark.parametrize("yield_quantity", [0, -1, "0.0"])
    def test_non_positive_yield(self, yield_quantity):
        with pytest.raises(InvalidYield) as exc_info:
            compute_cost_per_output_unit(Decimal("12.00"), yield_quantity)
        assert exc_info.value.yield_quantity == yield_quantity


class TestCogsPercentage:
    """Test cost of goods sold as a percentage of price."""

    def test_percentage(self):
        assert compute_cogs_percentage(Decimal("0.50"), Decimal("2.00")) == Decimal("25")

    def test_no_selling_price(self):
        assert compute_cogs_percentage(Decimal("0.50"), None) is None

    @pytest.mark.parametrize("price", [0, "-1.00"])
    def test_non_positive_price(self, price):
        assert compute_cogs_percentage(Decimal("0.50"), price) is None

    def test_above_one_hundred_percent(self):
        assert compute_cogs_percentage(Decimal("3.00"), Decimal("2.00")) == Decimal("150")


class TestFlourScenario:
    """1000 g of flour for 2.40; 250 g used; recipe yields 10; sells at 0.30 each."""

    def test_end_to_end(self, flour_pack):
        usage_cost = compute_ingredient_usage_cost(250, "g", flour_pack)
        assert usage_cost == Decimal("0.60")

        total = compute_recipe_cost(items=[UsageItem(250, "g", flour_pack)])
        assert total == Decimal("0.60")

        per_unit = compute_cost_per_output_unit(total, 10)
        assert per_unit == Decimal("0.06")

        assert compute_cogs_percentage(per_unit, Decimal("0.30")) == Decimal("20")
