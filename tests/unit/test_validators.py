"""
Tests for input validation functions.

Tests cover:
- String validation (required, length)
- Numeric validation (positive, non-negative, ranges)
- Unit validation against the unit table
- Complete data validation (ingredient, recipe, usage)
"""

import pytest

from bakery_costing.utils import validators
from bakery_costing.utils.constants import MAX_NAME_LENGTH


@pytest.fixture
def ingredient_data():
    return {
        "name": "Plain flour",
        "category": "Flour",
        "pack_quantity": 1.5,
        "pack_unit": "kg",
        "pack_price": "1.20",
    }


@pytest.fixture
def recipe_data():
    return {
        "name": "Scones",
        "category": "Pastries",
        "yield_quantity": 12,
        "yield_unit": "each",
        "selling_price": "0.50",
    }


class TestStringValidation:
    """Test string validation functions."""

    def test_required_string_valid(self):
        assert validators.validate_required_string("Flour", "Name") == (True, "")

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_required_string_missing(self, value):
        is_valid, error = validators.validate_required_string(value, "Name")
        assert not is_valid
        assert "required" in error.lower()

    def test_string_length_exact_max(self):
        assert validators.validate_string_length("A" * 100, 100, "Name")[0]

    def test_string_length_too_long(self):
        is_valid, error = validators.validate_string_length("A" * 101, 100, "Name")
        assert not is_valid
        assert "100 characters" in error

    def test_sanitize_string(self):
        assert validators.sanitize_string("  Flour ") == "Flour"
        assert validators.sanitize_string("   ") is None
        assert validators.sanitize_string(None) is None


class TestNumericValidation:
    """Test numeric validation functions."""

    def test_positive_number(self):
        assert validators.validate_positive_number("2.5")[0]
        assert not validators.validate_positive_number(0)[0]
        assert not validators.validate_positive_number(-1)[0]

    def test_positive_number_not_a_number(self):
        is_valid, error = validators.validate_positive_number("abc", "Quantity")
        assert not is_valid
        assert error == "Quantity: Please enter a valid number"

    def test_non_negative_number(self):
        assert validators.validate_non_negative_number(0)[0]
        assert not validators.validate_non_negative_number(-0.01)[0]
        assert not validators.validate_non_negative_number(None)[0]

    def test_number_range(self):
        assert validators.validate_number_range(5, 0, 10)[0]
        assert not validators.validate_number_range(11, 0, 10)[0]


class TestUnitValidation:
    """Test unit validation."""

    @pytest.mark.parametrize("unit", ["g", "kg", "Cups", "fl oz", "slices", "each"])
    def test_known_units(self, unit):
        assert validators.validate_unit(unit) == (True, "")

    def test_unknown_unit(self):
        is_valid, error = validators.validate_unit("bushel")
        assert not is_valid
        assert "bushel" in error

    def test_missing_unit(self):
        assert not validators.validate_unit("")[0]
        assert not validators.validate_unit(None)[0]

    def test_unit_too_long(self):
        is_valid, error = validators.validate_unit("t" * 21)
        assert not is_valid
        assert error == "Unit: Must be 20 characters or less"

    @pytest.mark.parametrize("unit", ["g", "ml", "each", "slices", "slice"])
    def test_base_units(self, unit):
        assert validators.validate_base_unit(unit)[0]

    @pytest.mark.parametrize("unit", ["kg", "cup", "oz"])
    def test_non_base_units(self, unit):
        is_valid, error = validators.validate_base_unit(unit, "Yield Unit")
        assert not is_valid
        assert "g, ml, each, slices" in error


class TestIngredientData:
    """Test complete ingredient validation."""

    def test_valid(self, ingredient_data):
        assert validators.validate_ingredient_data(ingredient_data) == (True, [])

    def test_category_is_optional(self, ingredient_data):
        del ingredient_data["category"]
        assert validators.validate_ingredient_data(ingredient_data)[0]

    def test_unknown_category(self, ingredient_data):
        ingredient_data["category"] = "Gadgets"
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert errors[0].startswith("Category")

    def test_missing_name(self, ingredient_data):
        ingredient_data["name"] = ""
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert errors == ["Name: This field is required"]

    def test_name_too_long(self, ingredient_data):
        ingredient_data["name"] = "x" * (MAX_NAME_LENGTH + 1)
        assert not validators.validate_ingredient_data(ingredient_data)[0]

    @pytest.mark.parametrize("quantity", [0, -1, None, "lots"])
    def test_invalid_pack_quantity(self, ingredient_data, quantity):
        ingredient_data["pack_quantity"] = quantity
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert errors[0].startswith("Pack Quantity")

    def test_unknown_pack_unit(self, ingredient_data):
        ingredient_data["pack_unit"] = "sack"
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert errors[0].startswith("Pack Unit")

    def test_free_ingredient_allowed(self, ingredient_data):
        ingredient_data["pack_price"] = 0
        assert validators.validate_ingredient_data(ingredient_data)[0]

    def test_negative_price(self, ingredient_data):
        ingredient_data["pack_price"] = "-1"
        assert not validators.validate_ingredient_data(ingredient_data)[0]

    @pytest.mark.parametrize("density", [0, -0.5, 100])
    def test_invalid_density(self, ingredient_data, density):
        ingredient_data["density_g_per_ml"] = density
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert errors[0].startswith("Density")

    def test_batch_pricing_tiers(self, ingredient_data):
        ingredient_data["batch_pricing"] = [
            {"pack_quantity": 10, "pack_price": "9.00"},
            {"pack_quantity": 0, "pack_price": "-1"},
            "cheap",
        ]
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert len(errors) == 3
        assert errors[2] == "Batch Pricing tier 3: Must be a mapping"

    def test_batch_pricing_tier_unit_and_size(self, ingredient_data):
        ingredient_data["batch_pricing"] = [
            {"pack_quantity": 4, "pack_price": "8.00", "purchase_unit": "kg", "unit_size": 2.5},
            {"pack_quantity": 4, "pack_price": "8.00", "purchase_unit": "sack", "unit_size": 0},
        ]
        is_valid, errors = validators.validate_ingredient_data(ingredient_data)
        assert not is_valid
        assert errors == [
            "Batch Pricing tier 2 unit: Invalid unit 'sack'",
            "Batch Pricing tier 2 unit size: Value must be greater than zero",
        ]

    def test_collects_every_error(self):
        is_valid, errors = validators.validate_ingredient_data({})
        assert not is_valid
        assert len(errors) == 4


class TestRecipeData:
    """Test complete recipe validation."""

    def test_valid(self, recipe_data):
        assert validators.validate_recipe_data(recipe_data) == (True, [])

    def test_yield_unit_must_be_base_unit(self, recipe_data):
        recipe_data["yield_unit"] = "kg"
        is_valid, errors = validators.validate_recipe_data(recipe_data)
        assert not is_valid
        assert errors == ["Yield Unit: Must be one of g, ml, each, slices"]

    @pytest.mark.parametrize("yield_quantity", [0, -12, None])
    def test_invalid_yield(self, recipe_data, yield_quantity):
        recipe_data["yield_quantity"] = yield_quantity
        assert not validators.validate_recipe_data(recipe_data)[0]

    def test_selling_price_is_optional(self, recipe_data):
        recipe_data["selling_price"] = None
        assert validators.validate_recipe_data(recipe_data)[0]

    def test_negative_selling_price(self, recipe_data):
        recipe_data["selling_price"] = -1
        assert not validators.validate_recipe_data(recipe_data)[0]


class TestUsageData:
    """Test recipe item quantity and unit validation."""

    def test_valid(self):
        assert validators.validate_usage_data(2, "tbsp") == (True, [])

    def test_invalid(self):
        is_valid, errors = validators.validate_usage_data(0, "handful")
        assert not is_valid
        assert len(errors) == 2
