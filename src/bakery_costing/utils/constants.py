"""
Constants and enumerations for the Bakery Costing application.

This module defines all system-wide constants including:
- Application metadata
- Ingredient and recipe categories
- Validation limits and error messages
- Reference densities for common bakery ingredients
"""

from typing import Dict, List

# ============================================================================
# Application Metadata
# ============================================================================

APP_NAME = "Bakery Costing"
APP_VERSION = "0.1.0"
DATABASE_VERSION = "1.0"

# ============================================================================
# Currency
# ============================================================================

DEFAULT_CURRENCY = "GBP"
DEFAULT_CURRENCY_SYMBOL = "£"

CURRENCY_SYMBOLS: Dict[str, str] = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
    "CAD": "$",
    "AUD": "$",
}

# Placeholder shown when a cost cannot be computed
MISSING_VALUE_DISPLAY = "—"

# ============================================================================
# Ingredient Categories
# ============================================================================

INGREDIENT_CATEGORIES: List[str] = [
    "Flour",
    "Sugar",
    "Dairy",
    "Eggs",
    "Oils/Butters",
    "Nuts/Seeds",
    "Spices",
    "Chocolate",
    "Fruit",
    "Syrups",
    "Packaging",
    "Misc",
]

# ============================================================================
# Recipe Categories
# ============================================================================

RECIPE_CATEGORIES: List[str] = [
    "Breads",
    "Cakes",
    "Cookies",
    "Pastries",
    "Pies",
    "Savoury",
    "Fillings",
    "Other",
]

# ============================================================================
# Validation Limits
# ============================================================================

MAX_NAME_LENGTH = 200
MAX_CATEGORY_LENGTH = 100
MAX_UNIT_LENGTH = 20
MAX_NOTES_LENGTH = 2000

MAX_QUANTITY = 999999.99
MAX_COST = 999999.99
MAX_DENSITY_G_PER_ML = 25.0

CURRENCY_DECIMAL_PLACES = 2
QUANTITY_DECIMAL_PLACES = 2

# ============================================================================
# Database
# ============================================================================

DATABASE_FILENAME = "bakery_costing.db"

# ============================================================================
# Error Messages
# ============================================================================

ERROR_REQUIRED_FIELD = "This field is required"
ERROR_INVALID_NUMBER = "Please enter a valid number"
ERROR_INVALID_POSITIVE = "Value must be greater than zero"
ERROR_INVALID_NON_NEGATIVE = "Value must be zero or greater"
ERROR_INVALID_UNIT = "Invalid unit"
ERROR_INVALID_BASE_UNIT = "Must be one of g, ml, each, slices"
ERROR_NAME_TOO_LONG = f"Name must be {MAX_NAME_LENGTH} characters or less"

# ============================================================================
# Reference Densities (grams per millilitre)
# ============================================================================

# Used to fill in a missing density when an ingredient is created by name.
INGREDIENT_DENSITIES: Dict[str, float] = {
    # Flours and powders
    "flour": 0.6,
    "plain flour": 0.6,
    "all-purpose flour": 0.6,
    "bread flour": 0.6,
    "cake flour": 0.5,
    "self-raising flour": 0.6,
    "whole wheat flour": 0.6,
    "cornflour": 0.6,
    "cornstarch": 0.6,
    "almond flour": 0.4,
    "ground almonds": 0.4,
    "cocoa powder": 0.4,
    "baking powder": 0.8,
    "baking soda": 0.87,
    "bicarbonate of soda": 0.87,
    # Sugars and salt
    "sugar": 0.85,
    "granulated sugar": 0.85,
    "caster sugar": 0.85,
    "brown sugar": 0.8,
    "icing sugar": 0.6,
    "powdered sugar": 0.6,
    "salt": 1.2,
    "sea salt": 1.1,
    # Dairy
    "milk": 1.03,
    "whole milk": 1.03,
    "skim milk": 1.03,
    "butter": 0.91,
    "margarine": 0.91,
    "cream": 1.0,
    "double cream": 1.0,
    "single cream": 1.0,
    "yogurt": 1.05,
    "greek yogurt": 1.05,
    "cream cheese": 1.0,
    "sour cream": 1.0,
    # Oils
    "vegetable oil": 0.92,
    "olive oil": 0.92,
    "sunflower oil": 0.92,
    "rapeseed oil": 0.92,
    "coconut oil": 0.92,
    # Syrups and spreads
    "honey": 1.4,
    "maple syrup": 1.3,
    "golden syrup": 1.4,
    "molasses": 1.4,
    "jam": 1.3,
    "peanut butter": 1.0,
    # Liquids
    "water": 1.0,
    "lemon juice": 1.0,
    "orange juice": 1.0,
    "vinegar": 1.0,
    "coconut milk": 1.0,
}
