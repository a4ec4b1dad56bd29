"""
Input validation functions for the Bakery Costing application.

This module provides validation functions for user input including:
- Numeric validation (positive, non-negative, ranges)
- String validation (length, required fields)
- Unit validation against the costing engine's unit table
- Category validation
"""

from typing import Any, List, Optional, Tuple

from bakery_costing.services.exceptions import UnknownUnit
from bakery_costing.services.unit_converter import is_base_unit, normalize_unit

from .constants import (
    ERROR_INVALID_BASE_UNIT,
    ERROR_INVALID_NON_NEGATIVE,
    ERROR_INVALID_NUMBER,
    ERROR_INVALID_POSITIVE,
    ERROR_INVALID_UNIT,
    ERROR_REQUIRED_FIELD,
    INGREDIENT_CATEGORIES,
    MAX_CATEGORY_LENGTH,
    MAX_COST,
    MAX_DENSITY_G_PER_ML,
    MAX_NAME_LENGTH,
    MAX_NOTES_LENGTH,
    MAX_QUANTITY,
    MAX_UNIT_LENGTH,
    RECIPE_CATEGORIES,
)


def validate_required_string(value: Optional[str], field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a string field is not empty.

    Args:
        value: The string value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value is None or (isinstance(value, str) and value.strip() == ""):
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    return True, ""


def validate_string_length(
    value: str, max_length: int, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a string doesn't exceed maximum length.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if value and len(value) > max_length:
        return False, f"{field_name}: Must be {max_length} characters or less"
    return True, ""


def validate_positive_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a positive number (> 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        num_value = float(value)
    except (ValueError, TypeError):
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value <= 0:
        return False, f"{field_name}: {ERROR_INVALID_POSITIVE}"
    return True, ""


def validate_non_negative_number(value: Any, field_name: str = "Field") -> Tuple[bool, str]:
    """
    Validate that a value is a non-negative number (>= 0).

    Args:
        value: The value to validate
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        num_value = float(value)
    except (ValueError, TypeError):
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value < 0:
        return False, f"{field_name}: {ERROR_INVALID_NON_NEGATIVE}"
    return True, ""


def validate_number_range(
    value: Any, min_value: float, max_value: float, field_name: str = "Field"
) -> Tuple[bool, str]:
    """
    Validate that a number is within a specified range.

    Args:
        value: The value to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        num_value = float(value)
    except (ValueError, TypeError):
        return False, f"{field_name}: {ERROR_INVALID_NUMBER}"
    if num_value < min_value or num_value > max_value:
        return False, f"{field_name}: Must be between {min_value} and {max_value}"
    return True, ""


def validate_unit(unit: Optional[str], field_name: str = "Unit") -> Tuple[bool, str]:
    """
    Validate that a unit (or an accepted spelling of one) is supported.

    Args:
        unit: The unit string to validate (e.g., "kg", "Tablespoons")
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not unit:
        return False, f"{field_name}: {ERROR_REQUIRED_FIELD}"
    if isinstance(unit, str):
        is_valid, error = validate_string_length(unit, MAX_UNIT_LENGTH, field_name)
        if not is_valid:
            return is_valid, error
    try:
        normalize_unit(unit)
    except UnknownUnit:
        return False, f"{field_name}: {ERROR_INVALID_UNIT} '{unit}'"
    return True, ""


def validate_base_unit(unit: Optional[str], field_name: str = "Unit") -> Tuple[bool, str]:
    """
    Validate that a unit is one of the base units (g, ml, each, slices).

    Recipe yields are always expressed in a base unit.
    """
    is_valid, error = validate_unit(unit, field_name)
    if not is_valid:
        return is_valid, error
    if not is_base_unit(normalize_unit(unit)):
        return False, f"{field_name}: {ERROR_INVALID_BASE_UNIT}"
    return True, ""


def validate_category(
    category: Optional[str], allowed: List[str], field_name: str = "Category"
) -> Tuple[bool, str]:
    """
    Validate an optional category against a list of allowed categories.

    Args:
        category: Category to validate; empty means "no category"
        allowed: Allowed category names (case-insensitive)
        field_name: Name of the field for error messages

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not category:
        return True, ""
    is_valid, error = validate_string_length(category, MAX_CATEGORY_LENGTH, field_name)
    if not is_valid:
        return is_valid, error
    if category.strip().lower() not in {c.lower() for c in allowed}:
        return False, f"{field_name}: Must be one of {', '.join(allowed)}"
    return True, ""


def validate_ingredient_data(data: dict) -> Tuple[bool, list]:  # noqa: C901
    """
    Validate all fields for an ingredient.

    Args:
        data: Dictionary containing ingredient fields

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    # Required: Name
    is_valid, error = validate_required_string(data.get("name"), "Name")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(data.get("name"), MAX_NAME_LENGTH, "Name")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_category(data.get("category"), INGREDIENT_CATEGORIES)
    if not is_valid:
        errors.append(error)

    # Required: Pack quantity and unit
    is_valid, error = validate_number_range(
        data.get("pack_quantity"), 0, MAX_QUANTITY, "Pack Quantity"
    )
    if is_valid:
        is_valid, error = validate_positive_number(data.get("pack_quantity"), "Pack Quantity")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_unit(data.get("pack_unit"), "Pack Unit")
    if not is_valid:
        errors.append(error)

    # Required: Pack price (zero allowed for free samples)
    is_valid, error = validate_number_range(data.get("pack_price"), 0, MAX_COST, "Pack Price")
    if not is_valid:
        errors.append(error)

    # Optional: Density
    if data.get("density_g_per_ml") is not None:
        is_valid, error = validate_positive_number(data.get("density_g_per_ml"), "Density")
        if is_valid:
            is_valid, error = validate_number_range(
                data.get("density_g_per_ml"), 0, MAX_DENSITY_G_PER_ML, "Density"
            )
        if not is_valid:
            errors.append(error)

    # Optional: Batch pricing tiers
    for index, tier in enumerate(data.get("batch_pricing") or [], start=1):
        if not isinstance(tier, dict):
            errors.append(f"Batch Pricing tier {index}: Must be a mapping")
            continue
        is_valid, error = validate_positive_number(
            tier.get("pack_quantity"), f"Batch Pricing tier {index} quantity"
        )
        if not is_valid:
            errors.append(error)
        is_valid, error = validate_non_negative_number(
            tier.get("pack_price"), f"Batch Pricing tier {index} price"
        )
        if not is_valid:
            errors.append(error)
        if tier.get("purchase_unit") is not None:
            is_valid, error = validate_unit(
                tier.get("purchase_unit"), f"Batch Pricing tier {index} unit"
            )
            if not is_valid:
                errors.append(error)
        if tier.get("unit_size") is not None:
            is_valid, error = validate_positive_number(
                tier.get("unit_size"), f"Batch Pricing tier {index} unit size"
            )
            if not is_valid:
                errors.append(error)

    if data.get("notes"):
        is_valid, error = validate_string_length(data.get("notes"), MAX_NOTES_LENGTH, "Notes")
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_recipe_data(data: dict) -> Tuple[bool, list]:
    """
    Validate all fields for a recipe.

    Args:
        data: Dictionary containing recipe fields

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    is_valid, error = validate_required_string(data.get("name"), "Recipe Name")
    if not is_valid:
        errors.append(error)
    else:
        is_valid, error = validate_string_length(data.get("name"), MAX_NAME_LENGTH, "Recipe Name")
        if not is_valid:
            errors.append(error)

    is_valid, error = validate_category(data.get("category"), RECIPE_CATEGORIES)
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_positive_number(data.get("yield_quantity"), "Yield Quantity")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_base_unit(data.get("yield_unit"), "Yield Unit")
    if not is_valid:
        errors.append(error)

    # Optional: Selling price per output unit
    if data.get("selling_price") is not None:
        is_valid, error = validate_number_range(
            data.get("selling_price"), 0, MAX_COST, "Selling Price"
        )
        if not is_valid:
            errors.append(error)

    if data.get("notes"):
        is_valid, error = validate_string_length(data.get("notes"), MAX_NOTES_LENGTH, "Notes")
        if not is_valid:
            errors.append(error)

    return len(errors) == 0, errors


def validate_usage_data(quantity: Any, unit: Optional[str]) -> Tuple[bool, list]:
    """
    Validate the quantity and unit of a recipe item or sub-recipe usage.

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    is_valid, error = validate_positive_number(quantity, "Quantity")
    if not is_valid:
        errors.append(error)

    is_valid, error = validate_unit(unit, "Unit")
    if not is_valid:
        errors.append(error)

    return len(errors) == 0, errors


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string value by stripping whitespace and converting empty strings to None.

    Args:
        value: The string value to sanitize

    Returns:
        Sanitized string or None
    """
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None
