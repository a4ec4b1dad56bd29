"""
Ingredient Service - Business logic for ingredients and their pack pricing.

This service provides:
- CRUD operations with input validation
- Pack normalisation: the pack size is stored in its base unit, with the
  unit the user typed kept for display
- Density fill-in from the reference table for common ingredients
- Dependency checking before deletion
- Usage cost preview for recipe forms
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from bakery_costing.models import Ingredient, RecipeItem
from bakery_costing.services.database import session_scope
from bakery_costing.services.exceptions import (
    DatabaseError,
    IngredientInUse,
    IngredientNotFound,
    ValidationError,
)
from bakery_costing.services.logging_utils import get_service_logger, log_operation
from bakery_costing.services.unit_converter import (
    compute_ingredient_usage_cost,
    display_quantity,
    from_base,
    lookup_ingredient_density,
    normalize_unit,
    to_base,
)
from bakery_costing.utils.constants import DEFAULT_CURRENCY
from bakery_costing.utils.validators import sanitize_string, validate_ingredient_data

logger = get_service_logger(__name__)

_PACK_FIELDS = ("pack_quantity", "pack_unit")


def _normalise_pack(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert the entered pack size to its base unit.

    Returns the column values for pack_quantity, pack_unit and original_unit.
    """
    entered_unit = normalize_unit(data["pack_unit"])
    amount, base = to_base(data["pack_quantity"], entered_unit)
    return {
        "pack_quantity": float(amount),
        "pack_unit": base,
        "original_unit": entered_unit,
    }


def _column_values(data: Dict[str, Any]) -> Dict[str, Any]:
    values = {
        "name": data["name"].strip(),
        "category": sanitize_string(data.get("category")),
        "pack_price": Decimal(str(data["pack_price"])),
        "currency": data.get("currency") or DEFAULT_CURRENCY,
        "density_g_per_ml": data.get("density_g_per_ml"),
        "batch_pricing": data.get("batch_pricing"),
        "allergens": sanitize_string(data.get("allergens")),
        "notes": sanitize_string(data.get("notes")),
    }
    values.update(_normalise_pack(data))
    if values["density_g_per_ml"] is None:
        values["density_g_per_ml"] = lookup_ingredient_density(values["name"])
    return values


# ============================================================================
# CRUD Operations
# ============================================================================


def create_ingredient(data: Dict[str, Any]) -> Ingredient:
    """
    Create a new ingredient.

    The pack may be entered in any unit ("1.5", "kg"); it is stored as
    1500 g with original_unit "kg". When no density is given, one is looked
    up by name from the reference table.

    Args:
        data: Dictionary with ingredient fields (name, pack_quantity,
              pack_unit, pack_price, optional category, currency,
              density_g_per_ml, batch_pricing, allergens, notes)

    Returns:
        Created Ingredient instance

    Raises:
        ValidationError: If data validation fails
        DatabaseError: If database operation fails
    """
    is_valid, errors = validate_ingredient_data(data)
    if not is_valid:
        raise ValidationError(errors)

    try:
        with session_scope() as session:
            ingredient = Ingredient(**_column_values(data))
            session.add(ingredient)
            session.flush()
            session.refresh(ingredient)

            log_operation(
                logger,
                operation="create_ingredient",
                outcome="success",
                ingredient_id=ingredient.id,
                ingredient_name=ingredient.name,
            )
            return ingredient

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create ingredient", e)


def get_ingredient(ingredient_id: int) -> Ingredient:
    """
    Retrieve an ingredient by ID.

    Args:
        ingredient_id: Ingredient ID

    Returns:
        Ingredient instance

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()

            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            return ingredient

    except IngredientNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to retrieve ingredient {ingredient_id}", e)


def list_ingredients(
    category: Optional[str] = None,
    name_search: Optional[str] = None,
) -> List[Ingredient]:
    """
    Retrieve all ingredients with optional filtering, ordered by name.

    Args:
        category: Filter by category (exact match)
        name_search: Filter by name (case-insensitive partial match)

    Returns:
        List of Ingredient instances

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            query = session.query(Ingredient)

            if category:
                query = query.filter(Ingredient.category == category)

            if name_search:
                query = query.filter(Ingredient.name.ilike(f"%{name_search}%"))

            return query.order_by(Ingredient.name).all()

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to retrieve ingredients", e)


def update_ingredient(ingredient_id: int, data: Dict[str, Any]) -> Ingredient:
    """
    Update an ingredient.

    Fields not present in data keep their current values. pack_quantity and
    pack_unit must be supplied together and are normalised as on create.

    Args:
        ingredient_id: Ingredient ID
        data: Dictionary with fields to update

    Returns:
        Updated Ingredient instance

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        ValidationError: If the merged data fails validation
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()

            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            pack_fields = [field for field in _PACK_FIELDS if field in data]
            if len(pack_fields) == 1:
                raise ValidationError(["Pack Quantity and Pack Unit must be updated together"])

            merged = ingredient.to_dict()
            merged.update(data)

            is_valid, errors = validate_ingredient_data(merged)
            if not is_valid:
                raise ValidationError(errors)

            values = _column_values(merged)
            if not pack_fields:
                values["original_unit"] = ingredient.original_unit
            if "density_g_per_ml" in data and data["density_g_per_ml"] is None:
                values["density_g_per_ml"] = None
            ingredient.update_from_dict(values)

            session.flush()
            session.refresh(ingredient)

            log_operation(
                logger,
                operation="update_ingredient",
                outcome="success",
                ingredient_id=ingredient_id,
                fields=sorted(data),
            )
            return ingredient

    except (IngredientNotFound, ValidationError):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to update ingredient {ingredient_id}", e)


def delete_ingredient(ingredient_id: int) -> bool:
    """
    Delete an ingredient that no recipe uses.

    Args:
        ingredient_id: Ingredient ID

    Returns:
        True if deleted successfully

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        IngredientInUse: If any recipe still uses the ingredient
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()

            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            recipe_count = (
                session.query(RecipeItem.recipe_id)
                .filter_by(ingredient_id=ingredient_id)
                .distinct()
                .count()
            )
            if recipe_count > 0:
                raise IngredientInUse(ingredient_id, recipe_count)

            session.delete(ingredient)

            log_operation(
                logger,
                operation="delete_ingredient",
                outcome="success",
                ingredient_id=ingredient_id,
            )
            return True

    except (IngredientNotFound, IngredientInUse):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete ingredient {ingredient_id}", e)


# ============================================================================
# Display and Costing Helpers
# ============================================================================


def get_pack_for_display(ingredient_id: int) -> Dict[str, Any]:
    """
    Express an ingredient's pack in the unit it was entered in.

    Args:
        ingredient_id: Ingredient ID

    Returns:
        Dict with quantity (Decimal), unit and text (e.g., "1.5 kg")

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        CostingError: If the stored pack cannot be expressed in original_unit
    """
    ingredient = get_ingredient(ingredient_id)
    unit = ingredient.original_unit or ingredient.pack_unit
    quantity = from_base(
        ingredient.pack_quantity, ingredient.pack_unit, unit, ingredient.density_g_per_ml
    )
    return {
        "quantity": quantity,
        "unit": unit,
        "text": display_quantity(quantity, unit, precision=3, normalize=False),
    }


def calculate_usage_cost(ingredient_id: int, quantity: Any, unit: str) -> Decimal:
    """
    Price a prospective usage of an ingredient (recipe form preview).

    Args:
        ingredient_id: Ingredient ID
        quantity: Amount used
        unit: Unit of quantity

    Returns:
        Cost of the usage

    Raises:
        IngredientNotFound: If ingredient doesn't exist
        CostingError: If the usage cannot be priced
    """
    ingredient = get_ingredient(ingredient_id)
    return compute_ingredient_usage_cost(quantity, unit, ingredient)
