"""
Recipe Service - Business logic for recipe management and costing.

This service provides:
- Recipe CRUD with input validation
- Recipe items, sections and sub-recipes
- Cost calculation through the costing engine (errors propagate)
- Cost summaries for list and report pages (failures shown as missing)
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from bakery_costing.models import Ingredient, Recipe, RecipeComponent, RecipeItem, RecipeSection
from bakery_costing.services.cost_display import cogs_sort_key, cost_or_none
from bakery_costing.services.database import session_scope
from bakery_costing.services.exceptions import (
    CostingError,
    DatabaseError,
    IngredientNotFound,
    RecipeNotFound,
    ValidationError,
)
from bakery_costing.services.logging_utils import get_service_logger, log_operation
from bakery_costing.services.recipe_costing import (
    RecipeCostBreakdown,
    build_cost_breakdown,
    scale_breakdown,
)
from bakery_costing.services.unit_converter import normalize_unit, units_compatible
from bakery_costing.utils.validators import (
    sanitize_string,
    validate_recipe_data,
    validate_usage_data,
)

logger = get_service_logger(__name__)


def _get_recipe_or_raise(session, recipe_id: int) -> Recipe:
    recipe = session.query(Recipe).filter_by(id=recipe_id).first()
    if not recipe:
        raise RecipeNotFound(recipe_id)
    return recipe


def _next_sort_order(session, model, recipe_id: int) -> int:
    max_order = session.query(func.max(model.sort_order)).filter_by(recipe_id=recipe_id).scalar()
    return (max_order or 0) + 1


# ============================================================================
# CRUD Operations
# ============================================================================


def create_recipe(recipe_data: Dict[str, Any], items_data: List[Dict[str, Any]] = None) -> Recipe:
    """
    Create a new recipe with optional items.

    Args:
        recipe_data: Dictionary with recipe fields (name, yield_quantity,
                     yield_unit, optional category, selling_price, notes)
        items_data: List of item dicts with:
            - ingredient_id: int
            - quantity: float
            - unit: str
            - section: str (optional, created on first use)
            - notes: str (optional)

    Returns:
        Created Recipe instance with items loaded

    Raises:
        ValidationError: If recipe or item data validation fails
        IngredientNotFound: If an ingredient_id doesn't exist
        DatabaseError: If database operation fails
    """
    is_valid, errors = validate_recipe_data(recipe_data)
    for index, item in enumerate(items_data or [], start=1):
        item_valid, item_errors = validate_usage_data(item.get("quantity"), item.get("unit"))
        if not item_valid:
            errors = errors + [f"Item {index}: {error}" for error in item_errors]
            is_valid = False
    if not is_valid:
        raise ValidationError(errors)

    try:
        with session_scope() as session:
            selling_price = recipe_data.get("selling_price")
            recipe = Recipe(
                name=recipe_data["name"].strip(),
                category=sanitize_string(recipe_data.get("category")),
                yield_quantity=float(recipe_data["yield_quantity"]),
                yield_unit=normalize_unit(recipe_data["yield_unit"]),
                selling_price=Decimal(str(selling_price)) if selling_price is not None else None,
                notes=sanitize_string(recipe_data.get("notes")),
            )
            session.add(recipe)
            session.flush()

            sections: Dict[str, RecipeSection] = {}
            for sort_order, item_data in enumerate(items_data or [], start=1):
                ingredient = (
                    session.query(Ingredient).filter_by(id=item_data["ingredient_id"]).first()
                )
                if not ingredient:
                    raise IngredientNotFound(item_data["ingredient_id"])

                section = None
                section_name = sanitize_string(item_data.get("section"))
                if section_name:
                    if section_name not in sections:
                        sections[section_name] = RecipeSection(
                            recipe=recipe, name=section_name, sort_order=len(sections) + 1
                        )
                    section = sections[section_name]

                session.add(
                    RecipeItem(
                        recipe=recipe,
                        ingredient=ingredient,
                        section=section,
                        quantity=float(item_data["quantity"]),
                        unit=normalize_unit(item_data["unit"]),
                        notes=sanitize_string(item_data.get("notes")),
                        sort_order=sort_order,
                    )
                )

            session.flush()
            session.refresh(recipe)

            log_operation(
                logger,
                operation="create_recipe",
                outcome="success",
                recipe_id=recipe.id,
                item_count=len(items_data or []),
            )
            return recipe

    except (ValidationError, IngredientNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to create recipe", e)


def get_recipe(recipe_id: int) -> Recipe:
    """
    Retrieve a recipe by ID, with items, sections and sub-recipes loaded.

    Args:
        recipe_id: Recipe ID

    Returns:
        Recipe instance

    Raises:
        RecipeNotFound: If recipe doesn't exist
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            return _get_recipe_or_raise(session, recipe_id)

    except RecipeNotFound:
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to retrieve recipe {recipe_id}", e)


def list_recipes(category: Optional[str] = None) -> List[Recipe]:
    """
    Retrieve all recipes ordered by name, optionally filtered by category.

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            query = session.query(Recipe)
            if category:
                query = query.filter(Recipe.category == category)
            return query.order_by(Recipe.name).all()

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to retrieve recipes", e)


def delete_recipe(recipe_id: int) -> bool:
    """
    Delete a recipe that is not used as a sub-recipe elsewhere.

    Args:
        recipe_id: Recipe ID

    Returns:
        True if deleted successfully

    Raises:
        RecipeNotFound: If recipe doesn't exist
        ValidationError: If other recipes include this one
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            recipe = _get_recipe_or_raise(session, recipe_id)

            parent_count = (
                session.query(RecipeComponent).filter_by(component_recipe_id=recipe_id).count()
            )
            if parent_count > 0:
                raise ValidationError(
                    [f"'{recipe.name}' is used as a sub-recipe in {parent_count} recipe(s)"]
                )

            session.delete(recipe)

            log_operation(logger, operation="delete_recipe", outcome="success", recipe_id=recipe_id)
            return True

    except (RecipeNotFound, ValidationError):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to delete recipe {recipe_id}", e)


# ============================================================================
# Items, Sections and Sub-Recipes
# ============================================================================


def add_section_to_recipe(recipe_id: int, name: str) -> RecipeSection:
    """
    Add a named section (e.g., "Dough", "Filling") to a recipe.

    Raises:
        RecipeNotFound: If recipe doesn't exist
        ValidationError: If the name is empty or already used in the recipe
        DatabaseError: If database operation fails
    """
    section_name = sanitize_string(name)
    if not section_name:
        raise ValidationError(["Section Name: This field is required"])

    try:
        with session_scope() as session:
            _get_recipe_or_raise(session, recipe_id)

            existing = (
                session.query(RecipeSection)
                .filter_by(recipe_id=recipe_id, name=section_name)
                .first()
            )
            if existing:
                raise ValidationError([f"Section '{section_name}' already exists in this recipe"])

            section = RecipeSection(
                recipe_id=recipe_id,
                name=section_name,
                sort_order=_next_sort_order(session, RecipeSection, recipe_id),
            )
            session.add(section)
            session.flush()
            session.refresh(section)

            log_operation(
                logger,
                operation="add_section_to_recipe",
                outcome="success",
                recipe_id=recipe_id,
                section_id=section.id,
            )
            return section

    except (RecipeNotFound, ValidationError):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to add recipe section", e)


def add_item_to_recipe(
    recipe_id: int,
    ingredient_id: int,
    quantity: float,
    unit: str,
    section_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> RecipeItem:
    """
    Add an ingredient usage to a recipe.

    The usage is not priced here; a usage the engine cannot price (such as
    a volume of an ingredient with no density) is stored and surfaces as a
    CostingError when the recipe is costed.

    Args:
        recipe_id: Recipe ID
        ingredient_id: Ingredient ID
        quantity: Amount used
        unit: Unit of quantity (any supported unit or alias)
        section_id: Optional section of the same recipe
        notes: Optional notes

    Returns:
        Created RecipeItem instance

    Raises:
        ValidationError: If quantity/unit are invalid or the section belongs elsewhere
        RecipeNotFound: If recipe doesn't exist
        IngredientNotFound: If ingredient doesn't exist
        DatabaseError: If database operation fails
    """
    is_valid, errors = validate_usage_data(quantity, unit)
    if not is_valid:
        raise ValidationError(errors)

    try:
        with session_scope() as session:
            _get_recipe_or_raise(session, recipe_id)

            ingredient = session.query(Ingredient).filter_by(id=ingredient_id).first()
            if not ingredient:
                raise IngredientNotFound(ingredient_id)

            if section_id is not None:
                section = (
                    session.query(RecipeSection)
                    .filter_by(id=section_id, recipe_id=recipe_id)
                    .first()
                )
                if not section:
                    raise ValidationError(
                        [f"Section {section_id} is not part of recipe {recipe_id}"]
                    )

            item = RecipeItem(
                recipe_id=recipe_id,
                ingredient_id=ingredient_id,
                section_id=section_id,
                quantity=float(quantity),
                unit=normalize_unit(unit),
                notes=sanitize_string(notes),
                sort_order=_next_sort_order(session, RecipeItem, recipe_id),
            )
            session.add(item)
            session.flush()
            session.refresh(item)

            log_operation(
                logger,
                operation="add_item_to_recipe",
                outcome="success",
                recipe_id=recipe_id,
                ingredient_id=ingredient_id,
            )
            return item

    except (ValidationError, RecipeNotFound, IngredientNotFound):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to add item to recipe", e)


def _descendant_recipe_ids(session, recipe_id: int) -> Set[int]:
    """IDs of every recipe reachable through recipe_id's sub-recipes."""
    found: Set[int] = set()
    pending = [recipe_id]
    while pending:
        current = pending.pop()
        children = (
            session.query(RecipeComponent.component_recipe_id).filter_by(recipe_id=current).all()
        )
        for (child_id,) in children:
            if child_id not in found:
                found.add(child_id)
                pending.append(child_id)
    return found


def add_sub_recipe(
    recipe_id: int,
    component_recipe_id: int,
    quantity: float,
    unit: str,
    notes: Optional[str] = None,
) -> RecipeComponent:
    """
    Use one recipe inside another (e.g., 300 g of lemon curd in a tart).

    Args:
        recipe_id: Parent recipe ID
        component_recipe_id: Recipe being included
        quantity: Amount of the sub-recipe used
        unit: Unit sharing a base with the sub-recipe's yield unit
        notes: Optional notes

    Returns:
        Created RecipeComponent instance

    Raises:
        RecipeNotFound: If either recipe doesn't exist
        ValidationError: If quantity/unit are invalid, the unit cannot be
                         expressed in the sub-recipe's yield unit, the
                         sub-recipe is already included, or including it
                         would create a cycle
        DatabaseError: If database operation fails
    """
    is_valid, errors = validate_usage_data(quantity, unit)
    if not is_valid:
        raise ValidationError(errors)
    if recipe_id == component_recipe_id:
        raise ValidationError(["A recipe cannot include itself"])

    try:
        with session_scope() as session:
            _get_recipe_or_raise(session, recipe_id)
            component = _get_recipe_or_raise(session, component_recipe_id)

            usage_unit = normalize_unit(unit)
            if not units_compatible(usage_unit, component.yield_unit):
                raise ValidationError(
                    [
                        f"Unit '{usage_unit}' cannot be converted to "
                        f"'{component.name}' yield unit '{component.yield_unit}'"
                    ]
                )

            existing = (
                session.query(RecipeComponent)
                .filter_by(recipe_id=recipe_id, component_recipe_id=component_recipe_id)
                .first()
            )
            if existing:
                raise ValidationError(
                    [f"'{component.name}' is already a sub-recipe of this recipe"]
                )

            if recipe_id in _descendant_recipe_ids(session, component_recipe_id):
                raise ValidationError(
                    [f"Adding '{component.name}' would create a circular reference"]
                )

            recipe_component = RecipeComponent(
                recipe_id=recipe_id,
                component_recipe_id=component_recipe_id,
                quantity=float(quantity),
                unit=usage_unit,
                notes=sanitize_string(notes),
            )
            session.add(recipe_component)
            session.flush()
            session.refresh(recipe_component)

            log_operation(
                logger,
                operation="add_sub_recipe",
                outcome="success",
                recipe_id=recipe_id,
                component_recipe_id=component_recipe_id,
            )
            return recipe_component

    except (RecipeNotFound, ValidationError):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError("Failed to add sub-recipe", e)


# ============================================================================
# Costing
# ============================================================================


def calculate_recipe_cost(recipe_id: int) -> Decimal:
    """
    Calculate the total cost of one batch of a recipe.

    Args:
        recipe_id: Recipe ID

    Returns:
        Total cost of all items and sub-recipes

    Raises:
        RecipeNotFound: If recipe doesn't exist
        CostingError: If any item or sub-recipe cannot be priced
        DatabaseError: If database operation fails
    """
    return get_recipe_with_costs(recipe_id)["breakdown"].total_cost


def get_recipe_with_costs(recipe_id: int, scale: Optional[Any] = None) -> Dict[str, Any]:
    """
    Get a recipe with its full cost breakdown.

    Args:
        recipe_id: Recipe ID
        scale: Optional batch multiplier applied to totals and yield

    Returns:
        Dictionary:
        {
            'recipe': Recipe instance,
            'breakdown': RecipeCostBreakdown,
        }

    Raises:
        RecipeNotFound: If recipe doesn't exist
        CostingError: If any item or sub-recipe cannot be priced
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            recipe = _get_recipe_or_raise(session, recipe_id)
            breakdown = build_cost_breakdown(recipe)
            if scale is not None:
                breakdown = scale_breakdown(breakdown, scale)

            log_operation(
                logger,
                operation="get_recipe_with_costs",
                outcome="success",
                level=logging.DEBUG,
                recipe_id=recipe_id,
                total_cost=str(breakdown.total_cost),
            )
            return {"recipe": recipe, "breakdown": breakdown}

    except (RecipeNotFound, CostingError):
        raise
    except SQLAlchemyError as e:
        raise DatabaseError(f"Failed to get recipe costs for {recipe_id}", e)


def get_recipe_cost_summaries(category: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Summarise the cost of every recipe for list and report pages.

    A recipe that cannot be costed is still listed, with None for its cost
    figures (logged at WARNING). Results are sorted by COGS percentage,
    lowest first, with recipes lacking a selling price or a cost last.

    Args:
        category: Optional category filter

    Returns:
        List of dicts with recipe_id, name, category, yield_quantity,
        yield_unit, selling_price, total_cost, cost_per_output_unit and
        cogs_percentage

    Raises:
        DatabaseError: If database operation fails
    """
    try:
        with session_scope() as session:
            query = session.query(Recipe)
            if category:
                query = query.filter(Recipe.category == category)

            summaries = []
            for recipe in query.order_by(Recipe.name).all():
                breakdown: Optional[RecipeCostBreakdown] = cost_or_none(
                    build_cost_breakdown, recipe, context={"recipe_id": recipe.id}
                )
                summaries.append(
                    {
                        "recipe_id": recipe.id,
                        "name": recipe.name,
                        "category": recipe.category,
                        "yield_quantity": recipe.yield_quantity,
                        "yield_unit": recipe.yield_unit,
                        "selling_price": recipe.selling_price,
                        "total_cost": breakdown.total_cost if breakdown else None,
                        "cost_per_output_unit": (
                            breakdown.cost_per_output_unit if breakdown else None
                        ),
                        "cogs_percentage": breakdown.cogs_percentage if breakdown else None,
                    }
                )

            summaries.sort(key=lambda summary: cogs_sort_key(summary["cogs_percentage"]))

            log_operation(
                logger,
                operation="get_recipe_cost_summaries",
                outcome="success",
                level=logging.DEBUG,
                recipe_count=len(summaries),
                uncosted=sum(1 for summary in summaries if summary["total_cost"] is None),
            )
            return summaries

    except SQLAlchemyError as e:
        raise DatabaseError("Failed to summarise recipe costs", e)
