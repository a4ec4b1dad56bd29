"""Service layer exception classes for Bakery Costing.

This module defines all custom exceptions used by the costing engine and the
service layer to provide consistent error handling across the application.

Exception Hierarchy:
    ServiceError (base)
    ├── CostingError (engine errors - local, synchronous, never retried)
    │   ├── UnknownUnit
    │   ├── IncompatibleUnitKind
    │   ├── MissingDensity
    │   ├── DivisionByZero
    │   ├── InvalidYield
    │   └── CircularRecipeReference
    ├── IngredientNotFound
    ├── RecipeNotFound
    ├── IngredientInUse
    ├── ValidationError
    └── DatabaseError
"""

from typing import Iterable, Optional


class ServiceError(Exception):
    """Base exception for all service layer errors.

    All service-specific exceptions should inherit from this class.
    """

    pass


# ============================================================================
# Costing Engine Errors
# ============================================================================


class CostingError(ServiceError):
    """Base exception for unit conversion and costing failures.

    Callers that want to degrade gracefully (show a dash instead of a cost)
    catch this class; the engine itself never does.
    """

    pass


class UnknownUnit(CostingError):
    """Raised when a unit string is outside the enumerated unit table.

    Args:
        unit: The unit that could not be resolved

    Example:
        >>> raise UnknownUnit("bushel")
        UnknownUnit: Unknown unit: 'bushel'
    """

    def __init__(self, unit):
        self.unit = unit
        super().__init__(f"Unknown unit: '{unit}'")


class IncompatibleUnitKind(CostingError):
    """Raised when two units cannot be bridged.

    Covers count units against anything else (including each vs slices) and
    mass/volume pairs without a valid bridging density.

    Args:
        from_unit: Source unit or base
        to_unit: Target unit or base
        reason: Optional extra detail for the message

    Example:
        >>> raise IncompatibleUnitKind("each", "g")
        IncompatibleUnitKind: Cannot convert 'each' to 'g': incompatible unit kinds
    """

    def __init__(self, from_unit: str, to_unit: str, reason: Optional[str] = None):
        self.from_unit = from_unit
        self.to_unit = to_unit
        self.reason = reason
        message = f"Cannot convert '{from_unit}' to '{to_unit}': incompatible unit kinds"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MissingDensity(CostingError):
    """Raised when a mass/volume conversion is needed but no density is set.

    Args:
        usage_unit: Unit the ingredient is used in
        pack_unit: Unit the ingredient is priced in

    Example:
        >>> raise MissingDensity("ml", "g")
        MissingDensity: Density (g/ml) required to convert 'ml' to 'g'
    """

    def __init__(self, usage_unit: str, pack_unit: str):
        self.usage_unit = usage_unit
        self.pack_unit = pack_unit
        super().__init__(f"Density (g/ml) required to convert '{usage_unit}' to '{pack_unit}'")


class DivisionByZero(CostingError):
    """Raised when an ingredient pack quantity is zero."""

    def __init__(self, message: str = "Pack quantity cannot be zero"):
        super().__init__(message)


class InvalidYield(CostingError):
    """Raised when a recipe yield is zero or negative.

    Args:
        yield_quantity: The offending yield value
    """

    def __init__(self, yield_quantity):
        self.yield_quantity = yield_quantity
        super().__init__(f"Yield quantity must be positive, got {yield_quantity}")


class CircularRecipeReference(CostingError):
    """Raised when a recipe includes itself through its sub-recipes.

    Args:
        chain: Recipe names (or ids) from the outer recipe to the repeat
    """

    def __init__(self, chain: Iterable):
        self.chain = list(chain)
        path = " -> ".join(str(link) for link in self.chain)
        super().__init__(f"Circular sub-recipe reference: {path}")


# ============================================================================
# Persistence / Service Errors
# ============================================================================


class IngredientNotFound(ServiceError):
    """Raised when an ingredient cannot be found by ID."""

    def __init__(self, ingredient_id: int):
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with ID {ingredient_id} not found")


class RecipeNotFound(ServiceError):
    """Raised when a recipe cannot be found by ID."""

    def __init__(self, recipe_id: int):
        self.recipe_id = recipe_id
        super().__init__(f"Recipe with ID {recipe_id} not found")


class IngredientInUse(ServiceError):
    """Raised when attempting to delete an ingredient that recipes still use.

    Args:
        ingredient_id: Ingredient being deleted
        recipe_count: Number of recipes using it
    """

    def __init__(self, ingredient_id: int, recipe_count: int):
        self.ingredient_id = ingredient_id
        self.recipe_count = recipe_count
        super().__init__(
            f"Cannot delete ingredient {ingredient_id}: used in {recipe_count} recipe(s)"
        )


class ValidationError(ServiceError):
    """Raised when data validation fails."""

    def __init__(self, errors: list):
        self.errors = errors
        error_msg = "; ".join(errors)
        super().__init__(f"Validation failed: {error_msg}")


class DatabaseError(ServiceError):
    """Raised when a database operation fails."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(f"Database error: {message}")
