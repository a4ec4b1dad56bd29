"""
Unit conversion and costing engine for Bakery Costing.

This module provides:
- The enumerated unit table (unit -> kind, base unit, factor)
- Conversions into and out of the four base units (g, ml, each, slices)
- Ingredient usage cost against a purchased pack
- Recipe roll-up, cost per output unit and COGS percentage
- Quantity display normalization

Conversion Strategy:
- Mass units convert through grams (base unit)
- Volume units convert through millilitres (base unit)
- Count units (each, slices) are their own base and never convert
- Mass <-> volume only bridges through an ingredient density (g/ml)

Every function here is pure: no I/O, no shared state, and failures are
raised immediately as CostingError subclasses. Deciding to show "0" or a
dash for a failed cost is the caller's policy (see cost_display).
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, localcontext
from itertools import chain
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from bakery_costing.services.exceptions import (
    DivisionByZero,
    IncompatibleUnitKind,
    InvalidYield,
    MissingDensity,
    UnknownUnit,
)
from bakery_costing.utils.constants import (
    DEFAULT_CURRENCY,
    INGREDIENT_DENSITIES,
    QUANTITY_DECIMAL_PLACES,
)


# ============================================================================
# Unit Table
# ============================================================================

MASS = "mass"
VOLUME = "volume"
COUNT = "count"

BASE_UNITS: Tuple[str, ...] = ("g", "ml", "each", "slices")


class UnitDefinition(NamedTuple):
    """Kind, canonical base unit and multiplicative factor of one unit."""

    kind: str
    base: str
    factor: Decimal


UNIT_TABLE: Dict[str, UnitDefinition] = {
    # Mass -> grams
    "mg": UnitDefinition(MASS, "g", Decimal("0.001")),
    "g": UnitDefinition(MASS, "g", Decimal("1")),
    "kg": UnitDefinition(MASS, "g", Decimal("1000")),
    "oz": UnitDefinition(MASS, "g", Decimal("28.349523125")),
    "lb": UnitDefinition(MASS, "g", Decimal("453.59237")),
    # Volume -> millilitres (US customary measures)
    "ml": UnitDefinition(VOLUME, "ml", Decimal("1")),
    "l": UnitDefinition(VOLUME, "ml", Decimal("1000")),
    "tsp": UnitDefinition(VOLUME, "ml", Decimal("4.92892")),
    "tbsp": UnitDefinition(VOLUME, "ml", Decimal("14.7868")),
    "cup": UnitDefinition(VOLUME, "ml", Decimal("236.588")),
    "floz": UnitDefinition(VOLUME, "ml", Decimal("29.5735")),
    "pint": UnitDefinition(VOLUME, "ml", Decimal("473.176")),
    "quart": UnitDefinition(VOLUME, "ml", Decimal("946.353")),
    "gallon": UnitDefinition(VOLUME, "ml", Decimal("3785.41")),
    # Count -> itself
    "each": UnitDefinition(COUNT, "each", Decimal("1")),
    "slices": UnitDefinition(COUNT, "slices", Decimal("1")),
}

# Free-text spellings accepted from forms and imports
UNIT_ALIASES: Dict[str, str] = {
    "milligram": "mg",
    "milligrams": "mg",
    "gram": "g",
    "grams": "g",
    "kilogram": "kg",
    "kilograms": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "ounce": "oz",
    "ounces": "oz",
    "pound": "lb",
    "pounds": "lb",
    "lbs": "lb",
    "millilitre": "ml",
    "millilitres": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "litre": "l",
    "litres": "l",
    "liter": "l",
    "liters": "l",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "cups": "cup",
    "fl oz": "floz",
    "fl-oz": "floz",
    "fluid ounce": "floz",
    "fluid ounces": "floz",
    "pints": "pint",
    "quarts": "quart",
    "gallons": "gallon",
    "ea": "each",
    "piece": "each",
    "pieces": "each",
    "slice": "slices",
}


class BaseQuantity(NamedTuple):
    """An amount expressed in one of the four base units."""

    amount: Decimal
    base: str


# ============================================================================
# Costing Inputs
# ============================================================================


@dataclass(frozen=True)
class PackPricing:
    """
    Pricing-relevant fields of an ingredient.

    Any object exposing pack_quantity, pack_unit, pack_price and
    density_g_per_ml (such as the Ingredient model) can be costed; this
    dataclass is the plain-value form used by forms and tests.

    batch_pricing holds optional volume-discount tiers. They are carried
    for callers but never read by the costing formula.
    """

    pack_quantity: Any
    pack_unit: str
    pack_price: Any
    density_g_per_ml: Optional[Any] = None
    currency: str = DEFAULT_CURRENCY
    batch_pricing: Optional[List[Dict[str, Any]]] = None


@dataclass(frozen=True)
class UsageItem:
    """One ingredient usage within a recipe."""

    quantity: Any
    unit: str
    ingredient: Any
    name: Optional[str] = None


@dataclass(frozen=True)
class RecipeSection:
    """Display grouping of usage items; carries no cost semantics."""

    name: str
    items: Tuple[UsageItem, ...] = field(default_factory=tuple)


# ============================================================================
# Unit Lookup
# ============================================================================


def _to_decimal(value: Any) -> Decimal:
    """Coerce ints, floats and numeric strings to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def normalize_unit(unit: str) -> str:
    """
    Resolve a unit string to its canonical table key.

    Args:
        unit: Unit string in any supported spelling (e.g., "Cups", "fl oz")

    Returns:
        Canonical unit (e.g., "cup", "floz")

    Raises:
        UnknownUnit: If the unit is not in the table or alias list
    """
    if not isinstance(unit, str):
        raise UnknownUnit(unit)
    key = unit.strip().lower()
    key = UNIT_ALIASES.get(key, key)
    if key not in UNIT_TABLE:
        raise UnknownUnit(unit)
    return key


def get_unit_definition(unit: str) -> UnitDefinition:
    """Return the table entry for a unit (any accepted spelling)."""
    return UNIT_TABLE[normalize_unit(unit)]


def get_unit_kind(unit: str) -> str:
    """
    Determine the kind of a unit.

    Args:
        unit: Unit string

    Returns:
        "mass", "volume" or "count"

    Raises:
        UnknownUnit: If the unit is not recognised
    """
    return get_unit_definition(unit).kind


def get_base_unit(unit: str) -> str:
    """Return the base unit ("g", "ml", "each" or "slices") a unit converts into."""
    return get_unit_definition(unit).base


def is_base_unit(unit: str) -> bool:
    """True if the unit is exactly one of the four base units."""
    return unit in BASE_UNITS


def units_compatible(unit1: str, unit2: str) -> bool:
    """
    Check if two units convert without a density.

    Units are compatible when they share a base unit; each and slices are
    therefore not compatible with each other.

    Args:
        unit1: First unit
        unit2: Second unit

    Returns:
        True if units are compatible, False otherwise (including unknown units)
    """
    try:
        return get_base_unit(unit1) == get_base_unit(unit2)
    except UnknownUnit:
        return False


# ============================================================================
# Base Unit Conversions
# ============================================================================


def to_base(amount: Any, unit: str, density_g_per_ml: Optional[Any] = None) -> BaseQuantity:
    """
    Convert an amount in any unit to its kind's base unit.

    The density argument is accepted so callers can pass an ingredient's
    density uniformly, but conversion always stays within the unit's kind;
    mass <-> volume bridging happens in compute_ingredient_usage_cost.

    Args:
        amount: Quantity to convert
        unit: Source unit (e.g., "kg", "tbsp", "slices")
        density_g_per_ml: Ignored here

    Returns:
        BaseQuantity(amount, base) where base is "g", "ml", "each" or "slices"

    Raises:
        UnknownUnit: If the unit is not in the table

    Example:
        >>> to_base(2, "kg")
        BaseQuantity(amount=Decimal('2000'), base='g')
    """
    definition = get_unit_definition(unit)
    return BaseQuantity(_to_decimal(amount) * definition.factor, definition.base)


def from_base(
    amount: Any,
    base: str,
    target_unit: str,
    density_g_per_ml: Optional[Any] = None,
) -> Decimal:
    """
    Convert a base-unit amount back into an arbitrary unit for display.

    Args:
        amount: Quantity in the base unit
        base: The base unit the amount is in ("g", "ml", "each", "slices")
        target_unit: Unit to express the amount in
        density_g_per_ml: Optional density to bridge g <-> volume or ml <-> mass

    Returns:
        Amount expressed in target_unit

    Raises:
        UnknownUnit: If base is not a base unit or target_unit is unknown
        IncompatibleUnitKind: If the kinds differ and no valid density bridges them
    """
    if base not in BASE_UNITS:
        raise UnknownUnit(base)
    target = get_unit_definition(target_unit)
    value = _to_decimal(amount)

    if target.base != base:
        if density_g_per_ml is None or not _is_mass_volume_pair(base, target.base):
            raise IncompatibleUnitKind(base, target_unit)
        value = _bridge(value, base, target.base, density_g_per_ml)

    return value / target.factor


def convert_between_units(
    quantity: Any,
    from_unit: str,
    to_unit: str,
    density_g_per_ml: Optional[Any] = None,
) -> Decimal:
    """
    Convert a quantity from one unit to another.

    Same-kind conversions need no density; mass <-> volume needs one.

    Args:
        quantity: Amount to convert
        from_unit: Source unit
        to_unit: Target unit
        density_g_per_ml: Optional density for mass <-> volume conversions

    Returns:
        Quantity expressed in to_unit

    Raises:
        UnknownUnit: If either unit is unknown
        MissingDensity: If mass <-> volume is requested without a density
        IncompatibleUnitKind: If a count unit is involved across kinds

    Example:
        >>> convert_between_units(250, "ml", "g", 1.03)
        Decimal('257.50')
    """
    amount, base = to_base(quantity, from_unit)
    target = get_unit_definition(to_unit)
    amount = _bridge(amount, base, target.base, density_g_per_ml)
    return amount / target.factor


def _is_mass_volume_pair(base1: str, base2: str) -> bool:
    return {base1, base2} == {"g", "ml"}


def _bridge(amount: Decimal, source: str, target: str, density_g_per_ml: Optional[Any]) -> Decimal:
    """Move an amount between base units, using density for g <-> ml."""
    if source == target:
        return amount

    if not _is_mass_volume_pair(source, target):
        raise IncompatibleUnitKind(source, target)

    if density_g_per_ml is None:
        raise MissingDensity(source, target)

    density = _to_decimal(density_g_per_ml)
    if density <= 0:
        raise IncompatibleUnitKind(source, target, "density must be greater than zero")

    # amount_g = amount_ml * density
    if source == "ml":
        return amount * density
    return amount / density


def lookup_ingredient_density(ingredient_name: Optional[str]) -> Optional[float]:
    """
    Look up a reference density (g/ml) for a common ingredient by name.

    Args:
        ingredient_name: Ingredient name (case-insensitive, exact match)

    Returns:
        Density in g/ml, or None if the name is not in the reference table
    """
    if not ingredient_name:
        return None
    return INGREDIENT_DENSITIES.get(ingredient_name.strip().lower())


# ============================================================================
# Cost Calculation
# ============================================================================


def cost_per_base_unit(pack_price: Any, pack_quantity: Any, pack_unit: str) -> Decimal:
    """
    Calculate the price of one base unit (g, ml, each or slice) of a pack.

    Args:
        pack_price: Cost of one pack
        pack_quantity: Amount in the pack, in pack_unit
        pack_unit: Unit of pack_quantity

    Returns:
        Price per base unit

    Raises:
        UnknownUnit: If pack_unit is unknown
        DivisionByZero: If the pack quantity is zero
    """
    pack_amount, _ = to_base(pack_quantity, pack_unit)
    if pack_amount == 0:
        raise DivisionByZero()
    return _to_decimal(pack_price) / pack_amount


def compute_ingredient_usage_cost(usage_quantity: Any, usage_unit: str, ingredient: Any) -> Decimal:
    """
    Price one ingredient usage against the ingredient's purchased pack.

    Formula: cost = usage (in the pack's base unit) x pack_price / pack_quantity

    Args:
        usage_quantity: Amount used (negative values produce a negative cost)
        usage_unit: Unit of usage_quantity (any supported unit)
        ingredient: Object with pack_quantity, pack_unit, pack_price and
                    optionally density_g_per_ml

    Returns:
        Cost of the usage in the ingredient's currency

    Raises:
        UnknownUnit: If usage_unit or pack_unit is unknown
        MissingDensity: If mass <-> volume bridging is needed without a density
        IncompatibleUnitKind: If count units are mixed with anything else
        DivisionByZero: If the pack quantity is zero

    Example:
        >>> flour = PackPricing(pack_quantity=1000, pack_unit="g", pack_price="2.40")
        >>> compute_ingredient_usage_cost(250, "g", flour)
        Decimal('0.6000')
    """
    pack_amount, pack_base = to_base(ingredient.pack_quantity, ingredient.pack_unit)
    if pack_amount == 0:
        raise DivisionByZero()

    usage_amount, usage_base = to_base(usage_quantity, usage_unit)
    density = getattr(ingredient, "density_g_per_ml", None)
    usage_in_pack_base = _bridge(usage_amount, usage_base, pack_base, density)

    unit_price = _to_decimal(ingredient.pack_price) / pack_amount
    return usage_in_pack_base * unit_price


def flatten_sections(sections: Iterable[Any]) -> List[Any]:
    """Collapse recipe sections into a single list of usage items."""
    return [item for section in sections for item in section.items]


def compute_recipe_cost(items: Iterable[Any] = (), sections: Iterable[Any] = ()) -> Decimal:
    """
    Sum the usage cost of every item in a recipe.

    Sections are flattened first; their boundaries carry no cost meaning.
    A failure on any single item propagates so a recipe never under-reports.

    Args:
        items: Usage items (quantity, unit, ingredient)
        sections: Objects with an items attribute

    Returns:
        Total cost (Decimal 0 for an empty recipe)
    """
    total = Decimal("0")
    for item in chain(items, flatten_sections(sections)):
        total += compute_ingredient_usage_cost(item.quantity, item.unit, item.ingredient)
    return total


def compute_cost_per_output_unit(total_cost: Any, yield_quantity: Any) -> Decimal:
    """
    Calculate the cost of one unit of recipe output.

    Args:
        total_cost: Total recipe cost
        yield_quantity: Amount of output the recipe produces

    Returns:
        total_cost / yield_quantity

    Raises:
        InvalidYield: If yield_quantity is zero or negative
    """
    yield_value = _to_decimal(yield_quantity)
    if yield_value <= 0:
        raise InvalidYield(yield_quantity)
    return _to_decimal(total_cost) / yield_value


def compute_cogs_percentage(
    cost_per_output_unit: Any, selling_price: Optional[Any]
) -> Optional[Decimal]:
    """
    Calculate cost of goods sold as a percentage of selling price.

    A missing or non-positive selling price is an expected business state
    ("price not set yet") and yields None rather than an error.

    Args:
        cost_per_output_unit: Cost of one output unit
        selling_price: Selling price of one output unit, or None

    Returns:
        (cost / price) x 100, or None
    """
    if selling_price is None:
        return None
    price = _to_decimal(selling_price)
    if price <= 0:
        return None
    return _to_decimal(cost_per_output_unit) / price * 100


# ============================================================================
# Display Helpers
# ============================================================================

_PROMOTIONS = {"mg": "g", "g": "kg", "ml": "l"}
_DEMOTIONS = {"kg": "g", "l": "ml"}
_STEP = Decimal("1000")


def format_quantity(
    amount: Any, unit: str, precision: int = QUANTITY_DECIMAL_PLACES, normalize: bool = True
) -> Tuple[Decimal, str]:
    """
    Choose a human-friendly unit and rounded amount for display.

    Promotes mg -> g, g -> kg and ml -> l at 1000, and demotes kg -> g and
    l -> ml below 1. Negative, NaN and infinite amounts, and units outside
    the mass/volume ladders, pass through unchanged. Very large amounts are
    rounded without overflowing the decimal context.

    Args:
        amount: Raw amount
        unit: Unit of the amount (normally a base unit)
        precision: Decimal places to round to (half-up)
        normalize: If False, keep the given unit and only round

    Returns:
        Tuple of (amount, unit)

    Example:
        >>> format_quantity(1250, "g")
        (Decimal('1.25'), 'kg')
    """
    value = _to_decimal(amount)
    key = unit.strip().lower() if isinstance(unit, str) else unit
    key = UNIT_ALIASES.get(key, key)

    if not value.is_finite() or value < 0:
        return value, unit

    if normalize:
        while key in _PROMOTIONS and value >= _STEP:
            value = value / _STEP
            key = _PROMOTIONS[key]

        if key in _DEMOTIONS and value < 1:
            value = value * _STEP
            key = _DEMOTIONS[key]

    quantum = Decimal(1).scaleb(-precision)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + precision + 2)
        return value.quantize(quantum, rounding=ROUND_HALF_UP), key


def display_quantity(
    amount: Any, unit: str, precision: int = QUANTITY_DECIMAL_PLACES, normalize: bool = True
) -> str:
    """
    Render a quantity for display (e.g., "1.25 kg", "500 g").

    Trailing zeros after the decimal point are dropped. With normalize=False
    the amount stays in the given unit.
    """
    value, display_unit = format_quantity(amount, unit, precision, normalize)
    text = f"{value:.{precision}f}" if value.is_finite() else str(value)
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {display_unit}"
