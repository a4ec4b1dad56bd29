"""
Recipe cost breakdowns built on the costing engine.

Produces the per-line view a recipe page shows: every ingredient usage with
its cost, subtotals per section, sub-recipes priced at their own cost per
output unit, and the recipe's total, cost per output unit and COGS.

Like the engine, these functions are pure and accept either the ORM models
or the plain dataclasses defined here. A recipe is anything exposing:
    name, yield_quantity, yield_unit, items, sections, sub_recipes,
    selling_price (optional)
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bakery_costing.services.exceptions import CircularRecipeReference
from bakery_costing.services.unit_converter import (
    RecipeSection,
    UsageItem,
    compute_cogs_percentage,
    compute_cost_per_output_unit,
    compute_ingredient_usage_cost,
    from_base,
    to_base,
)


@dataclass(frozen=True)
class SubRecipeUsage:
    """A recipe used as an ingredient of another recipe."""

    sub_recipe: Any
    quantity: Any
    unit: str


@dataclass(frozen=True)
class RecipeDefinition:
    """Plain-value recipe accepted by build_cost_breakdown."""

    name: str
    yield_quantity: Any
    yield_unit: str
    items: Tuple[UsageItem, ...] = field(default_factory=tuple)
    sections: Tuple[RecipeSection, ...] = field(default_factory=tuple)
    sub_recipes: Tuple[SubRecipeUsage, ...] = field(default_factory=tuple)
    selling_price: Optional[Any] = None


@dataclass(frozen=True)
class LineCost:
    """Cost of one ingredient usage."""

    name: str
    quantity: Any
    unit: str
    cost: Decimal
    section: Optional[str] = None


@dataclass(frozen=True)
class SubRecipeCost:
    """Cost of one sub-recipe usage."""

    name: str
    quantity: Any
    unit: str
    cost: Decimal
    cost_per_unit: Decimal


@dataclass(frozen=True)
class RecipeCostBreakdown:
    """Full cost picture of a recipe."""

    recipe_name: str
    yield_quantity: Decimal
    yield_unit: str
    lines: List[LineCost]
    sub_recipes: List[SubRecipeCost]
    section_totals: Dict[str, Decimal]
    total_cost: Decimal
    cost_per_output_unit: Decimal
    cogs_percentage: Optional[Decimal]

    @property
    def ingredient_cost(self) -> Decimal:
        """Cost of direct ingredient usages (sections included)."""
        return sum((line.cost for line in self.lines), Decimal("0"))

    @property
    def sub_recipe_cost(self) -> Decimal:
        """Cost contributed by sub-recipes."""
        return sum((sub.cost for sub in self.sub_recipes), Decimal("0"))


def _item_name(item: Any) -> str:
    name = getattr(item, "name", None)
    if name:
        return name
    return getattr(item.ingredient, "name", None) or "Unnamed ingredient"


def _line_costs(items: Sequence[Any], section: Optional[str] = None) -> List[LineCost]:
    return [
        LineCost(
            name=_item_name(item),
            quantity=item.quantity,
            unit=item.unit,
            cost=compute_ingredient_usage_cost(item.quantity, item.unit, item.ingredient),
            section=section,
        )
        for item in items
    ]


def build_cost_breakdown(recipe: Any, _parents: Tuple[Any, ...] = ()) -> RecipeCostBreakdown:
    """
    Build a line-by-line cost breakdown for a recipe.

    Sub-recipe usages are converted into the sub-recipe's yield unit and
    priced at its cost per output unit (computed recursively).

    Args:
        recipe: Recipe model or RecipeDefinition

    Returns:
        RecipeCostBreakdown

    Raises:
        CostingError: Any engine failure on a line, a sub-recipe usage whose
                      unit does not match the sub-recipe's yield, an invalid
                      yield, or a sub-recipe cycle (CircularRecipeReference)
    """
    if any(parent is recipe for parent in _parents):
        chain = [parent.name for parent in _parents] + [recipe.name]
        raise CircularRecipeReference(chain)

    lines = _line_costs(recipe.items)

    section_totals: Dict[str, Decimal] = {}
    for section in recipe.sections:
        section_lines = _line_costs(section.items, section=section.name)
        section_totals[section.name] = sum((line.cost for line in section_lines), Decimal("0"))
        lines.extend(section_lines)

    sub_costs = []
    for usage in getattr(recipe, "sub_recipes", ()):
        sub_breakdown = build_cost_breakdown(usage.sub_recipe, _parents + (recipe,))
        amount, base = to_base(usage.quantity, usage.unit)
        quantity_in_yield_unit = from_base(amount, base, usage.sub_recipe.yield_unit)
        sub_costs.append(
            SubRecipeCost(
                name=usage.sub_recipe.name,
                quantity=usage.quantity,
                unit=usage.unit,
                cost=sub_breakdown.cost_per_output_unit * quantity_in_yield_unit,
                cost_per_unit=sub_breakdown.cost_per_output_unit,
            )
        )

    total_cost = sum((line.cost for line in lines), Decimal("0")) + sum(
        (sub.cost for sub in sub_costs), Decimal("0")
    )
    cost_per_output_unit = compute_cost_per_output_unit(total_cost, recipe.yield_quantity)

    return RecipeCostBreakdown(
        recipe_name=recipe.name,
        yield_quantity=Decimal(str(recipe.yield_quantity)),
        yield_unit=recipe.yield_unit,
        lines=lines,
        sub_recipes=sub_costs,
        section_totals=section_totals,
        total_cost=total_cost,
        cost_per_output_unit=cost_per_output_unit,
        cogs_percentage=compute_cogs_percentage(
            cost_per_output_unit, getattr(recipe, "selling_price", None)
        ),
    )


def scale_breakdown(breakdown: RecipeCostBreakdown, factor: Any) -> RecipeCostBreakdown:
    """
    Scale a breakdown to a different batch size.

    Line, section, sub-recipe and total costs scale with the batch, as does
    the yield; cost per output unit and COGS are unchanged.

    Args:
        breakdown: Breakdown for one batch
        factor: Batch multiplier (e.g., 2 for a double batch)

    Returns:
        New RecipeCostBreakdown
    """
    multiplier = Decimal(str(factor))
    return replace(
        breakdown,
        yield_quantity=breakdown.yield_quantity * multiplier,
        lines=[replace(line, cost=line.cost * multiplier) for line in breakdown.lines],
        sub_recipes=[replace(sub, cost=sub.cost * multiplier) for sub in breakdown.sub_recipes],
        section_totals={
            name: total * multiplier for name, total in breakdown.section_totals.items()
        },
        total_cost=breakdown.total_cost * multiplier,
    )
