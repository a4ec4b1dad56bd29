"""
Command-line interface for Bakery Costing.

Usage Examples:
    # Convert between units (density needed for mass <-> volume)
    bakery-costing convert 2 cup g --density 0.6

    # Create the database
    bakery-costing init-db

    # Add an ingredient bought as a 1.5 kg bag for 1.20
    bakery-costing add-ingredient "Plain flour" 1.5 kg 1.20 --category Flour

    # Cost one recipe (optionally for a double batch)
    bakery-costing cost-recipe 3 --scale 2

    # Cost report for every recipe, sorted by COGS
    bakery-costing report
"""

import argparse
import logging
import sys
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from bakery_costing.services.cost_display import format_cost, format_percentage
from bakery_costing.services.database import initialize_app_database
from bakery_costing.services.exceptions import ServiceError
from bakery_costing.services.ingredient_service import create_ingredient, get_pack_for_display
from bakery_costing.services.recipe_service import (
    get_recipe_cost_summaries,
    get_recipe_with_costs,
)
from bakery_costing.services.unit_converter import convert_between_units, display_quantity
from bakery_costing.utils.config import get_config
from bakery_costing.utils.constants import APP_NAME, APP_VERSION

logger = logging.getLogger(__name__)


def _format_amount(value: Decimal, places: int = 4) -> str:
    """Round half-up and drop trailing zeros (e.g., 473.1760 -> 473.176)."""
    rounded = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    text = f"{rounded:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


# ============================================================================
# Commands
# ============================================================================


def convert_cmd(quantity: float, from_unit: str, to_unit: str, density: Optional[float]) -> int:
    """Convert a quantity between units."""
    result = convert_between_units(quantity, from_unit, to_unit, density)
    source = _format_amount(Decimal(str(quantity)))
    print(f"{source} {from_unit} = {_format_amount(result)} {to_unit}")
    return 0


def init_db_cmd() -> int:
    """Create the database and its tables."""
    initialize_app_database()
    print(f"Database ready: {get_config().database_url}")
    return 0


def add_ingredient_cmd(args: argparse.Namespace) -> int:
    """Create an ingredient from command-line arguments."""
    initialize_app_database()
    ingredient = create_ingredient(
        {
            "name": args.name,
            "pack_quantity": args.pack_quantity,
            "pack_unit": args.pack_unit,
            "pack_price": args.pack_price,
            "category": args.category,
            "currency": args.currency,
            "density_g_per_ml": args.density,
            "notes": args.notes,
        }
    )
    pack = get_pack_for_display(ingredient.id)
    print(
        f"Added ingredient {ingredient.id}: {ingredient.name} "
        f"({pack['text']} for {format_cost(ingredient.pack_price)})"
    )
    if ingredient.density_g_per_ml is not None:
        print(f"  Density: {ingredient.density_g_per_ml} g/ml")
    return 0


def cost_recipe_cmd(recipe_id: int, scale: Optional[float]) -> int:
    """Print the cost breakdown of one recipe."""
    initialize_app_database()
    breakdown = get_recipe_with_costs(recipe_id, scale=scale)["breakdown"]

    print(
        f"{breakdown.recipe_name} "
        f"(yield {display_quantity(breakdown.yield_quantity, breakdown.yield_unit)})"
    )

    current_section = None
    for line in breakdown.lines:
        if line.section != current_section and line.section is not None:
            print(f"  [{line.section}]")
        current_section = line.section
        quantity = display_quantity(line.quantity, line.unit)
        print(f"    {line.name:<30} {quantity:>12} {format_cost(line.cost):>10}")

    for sub in breakdown.sub_recipes:
        quantity = display_quantity(sub.quantity, sub.unit)
        print(f"    {sub.name + ' (sub-recipe)':<30} {quantity:>12} {format_cost(sub.cost):>10}")

    print(f"  Total cost: {format_cost(breakdown.total_cost)}")
    print(
        f"  Cost per {breakdown.yield_unit}: "
        f"{format_cost(breakdown.cost_per_output_unit, precision=4)}"
    )
    print(f"  COGS: {format_percentage(breakdown.cogs_percentage)}")
    return 0


def report_cmd(category: Optional[str]) -> int:
    """Print a cost summary of every recipe, sorted by COGS."""
    initialize_app_database()
    summaries = get_recipe_cost_summaries(category=category)

    if not summaries:
        print("No recipes found")
        return 0

    print(f"{'Recipe':<30} {'Total':>10} {'Per unit':>12} {'Price':>10} {'COGS':>8}")
    for summary in summaries:
        print(
            f"{summary['name']:<30} "
            f"{format_cost(summary['total_cost']):>10} "
            f"{format_cost(summary['cost_per_output_unit'], precision=4):>12} "
            f"{format_cost(summary['selling_price']):>10} "
            f"{format_percentage(summary['cogs_percentage']):>8}"
        )
    return 0


# ============================================================================
# Entry Point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bakery-costing",
        description=f"{APP_NAME} - unit-aware ingredient and recipe costing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    convert_parser = subparsers.add_parser("convert", help="Convert a quantity between units")
    convert_parser.add_argument("quantity", type=float, help="Amount to convert")
    convert_parser.add_argument("from_unit", help="Unit of the amount (e.g., cup)")
    convert_parser.add_argument("to_unit", help="Target unit (e.g., g)")
    convert_parser.add_argument(
        "--density", type=float, default=None, help="Density in g/ml for mass <-> volume"
    )

    subparsers.add_parser("init-db", help="Create the database and tables")

    ingredient_parser = subparsers.add_parser("add-ingredient", help="Add an ingredient")
    ingredient_parser.add_argument("name", help="Ingredient name")
    ingredient_parser.add_argument("pack_quantity", type=float, help="Amount in one pack")
    ingredient_parser.add_argument("pack_unit", help="Unit of the pack amount (e.g., kg)")
    ingredient_parser.add_argument("pack_price", type=float, help="Price of one pack")
    ingredient_parser.add_argument("--category", default=None, help="Ingredient category")
    ingredient_parser.add_argument("--currency", default=None, help="ISO currency code")
    ingredient_parser.add_argument(
        "--density", type=float, default=None, help="Density in g/ml (looked up if omitted)"
    )
    ingredient_parser.add_argument("--notes", default=None, help="Notes")

    cost_parser = subparsers.add_parser("cost-recipe", help="Show a recipe cost breakdown")
    cost_parser.add_argument("recipe_id", type=int, help="Recipe ID")
    cost_parser.add_argument(
        "--scale", type=float, default=None, help="Batch multiplier (e.g., 2 for a double batch)"
    )

    report_parser = subparsers.add_parser("report", help="Cost summary of all recipes")
    report_parser.add_argument("--category", default=None, help="Only recipes in this category")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "convert":
            return convert_cmd(args.quantity, args.from_unit, args.to_unit, args.density)
        elif args.command == "init-db":
            return init_db_cmd()
        elif args.command == "add-ingredient":
            return add_ingredient_cmd(args)
        elif args.command == "cost-recipe":
            return cost_recipe_cmd(args.recipe_id, args.scale)
        elif args.command == "report":
            return report_cmd(args.category)
        else:
            print(f"Unknown command: {args.command}")
            return 1
    except ServiceError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
