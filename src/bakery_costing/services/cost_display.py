"""
Display policy for costs shown on forms, lists and reports.

The costing engine always raises on a cost it cannot compute. Screens that
would rather show a dash than fail call through cost_or_none, which logs
the failure at WARNING and returns None; the formatting helpers render None
as the missing-value placeholder.
"""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict, Optional, Tuple

from bakery_costing.services.exceptions import CostingError
from bakery_costing.services.logging_utils import get_service_logger, log_operation
from bakery_costing.utils.config import get_config
from bakery_costing.utils.constants import CURRENCY_DECIMAL_PLACES, MISSING_VALUE_DISPLAY

logger = get_service_logger(__name__)


def cost_or_none(
    compute: Callable[..., Decimal],
    *args: Any,
    context: Optional[Dict[str, Any]] = None,
    **kwargs: Any,
) -> Optional[Decimal]:
    """
    Run a costing function, turning a CostingError into None.

    Only costing failures are absorbed; any other exception propagates.

    Args:
        compute: Engine function to call (e.g., compute_ingredient_usage_cost)
        *args: Positional arguments for compute
        context: Extra fields for the warning log record (e.g., recipe_id)
        **kwargs: Keyword arguments for compute

    Returns:
        The computed value, or None if the engine raised a CostingError
    """
    try:
        return compute(*args, **kwargs)
    except CostingError as e:
        log_operation(
            logger,
            operation=getattr(compute, "__name__", "cost"),
            outcome="costing_failed",
            level=logging.WARNING,
            error=str(e),
            error_type=type(e).__name__,
            **(context or {}),
        )
        return None


def _round(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_cost(
    amount: Optional[Any],
    currency_symbol: Optional[str] = None,
    precision: int = CURRENCY_DECIMAL_PLACES,
) -> str:
    """
    Format a cost value for display.

    Args:
        amount: Cost amount, or None when it could not be computed
        currency_symbol: Symbol to use (defaults to the configured symbol)
        precision: Decimal places

    Returns:
        Formatted currency string (e.g., "£12.50", "-£0.60") or the placeholder
    """
    if amount is None:
        return MISSING_VALUE_DISPLAY
    if currency_symbol is None:
        currency_symbol = get_config().currency_symbol

    value = _round(Decimal(str(amount)), precision)
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol}{abs(value):.{precision}f}"


def format_percentage(value: Optional[Any], precision: int = 1) -> str:
    """
    Format a percentage (e.g., COGS) for display.

    Args:
        value: Percentage, or None when unknown
        precision: Decimal places

    Returns:
        String such as "25.0%" or the placeholder
    """
    if value is None:
        return MISSING_VALUE_DISPLAY
    return f"{_round(Decimal(str(value)), precision):.{precision}f}%"


def cogs_sort_key(cogs_percentage: Optional[Decimal]) -> Tuple[bool, Decimal]:
    """
    Sort key placing recipes with no selling price after priced ones.

    Example:
        >>> sorted([None, Decimal("30"), Decimal("20")], key=cogs_sort_key)
        [Decimal('20'), Decimal('30'), None]
    """
    if cogs_percentage is None:
        return True, Decimal("0")
    return False, cogs_percentage
