"""Service layer logging utilities.

Provides structured logging functions for service operations, enabling
consistent log format and context across ingredient, recipe and costing
operations.

Usage:
    from bakery_costing.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    # Log successful operation
    log_operation(
        logger,
        operation="create_ingredient",
        outcome="success",
        ingredient_id=12,
    )

    # Log a costing failure that a caller chose to display as a dash
    log_operation(
        logger,
        operation="recipe_cost_summary",
        outcome="costing_failed",
        level=logging.WARNING,
        recipe_id=45,
        error="Density (g/ml) required to convert 'ml' to 'g'",
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured logger instance with the 'bakery_costing.services' prefix.

    Example:
        >>> logger = get_service_logger(__name__)
        >>> logger.name
        'bakery_costing.services.recipe_service'
    """
    # Extract just the module name if full path is provided
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"bakery_costing.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The context is passed via the 'extra' parameter for structured logging,
    so handlers can pick fields such as recipe_id off the log record.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "create_recipe", "calculate_recipe_cost")
        outcome: Outcome description (e.g., "success", "costing_failed")
        level: Log level (default: INFO). Use DEBUG for verbose/frequent logs.
        **context: Additional context fields (entity IDs, error details, etc.)

    Example:
        >>> log_operation(
        ...     logger,
        ...     operation="calculate_recipe_cost",
        ...     outcome="success",
        ...     level=logging.DEBUG,
        ...     recipe_id=45,
        ...     total_cost="12.00",
        ... )
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
