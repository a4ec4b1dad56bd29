"""Bakery Costing - unit-aware ingredient and recipe costing."""

from bakery_costing.utils.constants import APP_VERSION

__version__ = APP_VERSION
