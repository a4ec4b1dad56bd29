"""Utilities package for the Bakery Costing application."""
