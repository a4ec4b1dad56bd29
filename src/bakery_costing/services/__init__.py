"""Services package - Business logic layer for Bakery Costing.

Architecture:
- Engine: Pure costing functions with no I/O (unit_converter, recipe_costing)
- Services: Stateless functions organized by domain (ingredient, recipe)
- Transactions: Managed via session_scope() context manager
- Exceptions: Consistent error handling via ServiceError hierarchy
- Validation: Input validation before database operations

Service Modules:
- ingredient_service: Ingredient CRUD and pack display
- recipe_service: Recipes, items, sections, sub-recipes and costing

Infrastructure:
- exceptions: Custom exception classes for engine and service errors
- database: Session management and database utilities
- cost_display: Display policy for costs that cannot be computed
- logging_utils: Structured service logging
"""
