"""
Configuration management for the Bakery Costing application.

This module handles:
- Database path configuration
- Environment-specific configuration (production, development, test)
- Display settings such as the currency symbol

Environment variables:
    BAKERY_COSTING_ENV: 'production' (default), 'development' or 'test'
    BAKERY_COSTING_DATABASE_URL: Full SQLAlchemy URL overriding the file location
    BAKERY_COSTING_CURRENCY_SYMBOL: Symbol used when formatting costs
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
    DEFAULT_CURRENCY_SYMBOL,
)

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("production", "development", "test")


class Config:
    """
    Application configuration manager.

    Handles database location, environment mode and display settings.
    """

    def __init__(self, environment: str = "production"):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production', 'development' or 'test'

        Raises:
            ValueError: If the environment is not recognised
        """
        if environment not in ENVIRONMENTS:
            raise ValueError(
                f"Unknown environment '{environment}'. Expected one of: {', '.join(ENVIRONMENTS)}"
            )

        self.environment = environment
        self._app_name = APP_NAME
        self._app_version = APP_VERSION
        self._database_version = DATABASE_VERSION
        self._database_url_override = os.environ.get("BAKERY_COSTING_DATABASE_URL")
        self._currency_symbol = os.environ.get(
            "BAKERY_COSTING_CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL
        )

        if environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_dir = self._base_dir
        self._database_path = self._database_dir / DATABASE_FILENAME

    def _get_project_data_dir(self) -> Path:
        """
        Get the project's data directory for development.

        Returns:
            Path to project data/ directory
        """
        project_root = Path(__file__).parent.parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """
        Get the user's Documents directory for production.

        Returns:
            Path to user's Documents folder with app subdirectory
        """
        return Path.home() / "Documents" / "BakeryCosting"

    def ensure_directories(self):
        """Create the database directory if it doesn't exist."""
        if self.uses_file_database:
            self._database_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return self._app_name

    @property
    def app_version(self) -> str:
        """Application version."""
        return self._app_version

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return self._database_version

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def uses_file_database(self) -> bool:
        """True when the database lives in the configured file."""
        return self._database_url_override is None and self.environment != "test"

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            Database URL string for SQLAlchemy
        """
        if self._database_url_override:
            return self._database_url_override
        if self.environment == "test":
            return "sqlite:///:memory:"
        # Use forward slashes for SQLite URL
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def currency_symbol(self) -> str:
        """Symbol used when formatting costs for display."""
        return self._currency_symbol

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def database_exists(self) -> bool:
        """
        Check if database file exists.

        Returns:
            True if database file exists, False otherwise
        """
        if not self.uses_file_database:
            return False
        return self._database_path.exists()

    def __repr__(self) -> str:
        """String representation of config."""
        return f"Config(environment='{self.environment}', database_url='{self.database_url}')"


# Global configuration instance
_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment cannot be changed by passing
    a different environment argument; this prevents switching databases
    mid-session.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    BAKERY_COSTING_ENV or defaults to production. Ignored if
                    singleton already exists.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get("BAKERY_COSTING_ENV", "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton to prevent database switching."
        )

    return _config_instance


def reset_config():
    """
    Reset the global configuration instance.

    Useful for testing.
    """
    global _config_instance
    _config_instance = None


def get_database_url() -> str:
    """
    Get the database URL.

    Returns:
        SQLAlchemy database URL string
    """
    return get_config().database_url
