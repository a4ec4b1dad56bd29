"""Pytest configuration and fixtures shared by unit and integration tests."""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from bakery_costing.models.base import Base
from bakery_costing.services.unit_converter import PackPricing
from bakery_costing.utils.config import reset_config


@pytest.fixture(autouse=True)
def test_environment(monkeypatch):
    """Run every test against the 'test' configuration with no overrides."""
    monkeypatch.setenv("BAKERY_COSTING_ENV", "test")
    monkeypatch.delenv("BAKERY_COSTING_DATABASE_URL", raising=False)
    monkeypatch.delenv("BAKERY_COSTING_CURRENCY_SYMBOL", raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Patches the global engine and session factory to use it
    4. Drops all tables after the test completes
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    from bakery_costing.models import ingredient, recipe  # noqa: F401

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    import bakery_costing.services.database as db_module

    original_get_session_factory = db_module.get_session_factory
    original_get_engine = db_module.get_engine
    db_module.get_session_factory = lambda: Session
    db_module.get_engine = lambda force_recreate=False: engine

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory
    db_module.get_engine = original_get_engine


@pytest.fixture
def flour_pack():
    """1000 g of flour for 2.40, density 0.6 g/ml."""
    return PackPricing(
        pack_quantity=1000, pack_unit="g", pack_price=Decimal("2.40"), density_g_per_ml=0.6
    )


@pytest.fixture
def milk_pack():
    """1 litre of milk (stored as 1000 ml) for 1.00, density 1.03 g/ml."""
    return PackPricing(
        pack_quantity=1000, pack_unit="ml", pack_price=Decimal("1.00"), density_g_per_ml=1.03
    )


@pytest.fixture
def egg_pack():
    """A box of 12 eggs for 3.00."""
    return PackPricing(pack_quantity=12, pack_unit="each", pack_price=Decimal("3.00"))


@pytest.fixture
def sample_ingredient(test_db):
    """Provide a sample ingredient stored in the test database."""
    from bakery_costing.services import ingredient_service

    return ingredient_service.create_ingredient(
        {
            "name": "Plain flour",
            "category": "Flour",
            "pack_quantity": 1.5,
            "pack_unit": "kg",
            "pack_price": "1.20",
        }
    )
