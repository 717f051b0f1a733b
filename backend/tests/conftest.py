"""
Shared fixtures: an isolated in-memory SQLite store seeded with a small
catalog covering all four product types.
"""

from decimal import Decimal
from typing import Iterable, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from travel_search.db.models import Base, Product, ProductCountry


# name -> (price, data_gb, days, countries, description)
ESIM_PLANS = {
    "Global Connect": ("25.00", 5, 7, {"USA", "Canada", "UK", "France", "Germany"},
                       "Global connectivity for major countries"),
    "Euro Roam": ("18.00", 3, 10, {"UK", "France", "Germany", "Italy", "Spain"},
                  "European travel made easy"),
    "Asia Explorer": ("30.00", 8, 14, {"Japan", "Thailand", "Singapore", "South Korea"},
                      "Explore Asia with reliable connectivity"),
    "Americas Plus": ("22.00", 4, 7, {"USA", "Canada", "Mexico", "Brazil"},
                      "Connect across the Americas"),
    "UK Premium": ("15.00", 10, 30, {"UK"}, "Long-term UK connectivity"),
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def add_product(db):
    """Factory: insert and commit one product, return it."""
    def _add(
        name: str,
        price: str,
        product_type: str = "esim",
        countries: Iterable[str] = (),
        data_gb: Optional[int] = None,
        days: Optional[int] = None,
        description: str = "",
        is_active: bool = True,
    ) -> Product:
        product = Product(
            name=name,
            product_type=product_type,
            price=Decimal(price),
            data_gb=data_gb,
            days=days,
            description=description,
            is_active=is_active,
            countries=[ProductCountry(country=c) for c in countries],
        )
        db.add(product)
        db.commit()
        return product
    return _add


@pytest.fixture
def catalog(add_product):
    """Five active eSIM plans plus hotels, flights and cars; a few inactive rows."""
    for name, (price, data_gb, days, countries, description) in ESIM_PLANS.items():
        add_product(name, price, "esim", sorted(countries), data_gb, days, description)
    add_product("Retired Roamer", "5.00", "esim", ["Iceland"], 1, 3, "Discontinued plan", is_active=False)

    # data_gb on a hotel is meaningless and must never be compared
    add_product("Riverside Boutique Hotel", "129.00", "hotel", data_gb=10, description="Pool and spa")
    add_product("City Centre Budget Inn", "59.00", "hotel", description="Free wifi near the station")
    add_product("Grand Palace Resort", "349.00", "hotel", description="Luxury resort with private beach")
    add_product("Closed Motel", "40.00", "hotel", is_active=False)

    add_product("Bangkok - Singapore", "189.00", "flight", description="Thai Airways, non-stop")
    add_product("London - Dubai", "459.00", "flight", description="Emirates, meals included")

    add_product("Compact Manual", "32.00", "car", description="Unlimited mileage")
    add_product("Midsize Automatic", "48.00", "car", description="Automatic transmission")
    return ESIM_PLANS
