"""
Seed the configured database with a small sample catalog.
Creates the products / product_countries / search_logs tables and inserts
sample eSIM plans plus a few hotels, flights and car rentals.
Run: python scripts/seed_products.py [--reset]
"""

import argparse
import os
import sys
from decimal import Decimal

# Add backend directory to path for package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import func, select

from travel_search.db.database import SessionLocal, engine
from travel_search.db.models import Base, Product, ProductCountry

# (name, price, data_gb, days, countries, description)
ESIM_PLANS = [
    ("Global Connect", "25.00", 5, 7, ["USA", "Canada", "UK", "France", "Germany"],
     "Global connectivity for major countries"),
    ("Euro Roam", "18.00", 3, 10, ["UK", "France", "Germany", "Italy", "Spain"],
     "European travel made easy"),
    ("Asia Explorer", "30.00", 8, 14, ["Japan", "Thailand", "Singapore", "South Korea"],
     "Explore Asia with reliable connectivity"),
    ("Americas Plus", "22.00", 4, 7, ["USA", "Canada", "Mexico", "Brazil"],
     "Connect across the Americas"),
    ("UK Premium", "15.00", 10, 30, ["UK"],
     "Long-term UK connectivity"),
]

# (product_type, name, price, description)
OTHER_PRODUCTS = [
    ("hotel", "Riverside Boutique Hotel", "129.00", "Four-star rooms by the river, pool and spa"),
    ("hotel", "City Centre Budget Inn", "59.00", "Simple rooms with free wifi, walking distance to the station"),
    ("hotel", "Grand Palace Resort", "349.00", "Luxury resort with restaurant, gym and private beach"),
    ("flight", "Bangkok - Singapore (Thai Airways)", "189.00", "Non-stop, 1 checked bag"),
    ("flight", "London - Dubai (Emirates)", "459.00", "Non-stop, meals included"),
    ("flight", "Doha - Tokyo (Qatar Airways)", "720.00", "One stop, flexible ticket"),
    ("car", "Compact Manual", "32.00", "Compact car with manual transmission, unlimited mileage"),
    ("car", "Midsize Automatic", "48.00", "Midsize car with automatic transmission"),
    ("car", "Luxury SUV", "145.00", "Premium SUV, automatic, full insurance"),
]


def main():
    parser = argparse.ArgumentParser(description="Seed the travel search catalog")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()

    print(f"Database: {engine.url}")

    if args.reset:
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print("Tables ready")

    session = SessionLocal()
    try:
        existing = session.execute(select(func.count(Product.id))).scalar()
        if existing and not args.reset:
            print(f"Catalog already has {existing} products, nothing to do (use --reset to reseed)")
            return

        count = 0
        for name, price, data_gb, days, countries, description in ESIM_PLANS:
            session.add(Product(
                name=name,
                product_type="esim",
                price=Decimal(price),
                data_gb=data_gb,
                days=days,
                description=description,
                countries=[ProductCountry(country=c) for c in countries],
            ))
            count += 1

        for product_type, name, price, description in OTHER_PRODUCTS:
            session.add(Product(
                name=name,
                product_type=product_type,
                price=Decimal(price),
                description=description,
            ))
            count += 1

        session.commit()

        by_type = session.execute(
            select(Product.product_type, func.count(Product.id)).group_by(Product.product_type)
        ).all()
        print(f"\nDone! Inserted {count} products")
        for product_type, n in sorted(by_type):
            print(f"  {product_type}: {n}")
    finally:
        session.close()
        engine.dispose()


if __name__ == "__main__":
    main()
