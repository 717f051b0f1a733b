"""
Facet Aggregator
Derives the live option values for multi-valued facets from stored data.
Today that is only the eSIM country list; every other category has no
multi-valued facet and gets an empty set.
"""

from typing import List, Optional, Set
import logging

from sqlalchemy.orm import Session

from travel_search.core.categories import ProductCategory
from travel_search.db.models import Product
from travel_search.db.repositories import ProductRepository

logger = logging.getLogger(__name__)


class MalformedCountriesError(ValueError):
    pass


def _country_set(product: Product) -> Set[str]:
    names = set()
    for entry in product.countries or []:
        value = entry.country
        if not isinstance(value, str) or not value.strip():
            raise MalformedCountriesError(f"product {product.id} has a bad country entry: {value!r}")
        names.add(value.strip())
    return names


class FacetAggregator:
    """Reads product attributes only; never goes through the query compiler."""

    def __init__(self, db: Optional[Session]):
        self.db = db

    def available_countries(self, category: ProductCategory) -> Set[str]:
        """Union of the country sets of all active products in the category."""
        if category is not ProductCategory.ESIM or self.db is None:
            return set()
        try:
            products = ProductRepository(self.db).active_in_category(category)
        except Exception as e:
            logger.error(f"Country facet query failed: {e}", exc_info=True)
            return set()

        countries: Set[str] = set()
        skipped = 0
        for product in products:
            try:
                countries |= _country_set(product)
            except MalformedCountriesError as e:
                skipped += 1
                logger.warning(f"Skipping product in country facet: {e}")
        if skipped:
            logger.info(f"Country facet built with {skipped} product(s) skipped")
        return countries

    def country_options(self, category: ProductCategory) -> List[str]:
        """Sorted list form, for JSON responses."""
        return sorted(self.available_countries(category))
