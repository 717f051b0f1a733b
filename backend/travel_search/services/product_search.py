"""
Product search: compile, execute, shape.

Availability wins over transparency here. Whatever goes wrong between
receiving the filters and reading the rows (no session, bad filter values,
store errors, statement timeouts) the caller gets an empty result list and a
`failed` flag. The cause only ever reaches the server log.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
import logging

from sqlalchemy.orm import Session

from travel_search.core.categories import ProductCategory
from travel_search.core.monitoring import track_performance
from travel_search.db.models import Product
from travel_search.db.repositories import ProductRepository
from travel_search.services.query_compiler import QueryCompiler

logger = logging.getLogger(__name__)

GENERIC_SEARCH_ERROR = "Search failed. Please try again later."


class StoreUnavailableError(RuntimeError):
    """No database session could be obtained for this request."""


@dataclass(frozen=True)
class SearchOutcome:
    results: List[Dict[str, Any]] = field(default_factory=list)
    failed: bool = False

    @property
    def count(self) -> int:
        return len(self.results)


def product_to_dict(product: Product) -> Dict[str, Any]:
    """API shape of a product. Connectivity-only fields are None elsewhere."""
    return {
        "id": product.id,
        "name": product.name,
        "product_type": product.product_type,
        "price": float(product.price) if product.price is not None else None,
        "data_gb": product.data_gb,
        "days": product.days,
        "countries": product.country_names,
        "description": product.description or "",
        "image_url": product.image_url or "",
    }


class ProductSearchService:
    """Runs one search against an injected session."""

    def __init__(self, db: Optional[Session], compiler: Optional[QueryCompiler] = None):
        self.db = db
        self.compiler = compiler or QueryCompiler()

    @track_performance("product search")
    def search(
        self,
        category: ProductCategory,
        term: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> SearchOutcome:
        try:
            if self.db is None:
                raise StoreUnavailableError("database session unavailable")
            compiled = self.compiler.compile(category, term, filters)
            products = ProductRepository(self.db).fetch(compiled)
            results = [product_to_dict(p) for p in products]
        except Exception as e:
            logger.error(f"Search failed for product_type={category.value}: {e}", exc_info=True,
                         extra={"product_type": category.value})
            self._reset_session()
            return SearchOutcome(results=[], failed=True)

        logger.info(f"Search {category.value!r} returned {len(results)} results",
                    extra={"product_type": category.value, "results_count": len(results)})
        return SearchOutcome(results=results, failed=False)

    def _reset_session(self) -> None:
        if self.db is None:
            return
        try:
            self.db.rollback()
        except Exception as e:
            logger.warning(f"Rollback after failed search also failed: {e}")
