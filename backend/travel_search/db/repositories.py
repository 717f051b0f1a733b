"""
Repository pattern for data access.

Unlike a typical read helper, these repositories do NOT swallow store
errors: the search and facet services sit on top of them and own the
fail-open policy, so they need to see the failure to report it.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session
import logging

from travel_search.core.categories import ProductCategory
from travel_search.db.models import Product, SearchLog

logger = logging.getLogger(__name__)


class ProductRepository:
    """Read access to the products catalog."""

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, compiled) -> List[Product]:
        """Run a CompiledQuery and return its products, cheapest first."""
        products = list(self.db.execute(compiled.statement()).scalars().all())
        logger.debug(f"{compiled.category.value} search returned {len(products)} products")
        return products

    def active_in_category(self, category: ProductCategory) -> List[Product]:
        return list(
            self.db.execute(
                select(Product)
                .where(Product.product_type == category.value, Product.is_active.is_(True))
                .order_by(Product.id)
            ).scalars().all()
        )

    def count_active(self) -> int:
        return self.db.execute(
            select(func.count(Product.id)).where(Product.is_active.is_(True))
        ).scalar() or 0


class SearchLogRepository:
    """Append-only access to search_logs, plus the analytics reads."""

    def __init__(self, db: Session):
        self.db = db

    def add(self, attempt) -> SearchLog:
        row = SearchLog(
            search_term=attempt.search_term,
            filters=attempt.filters,
            product_type=attempt.product_type,
            results_count=attempt.results_count,
            user_ip=attempt.user_ip,
            user_agent=attempt.user_agent,
            created_at=attempt.created_at,
        )
        self.db.add(row)
        return row

    def recent(
        self,
        product_type: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 50,
    ) -> List[SearchLog]:
        """Newest attempts first, optionally narrowed by category and time."""
        query = select(SearchLog)
        if product_type:
            query = query.where(SearchLog.product_type == product_type)
        if since is not None:
            query = query.where(SearchLog.created_at >= since)
        query = query.order_by(SearchLog.created_at.desc(), SearchLog.id.desc()).limit(limit)
        return list(self.db.execute(query).scalars().all())

    def count_by_product_type(self, since: Optional[datetime] = None) -> Dict[str, int]:
        query = select(SearchLog.product_type, func.count(SearchLog.id)).group_by(SearchLog.product_type)
        if since is not None:
            query = query.where(SearchLog.created_at >= since)
        return {ptype: count for ptype, count in self.db.execute(query).all()}


def search_log_to_dict(row: SearchLog) -> Dict[str, Any]:
    return {
        "id": row.id,
        "search_term": row.search_term,
        "filters": row.filters,
        "product_type": row.product_type,
        "results_count": row.results_count,
        "user_ip": row.user_ip,
        "user_agent": row.user_agent,
        "created_at": row.created_at.isoformat() if row.created_at else None,
    }
