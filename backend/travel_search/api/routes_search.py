"""
Search API Routes

Endpoints:
  POST /search          -- faceted product search (category from ?type= or body)
  GET  /search/facets   -- live country options for a category
  GET  /search/config   -- filter schema + display metadata for the search page
  GET  /search/logs     -- recent search attempts (admin, X-API-Key)
"""

from datetime import datetime
from typing import Any, Optional
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from travel_search.core.categories import InvalidCategoryError, ProductCategory, validate_category
from travel_search.core.config import settings
from travel_search.core.filter_schema import get_filter_schema
from travel_search.core.rate_limiting import limiter, SEARCH_LIMIT, FACETS_LIMIT, ADMIN_LIMIT
from travel_search.db.database import SessionLocal, get_db
from travel_search.db.repositories import SearchLogRepository, search_log_to_dict
from travel_search.services.facets import FacetAggregator
from travel_search.services.product_search import GENERIC_SEARCH_ERROR, ProductSearchService
from travel_search.services.search_logger import SearchAttempt, SearchLogger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

INVALID_CATEGORY_ERROR = "Invalid product type"


# ---------------------------------------------------------------------------
# Request models / dependencies
# ---------------------------------------------------------------------------

class SearchRequest(BaseModel):
    """Search body. Filter values are validated later, per category."""
    product_type: Optional[str] = Field(None, description="esim / hotel / flight / car", max_length=50)
    search_term: Optional[str] = Field(None, description="Free text matched against name and description",
                                       max_length=settings.search_term_max_length)
    filters: Optional[Any] = Field(None, description="Sparse facet map, e.g. {\"max_price\": 20}")


def get_search_logger() -> SearchLogger:
    """FastAPI dependency; the logger opens its own sessions."""
    return SearchLogger(SessionLocal)


def _invalid_category_response() -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": INVALID_CATEGORY_ERROR})


def _resolve_category(query_value: Optional[str], body_value: Optional[str] = None) -> ProductCategory:
    raw = query_value if query_value is not None else body_value
    return validate_category(raw if raw is not None else settings.default_product_type)


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------

@router.post("")
@limiter.limit(SEARCH_LIMIT)
def search_products(
    request: Request,
    background_tasks: BackgroundTasks,
    body: Optional[SearchRequest] = None,
    product_type: Optional[str] = Query(None, alias="type", description="Overrides body.product_type"),
    db: Session = Depends(get_db),
    search_logger: SearchLogger = Depends(get_search_logger),
):
    """
    Search active products of one category, cheapest first.
    Unknown categories are rejected with 400 before any query runs.
    Store or filter errors return 500 with a generic message and no results.
    """
    body = body or SearchRequest()
    try:
        category = _resolve_category(product_type, body.product_type)
    except InvalidCategoryError:
        return _invalid_category_response()

    outcome = ProductSearchService(db).search(category, body.search_term, body.filters)

    background_tasks.add_task(
        search_logger.record,
        SearchAttempt.build(
            search_term=body.search_term,
            filters=body.filters,
            product_type=category.value,
            results_count=outcome.count,
            user_ip=request.client.host if request.client else "",
            user_agent=request.headers.get("user-agent", ""),
        ),
    )

    if outcome.failed:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": GENERIC_SEARCH_ERROR, "results": [], "count": 0},
            background=background_tasks,
        )
    return {
        "success": True,
        "results": outcome.results,
        "count": outcome.count,
        "product_type": category.value,
    }


@router.get("/facets")
@limiter.limit(FACETS_LIMIT)
def get_facets(
    request: Request,
    product_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    """Live facet options. Only eSIM has any (countries)."""
    try:
        category = _resolve_category(product_type)
    except InvalidCategoryError:
        return _invalid_category_response()
    return {
        "product_type": category.value,
        "countries": FacetAggregator(db).country_options(category),
    }


@router.get("/config")
@limiter.limit(FACETS_LIMIT)
def get_search_config(
    request: Request,
    product_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    """
    Everything the search page needs to draw its filters.
    Unknown types fall back to the eSIM page, as the page renderer always has.
    """
    schema = get_filter_schema(product_type or settings.default_product_type)
    config = schema.to_dict()
    config["countries"] = FacetAggregator(db).country_options(schema.category)
    return config


@router.get("/logs")
@limiter.limit(ADMIN_LIMIT)
def list_search_logs(
    request: Request,
    product_type: Optional[str] = Query(None, alias="type"),
    since: Optional[datetime] = Query(None, description="Only attempts at or after this time (ISO 8601)"),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Recent search attempts for analytics. Protected by API key."""
    api_key = request.headers.get("X-API-Key", "")
    if api_key != settings.admin_api_key:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")
    if product_type is not None:
        try:
            product_type = validate_category(product_type).value
        except InvalidCategoryError:
            return _invalid_category_response()
    if db is None:
        raise HTTPException(status_code=503, detail="Service unavailable: database not connected")
    try:
        repo = SearchLogRepository(db)
        rows = repo.recent(product_type=product_type, since=since, limit=limit)
        totals = repo.count_by_product_type(since=since)
    except Exception as e:
        logger.error(f"Search log query failed: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Service unavailable: internal error")
    return {
        "logs": [search_log_to_dict(r) for r in rows],
        "count": len(rows),
        "totals_by_product_type": totals,
    }
