"""
Query Compiler
Turns (category, free-text term, sparse filter map) into an ordered list of
predicates over the products table.

Every predicate is emitted together with the exact parameters bound into it,
so the statement and its parameter list can never drift apart. Filter keys
that the category's schema does not declare are dropped before parsing;
they are ignored, never rejected.

Note: the search term is wrapped as %term% and handed to LIKE as-is.
Wildcards typed by the user ("%", "_") keep their LIKE meaning.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Tuple
import logging

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Select, or_, select
from sqlalchemy.sql.elements import ColumnElement

from travel_search.core.categories import ProductCategory
from travel_search.core.filter_schema import get_filter_schema
from travel_search.db.models import Product, ProductCountry

logger = logging.getLogger(__name__)


class SearchFilters(BaseModel):
    """Typed view of the filter map, already scoped to one category."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    max_price: Optional[Decimal] = None
    max_data: Optional[int] = None
    max_days: Optional[int] = None
    countries: Optional[List[str]] = None

    @field_validator("countries")
    @classmethod
    def clean_countries(cls, v):
        if v is None:
            return v
        seen = []
        for country in v:
            name = country.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @classmethod
    def for_category(cls, raw: Optional[Mapping[str, Any]], category: ProductCategory) -> "SearchFilters":
        """
        Keep only the keys the category declares, then validate their values.
        Raises pydantic.ValidationError / TypeError on malformed input.
        """
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise TypeError(f"filters must be a mapping, got {type(raw).__name__}")
        schema = get_filter_schema(category)
        return cls.model_validate({k: v for k, v in raw.items() if schema.allows(k)})


@dataclass(frozen=True)
class Predicate:
    """One WHERE condition and the values bound into it, in bind order."""
    facet: str
    clause: ColumnElement
    params: Tuple[Any, ...]


@dataclass(frozen=True)
class CompiledQuery:
    category: ProductCategory
    term: str
    filters: SearchFilters
    predicates: Tuple[Predicate, ...]

    @property
    def facets(self) -> List[str]:
        return [p.facet for p in self.predicates]

    @property
    def parameters(self) -> List[Any]:
        """All bound values, flattened in predicate order."""
        return [value for p in self.predicates for value in p.params]

    def statement(self) -> Select:
        # id breaks price ties so a fixed snapshot always sorts the same way
        return (
            select(Product)
            .where(*[p.clause for p in self.predicates])
            .order_by(Product.price.asc(), Product.id.asc())
        )


class _PredicateList:
    def __init__(self):
        self._items: List[Predicate] = []

    def emit(self, facet: str, build: Callable[..., ColumnElement], *params: Any) -> None:
        self._items.append(Predicate(facet=facet, clause=build(*params), params=tuple(params)))

    def freeze(self) -> Tuple[Predicate, ...]:
        return tuple(self._items)


class QueryCompiler:
    """Stateless; a single instance can be shared across requests."""

    def compile(
        self,
        category: ProductCategory,
        term: Optional[str] = None,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> CompiledQuery:
        term = (term or "").strip()
        parsed = filters if isinstance(filters, SearchFilters) else SearchFilters.for_category(filters, category)

        preds = _PredicateList()
        preds.emit("category", lambda c: Product.product_type == c, category.value)
        preds.emit("active", lambda: Product.is_active.is_(True))

        if term:
            pattern = f"%{term}%"
            preds.emit(
                "term",
                lambda by_name, by_desc: or_(Product.name.ilike(by_name), Product.description.ilike(by_desc)),
                pattern, pattern,
            )

        if parsed.max_price is not None:
            preds.emit("max_price", lambda v: Product.price <= v, parsed.max_price)

        if category is ProductCategory.ESIM:
            if parsed.max_data is not None:
                preds.emit("max_data", lambda v: Product.data_gb <= v, parsed.max_data)
            if parsed.max_days is not None:
                preds.emit("max_days", lambda v: Product.days <= v, parsed.max_days)
            if parsed.countries:
                preds.emit(
                    "countries",
                    lambda *names: Product.countries.any(ProductCountry.country.in_(names)),
                    *parsed.countries,
                )

        compiled = CompiledQuery(category=category, term=term, filters=parsed, predicates=preds.freeze())
        logger.debug(f"Compiled {category.value} search: facets={compiled.facets}")
        return compiled
