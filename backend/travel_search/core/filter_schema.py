"""
Filter Schema Registry
Per-category declaration of searchable facets, slider ranges,
fixed enumerations and the display metadata for the search page.

The registry is immutable. Lookups by a value that is not a known category
resolve to the eSIM schema instead of failing; this only governs which
schema is *shown*. Whether a search request is accepted is decided by
core.categories.validate_category.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Tuple, Union

from travel_search.core.categories import ProductCategory, DEFAULT_CATEGORY


@dataclass(frozen=True)
class NumericRange:
    minimum: int
    maximum: int

    @property
    def default(self) -> int:
        # Sliders start fully open
        return self.maximum

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.minimum, "max": self.maximum, "default": self.default}


@dataclass(frozen=True)
class FilterSchema:
    """Everything the search page and the compiler need to know about a category."""
    category: ProductCategory
    title: str
    subtitle: str
    filter_keys: Tuple[str, ...]
    widgets: Tuple[str, ...]
    ranges: Mapping[str, NumericRange]
    enumerations: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    icon: str = ""
    theme: str = ""

    def allows(self, key: str) -> bool:
        return key in self.filter_keys

    def defaults(self) -> Dict[str, int]:
        return {f"max_{name}": rng.default for name, rng in self.ranges.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_type": self.category.value,
            "title": self.title,
            "subtitle": self.subtitle,
            "filter_keys": list(self.filter_keys),
            "widgets": list(self.widgets),
            "ranges": {name: rng.to_dict() for name, rng in self.ranges.items()},
            "enumerations": {name: list(vals) for name, vals in self.enumerations.items()},
            "defaults": self.defaults(),
            "icon": self.icon,
            "theme": self.theme,
        }


_SCHEMAS: Dict[ProductCategory, FilterSchema] = {
    ProductCategory.ESIM: FilterSchema(
        category=ProductCategory.ESIM,
        title="eSIM Search & Compare",
        subtitle="Find the perfect eSIM plan for your travel needs",
        filter_keys=("max_price", "max_data", "max_days", "countries"),
        widgets=("countries", "price", "data", "days"),
        ranges=MappingProxyType({
            "price": NumericRange(0, 50),
            "data": NumericRange(0, 25),
            "days": NumericRange(0, 35),
        }),
        icon="wifi",
        theme="theme-esim",
    ),
    ProductCategory.HOTEL: FilterSchema(
        category=ProductCategory.HOTEL,
        title="Hotel Search & Compare",
        subtitle="Find the perfect hotel for your stay",
        filter_keys=("max_price",),
        widgets=("location", "price", "stars", "amenities"),
        ranges=MappingProxyType({
            "price": NumericRange(0, 500),
            "stars": NumericRange(1, 5),
        }),
        enumerations=MappingProxyType({
            "amenities": ("wifi", "pool", "gym", "restaurant", "spa"),
        }),
        icon="building",
        theme="theme-hotel",
    ),
    ProductCategory.FLIGHT: FilterSchema(
        category=ProductCategory.FLIGHT,
        title="Flight Search & Compare",
        subtitle="Find the best flight deals for your journey",
        filter_keys=("max_price",),
        widgets=("origin", "destination", "price", "airline", "stops"),
        ranges=MappingProxyType({
            "price": NumericRange(0, 2000),
        }),
        enumerations=MappingProxyType({
            "airlines": ("Thai Airways", "Singapore Airlines", "Emirates", "Qatar Airways"),
        }),
        icon="plane",
        theme="theme-flight",
    ),
    ProductCategory.CAR: FilterSchema(
        category=ProductCategory.CAR,
        title="Car Rental Search & Compare",
        subtitle="Find the perfect rental car for your trip",
        filter_keys=("max_price",),
        widgets=("location", "price", "type", "transmission"),
        ranges=MappingProxyType({
            "price": NumericRange(0, 200),
        }),
        enumerations=MappingProxyType({
            "car_types": ("Economy", "Compact", "Midsize", "SUV", "Luxury"),
            "transmissions": ("Automatic", "Manual"),
        }),
        icon="car",
        theme="theme-car",
    ),
}

FILTER_SCHEMAS: Mapping[ProductCategory, FilterSchema] = MappingProxyType(_SCHEMAS)


def get_filter_schema(category: Union[ProductCategory, str, None]) -> FilterSchema:
    """Schema for a category; anything unrecognised gets the eSIM schema."""
    if isinstance(category, ProductCategory):
        return FILTER_SCHEMAS[category]
    try:
        return FILTER_SCHEMAS[ProductCategory(category)]
    except (ValueError, TypeError):
        return FILTER_SCHEMAS[DEFAULT_CATEGORY]
