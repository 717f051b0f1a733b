"""
Product categories and the request-side category gate.

Only the four categories below can be searched. Requests naming anything
else are rejected here, before a single product query is compiled.
"""

from enum import Enum
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class ProductCategory(str, Enum):
    """Closed set of searchable product kinds."""
    ESIM = "esim"
    HOTEL = "hotel"
    FLIGHT = "flight"
    CAR = "car"


DEFAULT_CATEGORY = ProductCategory.ESIM

VALID_CATEGORIES = frozenset(c.value for c in ProductCategory)


class InvalidCategoryError(ValueError):
    """Requested product type is not one of the searchable categories."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid product type: {value!r}")


def validate_category(raw: Optional[str]) -> ProductCategory:
    """
    Accept a requested category or raise InvalidCategoryError.

    None means the caller did not ask for a category at all and resolves to
    the default. An empty or unknown string is a client mistake and is
    rejected. Matching is exact, as stored product types are lowercase.
    """
    if raw is None:
        return DEFAULT_CATEGORY
    if isinstance(raw, ProductCategory):
        return raw
    if not isinstance(raw, str) or raw not in VALID_CATEGORIES:
        logger.info(f"Rejected search for unknown product type {raw!r}")
        raise InvalidCategoryError(raw)
    return ProductCategory(raw)
