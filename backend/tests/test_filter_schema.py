"""Tests for the category gate and the filter schema registry."""

import dataclasses

import pytest

from travel_search.core.categories import (
    DEFAULT_CATEGORY,
    InvalidCategoryError,
    ProductCategory,
    validate_category,
)
from travel_search.core.filter_schema import FILTER_SCHEMAS, get_filter_schema


class TestValidateCategory:

    @pytest.mark.parametrize("raw", ["esim", "hotel", "flight", "car"])
    def test_accepts_closed_set(self, raw):
        assert validate_category(raw).value == raw

    def test_missing_category_resolves_to_default(self):
        assert validate_category(None) is ProductCategory.ESIM
        assert DEFAULT_CATEGORY is ProductCategory.ESIM

    def test_enum_member_passes_through(self):
        assert validate_category(ProductCategory.CAR) is ProductCategory.CAR

    @pytest.mark.parametrize("raw", ["train", "", "ESIM", " hotel", 3])
    def test_rejects_everything_else(self, raw):
        with pytest.raises(InvalidCategoryError):
            validate_category(raw)

    def test_error_is_a_value_error_and_keeps_input(self):
        with pytest.raises(ValueError) as exc_info:
            validate_category("cruise")
        assert exc_info.value.value == "cruise"


class TestFilterSchemaRegistry:

    def test_every_category_has_a_schema(self):
        assert set(FILTER_SCHEMAS) == set(ProductCategory)
        for category, schema in FILTER_SCHEMAS.items():
            assert schema.category is category

    def test_esim_declares_connectivity_facets(self):
        schema = get_filter_schema(ProductCategory.ESIM)
        assert schema.filter_keys == ("max_price", "max_data", "max_days", "countries")
        assert schema.ranges["price"].maximum == 50
        assert schema.ranges["data"].maximum == 25
        assert schema.ranges["days"].maximum == 35

    @pytest.mark.parametrize("category", ["hotel", "flight", "car"])
    def test_other_categories_only_filter_on_price(self, category):
        schema = get_filter_schema(category)
        assert schema.filter_keys == ("max_price",)
        assert not schema.allows("max_data")
        assert not schema.allows("countries")

    def test_enumerations(self):
        assert "spa" in get_filter_schema("hotel").enumerations["amenities"]
        assert "Emirates" in get_filter_schema("flight").enumerations["airlines"]
        assert get_filter_schema("car").enumerations["transmissions"] == ("Automatic", "Manual")

    @pytest.mark.parametrize("raw", ["train", "", None, "HOTEL", ["hotel"]])
    def test_unknown_lookup_falls_back_to_esim(self, raw):
        assert get_filter_schema(raw).category is ProductCategory.ESIM

    def test_fallback_does_not_make_category_acceptable(self):
        assert get_filter_schema("train").category is ProductCategory.ESIM
        with pytest.raises(InvalidCategoryError):
            validate_category("train")

    def test_registry_is_immutable(self):
        with pytest.raises(TypeError):
            FILTER_SCHEMAS[ProductCategory.HOTEL] = FILTER_SCHEMAS[ProductCategory.ESIM]
        with pytest.raises(dataclasses.FrozenInstanceError):
            FILTER_SCHEMAS[ProductCategory.HOTEL].title = "Hostels"
        with pytest.raises(TypeError):
            FILTER_SCHEMAS[ProductCategory.ESIM].ranges["price"] = None

    def test_to_dict_includes_defaults_at_range_maximum(self):
        data = get_filter_schema("esim").to_dict()
        assert data["product_type"] == "esim"
        assert data["title"] == "eSIM Search & Compare"
        assert data["ranges"]["price"] == {"min": 0, "max": 50, "default": 50}
        assert data["defaults"] == {"max_price": 50, "max_data": 25, "max_days": 35}
        assert data["theme"] == "theme-esim"
