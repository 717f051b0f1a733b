"""Tests for predicate construction; no database needed."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from travel_search.core.categories import ProductCategory
from travel_search.services.query_compiler import QueryCompiler, SearchFilters

ESIM = ProductCategory.ESIM
HOTEL = ProductCategory.HOTEL


@pytest.fixture
def compiler():
    return QueryCompiler()


class TestPredicateOrder:

    def test_baseline_is_category_and_active(self, compiler):
        compiled = compiler.compile(ESIM)
        assert compiled.facets == ["category", "active"]
        assert compiled.parameters == ["esim"]

    def test_full_esim_query_keeps_params_in_predicate_order(self, compiler):
        compiled = compiler.compile(ESIM, "  Euro ", {
            "countries": ["UK", "Japan"],
            "max_days": 10,
            "max_data": "5",
            "max_price": 20,
        })
        assert compiled.term == "Euro"
        assert compiled.facets == [
            "category", "active", "term", "max_price", "max_data", "max_days", "countries",
        ]
        assert compiled.parameters == [
            "esim", "%Euro%", "%Euro%", Decimal("20"), 5, 10, "UK", "Japan",
        ]
        assert compiled.parameters == [v for p in compiled.predicates for v in p.params]

    def test_each_clause_binds_exactly_its_params(self, compiler):
        compiled = compiler.compile(ESIM, "x", {"max_price": 9, "countries": ["UK", "Spain"]})
        for predicate in compiled.predicates:
            bound = []
            binds = predicate.clause.compile().binds
            # a bind can be listed under more than one key; count each once
            for bp in {id(bp): bp for bp in binds.values()}.values():
                # IN (...) lists compile to a single expanding bind
                bound.extend(bp.value if isinstance(bp.value, (list, tuple)) else [bp.value])
            assert sorted(map(str, bound)) == sorted(map(str, predicate.params))

    def test_statement_orders_by_price(self, compiler):
        sql = str(compiler.compile(HOTEL).statement())
        assert "ORDER BY products.price ASC, products.id ASC" in sql


class TestTerm:

    @pytest.mark.parametrize("term", [None, "", "   "])
    def test_blank_term_adds_nothing(self, compiler, term):
        assert "term" not in compiler.compile(ESIM, term).facets

    def test_wildcards_are_passed_through(self, compiler):
        compiled = compiler.compile(ESIM, "50%_off")
        assert compiled.parameters[1:] == ["%50%_off%", "%50%_off%"]


class TestCategoryScoping:

    @pytest.mark.parametrize("category", [ProductCategory.HOTEL, ProductCategory.FLIGHT, ProductCategory.CAR])
    def test_connectivity_keys_are_ignored_elsewhere(self, compiler, category):
        compiled = compiler.compile(category, None, {
            "max_data": 5, "max_days": 3, "countries": ["UK"], "max_price": 100,
        })
        assert compiled.facets == ["category", "active", "max_price"]

    def test_inapplicable_keys_are_not_even_parsed(self, compiler):
        compiled = compiler.compile(HOTEL, None, {"max_data": "lots", "countries": "UK"})
        assert compiled.facets == ["category", "active"]

    def test_unknown_keys_are_ignored(self, compiler):
        compiled = compiler.compile(ESIM, None, {"stars": 4, "sort": "desc", "max_price": None})
        assert compiled.facets == ["category", "active"]


class TestFilterParsing:

    def test_empty_countries_imposes_no_constraint(self, compiler):
        assert "countries" not in compiler.compile(ESIM, None, {"countries": []}).facets
        assert "countries" not in compiler.compile(ESIM, None, {"countries": ["  ", ""]}).facets

    def test_countries_are_trimmed_and_deduplicated(self):
        filters = SearchFilters.for_category({"countries": [" UK ", "UK", "", "Spain"]}, ESIM)
        assert filters.countries == ["UK", "Spain"]

    @pytest.mark.parametrize("bad", [
        {"max_price": "cheap"},
        {"max_data": 2.5},
        {"max_days": [7]},
        {"countries": "UK"},
    ])
    def test_malformed_values_raise(self, compiler, bad):
        with pytest.raises(ValidationError):
            compiler.compile(ESIM, None, bad)

    def test_non_mapping_filters_raise(self, compiler):
        with pytest.raises(TypeError):
            compiler.compile(ESIM, None, ["max_price", 20])

    def test_pre_parsed_filters_are_used_as_is(self, compiler):
        compiled = compiler.compile(ESIM, None, SearchFilters(max_days=14))
        assert compiled.facets == ["category", "active", "max_days"]
