"""Tests for chain filters and search."""

import pytest

from chaincatalog.services.filters import (
    ChainStatusFilter,
    FilterCondition,
    FilterFeature,
    FilterRequest,
    apply_query_filters,
    feature_values,
    matches,
)
from tests.helpers import add_element, make_chain


def _request(feature, condition, value):
    return FilterRequest(FilterFeature[feature], FilterCondition[condition], value)


class TestFilterRequest:
    def test_from_dict(self):
        request = FilterRequest.from_dict(
            {"feature": "name", "condition": "contains", "value": "ord"}
        )
        assert request.feature is FilterFeature.NAME
        assert request.condition is FilterCondition.CONTAINS
        assert request.value == "ord"

    def test_from_dict_rejects_unknown_feature(self):
        with pytest.raises(ValueError):
            FilterRequest.from_dict({"feature": "COLOR", "condition": "IS"})

    def test_values_split_on_commas(self):
        assert _request("NAME", "IN", "a, b,,c").values == ["a", "b", "c"]


class TestMatches:
    @pytest.mark.parametrize(
        "condition,value,expected",
        [
            ("IS", "orders", True),
            ("IS", "order", False),
            ("IS_NOT", "orders", False),
            ("CONTAINS", "RDER", True),
            ("DOES_NOT_CONTAIN", "xyz", True),
            ("IN", "billing,orders", True),
            ("NOT_IN", "billing,orders", False),
        ],
    )
    def test_conditions(self, condition, value, expected):
        assert matches(["Orders"], _request("NAME", condition, value)) is expected

    def test_empty_values_never_contain(self):
        assert matches([], _request("LABELS", "CONTAINS", "x")) is False
        assert matches([], _request("LABELS", "DOES_NOT_CONTAIN", "x")) is True


class TestChainFilters:
    def test_feature_values(self, catalog):
        chain = make_chain(catalog, "Orders", labels=["billing"])
        add_element(catalog, chain.id, "test-trigger")
        add_element(catalog, chain.id, "test-sender")

        assert feature_values(chain, FilterFeature.LABELS) == ["billing"]
        assert feature_values(chain, FilterFeature.PATH) == ["/orders", "http://example.org"]
        assert feature_values(chain, FilterFeature.ELEMENT) == ["test-trigger", "test-sender"]

    def test_query_filters_require_every_clause(self, catalog):
        first = make_chain(catalog, "Orders", labels=["billing"])
        make_chain(catalog, "Orders archive")
        make_chain(catalog, "Invoices", labels=["billing"])

        found = apply_query_filters(
            catalog.chains.find_all(),
            [_request("NAME", "CONTAINS", "orders"), _request("LABELS", "IS", "billing")],
        )

        assert found == [first]

    def test_element_filter(self, catalog):
        with_switch = make_chain(catalog, "with switch")
        add_element(catalog, with_switch.id, "test-switch")
        make_chain(catalog, "empty")

        found = catalog.chains.find_by_filter_request([_request("ELEMENT", "IS", "test-switch")])

        assert found == [with_switch]

    def test_status_filter_treats_undeployed_as_draft(self, catalog, deployments):
        deployed = make_chain(catalog, "deployed")
        draft = make_chain(catalog, "draft")
        deployments.get_all_runtime_deployments.return_value = {
            deployed.id: [{"status": "DEPLOYED"}]
        }

        assert catalog.chains.find_by_filter_request([_request("STATUS", "IS", "draft")]) == [
            draft
        ]
        assert catalog.chains.find_by_filter_request(
            [_request("STATUS", "IS", "DEPLOYED")]
        ) == [deployed]

    def test_status_filter_skips_runtime_without_clause(self, catalog, deployments):
        chains = [make_chain(catalog, "c")]

        assert ChainStatusFilter(deployments).apply(chains, []) == chains
        deployments.get_all_runtime_deployments.assert_not_called()


class TestSearch:
    def test_matches_any_feature(self, catalog):
        by_name = make_chain(catalog, "Payment flow")
        by_label = make_chain(catalog, "Other", labels=["payment"])
        by_path = make_chain(catalog, "Third")
        add_element(catalog, by_path.id, "test-trigger")
        make_chain(catalog, "Unrelated")

        assert catalog.chains.search("payment") == [by_name, by_label]
        assert catalog.chains.search("/ORDERS") == [by_path]
        assert catalog.chains.search(by_label.id) == [by_label]
