"""Chain filters - query predicates and the post-query filter pipeline.

Simple features (id, name, description, labels, path) are matched directly
against a chain. Element-type and deployment-status filters need the
materialized chain graph or the runtime catalog and run afterwards as a
pipeline over the selected chains.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from chaincatalog.graph.model import Chain
from chaincatalog.services.deployments import DeploymentService

# Element properties holding an endpoint path
PATH_PROPERTIES = ("contextPath", "uri")

DRAFT_STATUS = "DRAFT"


class FilterFeature(Enum):
    ID = "ID"
    NAME = "NAME"
    DESCRIPTION = "DESCRIPTION"
    LABELS = "LABELS"
    PATH = "PATH"
    ELEMENT = "ELEMENT"
    STATUS = "STATUS"


class FilterCondition(Enum):
    IS = "IS"
    IS_NOT = "IS_NOT"
    CONTAINS = "CONTAINS"
    DOES_NOT_CONTAIN = "DOES_NOT_CONTAIN"
    IN = "IN"
    NOT_IN = "NOT_IN"


POST_QUERY_FEATURES = frozenset({FilterFeature.ELEMENT, FilterFeature.STATUS})


@dataclass(frozen=True)
class FilterRequest:
    """One filter clause: ``feature condition value``.

    For IN / NOT_IN the value is a comma separated list.
    """

    feature: FilterFeature
    condition: FilterCondition
    value: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterRequest:
        """Build from an API payload like ``{"feature": "NAME", ...}``.

        Raises:
            ValueError: If the feature or condition is unknown.
        """
        return cls(
            feature=FilterFeature(str(data.get("feature", "")).upper()),
            condition=FilterCondition(str(data.get("condition", "")).upper()),
            value=str(data.get("value", "")),
        )

    @property
    def values(self) -> list[str]:
        return [part.strip() for part in self.value.split(",") if part.strip()]


def matches(actual: Iterable[str], request: FilterRequest) -> bool:
    """Evaluate a filter clause against the values of one feature."""
    candidates = [str(a).lower() for a in actual if a is not None]
    value = request.value.lower()
    condition = request.condition

    if condition in (FilterCondition.IS, FilterCondition.IS_NOT):
        found = value in candidates
        return found if condition is FilterCondition.IS else not found
    if condition in (FilterCondition.CONTAINS, FilterCondition.DOES_NOT_CONTAIN):
        found = any(value in candidate for candidate in candidates)
        return found if condition is FilterCondition.CONTAINS else not found
    wanted = {v.lower() for v in request.values}
    found = any(candidate in wanted for candidate in candidates)
    return found if condition is FilterCondition.IN else not found


def feature_values(chain: Chain, feature: FilterFeature) -> list[str]:
    """Values of a simple feature on a chain."""
    if feature is FilterFeature.ID:
        return [chain.id]
    if feature is FilterFeature.NAME:
        return [chain.name]
    if feature is FilterFeature.DESCRIPTION:
        return [chain.description]
    if feature is FilterFeature.LABELS:
        return [label.name for label in chain.labels]
    if feature is FilterFeature.PATH:
        return [
            str(element.properties[name])
            for element in chain.iter_elements()
            for name in PATH_PROPERTIES
            if element.properties.get(name)
        ]
    if feature is FilterFeature.ELEMENT:
        return [element.type for element in chain.iter_elements()]
    raise ValueError(f"Feature {feature.value} is not a chain attribute")


def apply_query_filters(chains: Iterable[Chain], filters: Iterable[FilterRequest]) -> list[Chain]:
    """Keep chains matching every simple filter clause."""
    clauses = [f for f in filters if f.feature not in POST_QUERY_FEATURES]
    return [
        chain
        for chain in chains
        if all(matches(feature_values(chain, f.feature), f) for f in clauses)
    ]


def search_filters(condition: str) -> list[FilterRequest]:
    """Clauses for a free-text search: CONTAINS on every searchable feature."""
    return [
        FilterRequest(feature, FilterCondition.CONTAINS, condition)
        for feature in (
            FilterFeature.ID,
            FilterFeature.NAME,
            FilterFeature.DESCRIPTION,
            FilterFeature.PATH,
            FilterFeature.LABELS,
        )
    ]


class ElementFilter:
    """Keeps chains by the element types they contain."""

    def apply(self, chains: list[Chain], filters: Iterable[FilterRequest]) -> list[Chain]:
        clauses = [f for f in filters if f.feature is FilterFeature.ELEMENT]
        if not clauses:
            return chains
        return [
            chain
            for chain in chains
            if all(matches(feature_values(chain, FilterFeature.ELEMENT), f) for f in clauses)
        ]


class ChainStatusFilter:
    """Keeps chains by runtime deployment status.

    A chain without runtime deployments has status ``DRAFT``. The runtime
    catalog is queried only when a status clause is present.
    """

    def __init__(self, deployments: DeploymentService) -> None:
        self.deployments = deployments

    def apply(self, chains: list[Chain], filters: Iterable[FilterRequest]) -> list[Chain]:
        clauses = [f for f in filters if f.feature is FilterFeature.STATUS]
        if not clauses:
            return chains
        runtime = self.deployments.get_all_runtime_deployments()

        def statuses(chain: Chain) -> list[str]:
            found = [d.get("status") for d in runtime.get(chain.id, []) if d.get("status")]
            return found or [DRAFT_STATUS]

        return [chain for chain in chains if all(matches(statuses(chain), f) for f in clauses)]


__all__ = [
    "ChainStatusFilter",
    "ElementFilter",
    "FilterCondition",
    "FilterFeature",
    "FilterRequest",
    "apply_query_filters",
    "feature_values",
    "matches",
    "search_filters",
]
