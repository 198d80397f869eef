"""Tests for the Flask REST API server."""

import pytest
from flask import Flask

from chaincatalog.exceptions import (
    CatalogError,
    ConnectivityError,
    FolderMoveError,
    NotFoundError,
    ValidationError,
)
from chaincatalog.server.app import create_app, error_status
from tests.helpers import add_element, children_of_type, make_chain, make_folder

# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def app(catalog):
    application = create_app(catalog, config={})
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


# ─────────────────────────────────────────────────────────────────────────────
# App factory and error mapping
# ─────────────────────────────────────────────────────────────────────────────


class TestAppFactory:
    def test_returns_flask_instance(self, catalog):
        assert isinstance(create_app(catalog), Flask)

    def test_cors_headers(self, client, chain):
        resp = client.get(f"/v1/catalog/chains/{chain.id}", headers={"Origin": "http://ui"})
        assert resp.headers.get("Access-Control-Allow-Origin") == "*"

    @pytest.mark.parametrize(
        "error,status",
        [
            (NotFoundError("x"), 404),
            (FolderMoveError("a", "b"), 400),
            (ConnectivityError("x"), 400),
            (ValidationError("x"), 400),
            (CatalogError("x"), 500),
            (RuntimeError("x"), 500),
        ],
    )
    def test_error_status(self, error, status):
        assert error_status(error) == status


# ─────────────────────────────────────────────────────────────────────────────
# Chains
# ─────────────────────────────────────────────────────────────────────────────


class TestChainRoutes:
    def test_create_and_get(self, client):
        resp = client.post("/v1/catalog/chains", json={"name": "New", "labels": ["a"]})
        assert resp.status_code == 201
        created = resp.get_json()
        assert created["labels"] == [{"name": "a", "technical": False}]

        resp = client.get(f"/v1/catalog/chains/{created['id']}")
        assert resp.status_code == 200
        assert resp.get_json()["name"] == "New"
        assert resp.get_json()["elements"] == []

    def test_missing_chain_is_404(self, client):
        resp = client.get("/v1/catalog/chains/missing")
        assert resp.status_code == 404
        assert resp.get_json()["errorType"] == "NotFoundError"
        assert "missing" in resp.get_json()["errorMessage"]

    def test_list_root_and_folder(self, client, catalog):
        folder = make_folder(catalog, "f")
        make_chain(catalog, "inside", folder.id)
        make_chain(catalog, "top")

        root = client.get("/v1/catalog/chains").get_json()
        inside = client.get(f"/v1/catalog/chains?folderId={folder.id}").get_json()

        assert [c["name"] for c in root] == ["top"]
        assert [c["name"] for c in inside] == ["inside"]
        assert "elements" not in root[0]

    def test_update_labels(self, client, catalog):
        chain = make_chain(catalog, "c", labels=["old"])

        resp = client.put(f"/v1/catalog/chains/{chain.id}", json={"labels": ["new"]})

        assert resp.status_code == 200
        assert [label["name"] for label in resp.get_json()["labels"]] == ["new"]

    def test_delete(self, client, chain, deployments):
        assert client.delete(f"/v1/catalog/chains/{chain.id}").status_code == 204
        deployments.delete_all_by_chain_id.assert_called_once_with(chain.id)
        assert client.get(f"/v1/catalog/chains/{chain.id}").status_code == 404

    def test_delete_with_runtime_down_is_400(self, client, chain, deployments):
        deployments.delete_all_by_chain_id.side_effect = ConnectivityError("runtime down")

        resp = client.delete(f"/v1/catalog/chains/{chain.id}")

        assert resp.status_code == 400
        assert resp.get_json()["errorType"] == "ConnectivityError"

    def test_copy_and_duplicate(self, client, chain):
        resp = client.post(f"/v1/catalog/chains/{chain.id}/duplicate")
        assert resp.status_code == 201
        assert resp.get_json()["name"] == "Orders (1)"

        resp = client.post(f"/v1/catalog/chains/{chain.id}/copy")
        assert resp.get_json()["name"] == "Orders (2)"

    def test_move_to_unknown_folder(self, client, chain):
        resp = client.post(f"/v1/catalog/chains/{chain.id}/move?targetFolderId=missing")
        assert resp.status_code == 404

    def test_search_and_filter(self, client, catalog):
        make_chain(catalog, "Payments")
        make_chain(catalog, "Orders")

        found = client.post("/v1/catalog/chains/search", json={"searchCondition": "pay"})
        assert [c["name"] for c in found.get_json()] == ["Payments"]

        filtered = client.post(
            "/v1/catalog/chains/filter",
            json=[{"feature": "NAME", "condition": "IS", "value": "orders"}],
        )
        assert [c["name"] for c in filtered.get_json()] == ["Orders"]

    def test_bad_filter_is_400(self, client):
        resp = client.post("/v1/catalog/chains/filter", json=[{"feature": "COLOR"}])
        assert resp.status_code == 400

    def test_non_object_body_is_400(self, client):
        resp = client.post("/v1/catalog/chains", data="[1, 2]", content_type="application/json")
        assert resp.status_code == 400
        assert resp.get_json()["errorType"] == "ValidationError"

    def test_overrides(self, client, catalog):
        overriding = make_chain(catalog, "overriding")
        overridden = make_chain(catalog, "overridden")

        resp = client.post(f"/v1/catalog/chains/{overriding.id}/overrides/{overridden.id}")
        assert resp.get_json()["overridesChainId"] == overridden.id

        resp = client.delete(f"/v1/catalog/chains/{overriding.id}/overrides")
        assert resp.get_json()["overridesChainId"] is None

    def test_count_and_path(self, client, catalog):
        folder = make_folder(catalog, "f")
        chain = make_chain(catalog, "c", folder.id)

        assert client.get("/v1/catalog/chains/count").get_json() == {"count": 1}
        path = client.get(f"/v1/catalog/chains/{chain.id}/path").get_json()
        assert path == {chain.id: "c", folder.id: "f"}


# ─────────────────────────────────────────────────────────────────────────────
# Elements
# ─────────────────────────────────────────────────────────────────────────────


class TestElementRoutes:
    def test_create_returns_diff(self, client, chain):
        resp = client.post(f"/v1/catalog/chains/{chain.id}/elements", json={"type": "test-switch"})

        assert resp.status_code == 201
        diff = resp.get_json()
        assert [e["type"] for e in diff["createdElements"]] == [
            "test-switch",
            "test-case",
            "test-default",
        ]
        assert diff["updatedElements"] == []
        assert diff["createdElements"][1]["properties"] == {"priority": 0}

    def test_unknown_type_is_400(self, client, chain):
        resp = client.post(f"/v1/catalog/chains/{chain.id}/elements", json={"type": "nope"})
        assert resp.status_code == 400

    def test_delete_returns_diff(self, client, catalog, chain):
        switch = add_element(catalog, chain.id, "test-switch")
        add_element(catalog, chain.id, "test-case", switch.id)
        first = children_of_type(catalog, switch, "test-case")[0]

        resp = client.delete(f"/v1/catalog/chains/{chain.id}/elements/{first.id}")

        assert resp.status_code == 200
        diff = resp.get_json()
        assert [e["id"] for e in diff["removedElements"]] == [first.id]
        assert [e["type"] for e in diff["updatedElements"]] == ["test-case", "test-switch"]

    def test_element_of_other_chain_is_404(self, client, catalog, chain):
        other = make_chain(catalog, "other")
        sender = add_element(catalog, other.id, "test-sender")

        resp = client.delete(f"/v1/catalog/chains/{chain.id}/elements/{sender.id}")

        assert resp.status_code == 404
        assert catalog.elements.find_by_id(sender.id) is sender

    def test_change_parent(self, client, catalog, chain):
        group = add_element(catalog, chain.id, "container")
        sender = add_element(catalog, chain.id, "test-sender")

        resp = client.put(
            f"/v1/catalog/chains/{chain.id}/elements/{sender.id}/parent",
            json={"parentElementId": group.id},
        )

        assert resp.status_code == 200
        assert resp.get_json()["parentElementId"] == group.id

    def test_change_parent_rejects_disallowed_child(self, client, catalog, chain):
        switch = add_element(catalog, chain.id, "test-switch")
        sender = add_element(catalog, chain.id, "test-sender")

        resp = client.put(
            f"/v1/catalog/chains/{chain.id}/elements/{sender.id}/parent",
            json={"parentElementId": switch.id},
        )

        assert resp.status_code == 400
        assert resp.get_json()["errorType"] == "ValidationError"

    def test_group_and_ungroup(self, client, catalog, chain):
        first = add_element(catalog, chain.id, "test-sender")
        second = add_element(catalog, chain.id, "test-sender")

        resp = client.post(
            f"/v1/catalog/chains/{chain.id}/elements/group",
            json={"elements": [first.id, second.id]},
        )
        assert resp.status_code == 201
        group = resp.get_json()
        assert group["children"] == [first.id, second.id]

        resp = client.post(f"/v1/catalog/chains/{chain.id}/elements/{group['id']}/ungroup")
        assert [e["parentElementId"] for e in resp.get_json()] == [None, None]


# ─────────────────────────────────────────────────────────────────────────────
# Folders, labeled entities, library
# ─────────────────────────────────────────────────────────────────────────────


class TestFolderRoutes:
    def test_create_nested_and_list(self, client):
        parent = client.post("/v1/catalog/folders", json={"name": "parent"}).get_json()
        resp = client.post(
            "/v1/catalog/folders", json={"name": "child", "parentFolderId": parent["id"]}
        )
        assert resp.status_code == 201
        assert resp.get_json()["parentFolderId"] == parent["id"]

        assert [f["name"] for f in client.get("/v1/catalog/folders").get_json()] == ["parent"]

    def test_move_into_descendant_is_400(self, client, catalog):
        parent = make_folder(catalog, "parent")
        child = make_folder(catalog, "child", parent.id)

        resp = client.post(f"/v1/catalog/folders/{parent.id}/move?targetFolderId={child.id}")

        assert resp.status_code == 400
        assert resp.get_json()["errorType"] == "FolderMoveError"

    def test_delete_and_nested_chains(self, client, catalog):
        parent = make_folder(catalog, "parent")
        child = make_folder(catalog, "child", parent.id)
        make_chain(catalog, "deep", child.id)

        nested = client.get(f"/v1/catalog/folders/{parent.id}/chains").get_json()
        assert [c["name"] for c in nested] == ["deep"]

        assert client.delete(f"/v1/catalog/folders/{parent.id}").status_code == 204
        assert client.get(f"/v1/catalog/folders/{child.id}").status_code == 404


class TestLabeledRoutes:
    def test_update_specification_group_labels(self, client, catalog):
        from chaincatalog.graph.model import SpecificationGroup

        catalog.specification_groups.save(SpecificationGroup(id="g1", name="group"))

        resp = client.put("/v1/catalog/specification-groups/g1", json={"labels": ["v1"]})

        assert resp.status_code == 200
        assert resp.get_json()["labels"] == [{"name": "v1", "technical": False}]
        assert catalog.specification_groups.find_by_id("g1").labels[0].specification_group_id == (
            "g1"
        )

    def test_unknown_kind_is_404(self, client):
        assert client.get("/v1/catalog/widgets/1").status_code == 404

    def test_library(self, client):
        names = {d["name"] for d in client.get("/v1/catalog/library").get_json()}
        assert "test-switch" in names
