"""chaincatalog.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: all logic delegates to the services of a
``Catalog``. Catalog errors are mapped to status codes with a JSON body
``{"errorMessage": ..., "errorType": ...}``.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS

from chaincatalog.exceptions import (
    CatalogError,
    ConnectivityError,
    NotFoundError,
    StructuralConflictError,
    ValidationError,
)
from chaincatalog.factory import Catalog
from chaincatalog.graph.model import Chain, ChainLabel, Folder
from chaincatalog.graph.relations import new_id
from chaincatalog.graph.serialize import (
    serialize_chain,
    serialize_diff,
    serialize_element,
    serialize_folder,
    serialize_labeled,
)
from chaincatalog.services.filters import FilterRequest

logger = logging.getLogger(__name__)

ERROR_STATUS: list[tuple[type[CatalogError], int]] = [
    (NotFoundError, 404),
    (StructuralConflictError, 400),
    (ConnectivityError, 400),
    (ValidationError, 400),
]


def error_status(error: Exception) -> int:
    """HTTP status for an error kind; 500 for anything unexpected."""
    for kind, status in ERROR_STATUS:
        if isinstance(error, kind):
            return status
    return 500


def _error_body(error: BaseException) -> dict[str, str]:
    return {"errorMessage": str(error), "errorType": type(error).__name__}


def _parse_labels(raw: Any, factory=ChainLabel) -> list | None:
    """Read ``["a", {"name": "b", "technical": false}]`` into label objects."""
    if raw is None:
        return None
    labels = []
    for item in raw:
        if isinstance(item, str):
            labels.append(factory(name=item))
        else:
            labels.append(factory(name=item["name"], technical=bool(item.get("technical"))))
    return labels


def _json_body() -> dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def create_app(catalog: Catalog, config: dict[str, Any] | None = None) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        catalog: Wired catalog services.
        config: chaincatalog configuration dict.

    Returns:
        Configured Flask application.
    """
    app = Flask(__name__)
    CORS(app)
    app.config["CHAINCATALOG"] = config or {}

    chains = catalog.chains
    elements = catalog.elements
    folders = catalog.folders

    # ─────────────────────────────────────────────────────────────────
    # Error mapping
    # ─────────────────────────────────────────────────────────────────

    @app.errorhandler(CatalogError)
    def handle_catalog_error(error: CatalogError):
        status = error_status(error)
        logger.debug("Request failed with %s: %s", type(error).__name__, error)
        return jsonify(_error_body(error)), status

    @app.errorhandler(500)
    def handle_internal_error(error):
        original = getattr(error, "original_exception", None) or error
        return jsonify(_error_body(original)), 500

    # ─────────────────────────────────────────────────────────────────
    # Chains
    # ─────────────────────────────────────────────────────────────────

    @app.route("/v1/catalog/chains", methods=["GET"])
    def api_chains():
        """GET /v1/catalog/chains - Chains in a folder, or in the root."""
        folder_id = request.args.get("folderId")
        found = chains.find_in_folder(folder_id) if folder_id else chains.find_in_root()
        return jsonify([serialize_chain(c, include_graph=False) for c in found])

    @app.route("/v1/catalog/chains", methods=["POST"])
    def api_create_chain():
        """POST /v1/catalog/chains - Create an empty chain."""
        data = _json_body()
        chain = Chain(
            id=new_id(),
            name=data.get("name", ""),
            description=data.get("description", ""),
            labels=_parse_labels(data.get("labels")) or [],
        )
        saved = chains.save(chain, data.get("parentFolderId"))
        return jsonify(serialize_chain(saved)), 201

    @app.route("/v1/catalog/chains/count", methods=["GET"])
    def api_chains_count():
        return jsonify({"count": chains.get_chains_count()})

    @app.route("/v1/catalog/chains/search", methods=["POST"])
    def api_search_chains():
        """POST /v1/catalog/chains/search - Free-text search."""
        condition = _json_body().get("searchCondition", "")
        return jsonify([serialize_chain(c, include_graph=False) for c in chains.search(condition)])

    @app.route("/v1/catalog/chains/filter", methods=["POST"])
    def api_filter_chains():
        """POST /v1/catalog/chains/filter - Chains matching every filter clause."""
        data = request.get_json(force=True, silent=True)
        if not isinstance(data, list):
            raise ValidationError("Request body must be a JSON list of filters")
        try:
            filters = [FilterRequest.from_dict(item) for item in data]
        except ValueError as e:
            raise ValidationError(str(e)) from e
        found = chains.find_by_filter_request(filters)
        return jsonify([serialize_chain(c, include_graph=False) for c in found])

    @app.route("/v1/catalog/chains/<chain_id>", methods=["GET"])
    def api_chain(chain_id: str):
        return jsonify(serialize_chain(chains.find_by_id(chain_id)))

    @app.route("/v1/catalog/chains/<chain_id>", methods=["PUT"])
    def api_update_chain(chain_id: str):
        """PUT /v1/catalog/chains/<id> - Update name, description, labels or folder."""
        data = _json_body()
        chain = chains.update(
            chain_id,
            name=data.get("name"),
            description=data.get("description"),
            labels=_parse_labels(data.get("labels")),
            parent_folder_id=data.get("parentFolderId"),
        )
        return jsonify(serialize_chain(chain))

    @app.route("/v1/catalog/chains/<chain_id>", methods=["DELETE"])
    def api_delete_chain(chain_id: str):
        chains.delete_by_id(chain_id)
        return "", 204

    @app.route("/v1/catalog/chains/<chain_id>/path", methods=["GET"])
    def api_chain_path(chain_id: str):
        return jsonify(chains.provide_navigation_path(chain_id))

    @app.route("/v1/catalog/chains/<chain_id>/move", methods=["POST"])
    def api_move_chain(chain_id: str):
        chain = chains.move(chain_id, request.args.get("targetFolderId"))
        return jsonify(serialize_chain(chain, include_graph=False))

    @app.route("/v1/catalog/chains/<chain_id>/copy", methods=["POST"])
    def api_copy_chain(chain_id: str):
        chain = chains.copy(chain_id, request.args.get("targetFolderId"))
        return jsonify(serialize_chain(chain)), 201

    @app.route("/v1/catalog/chains/<chain_id>/duplicate", methods=["POST"])
    def api_duplicate_chain(chain_id: str):
        return jsonify(serialize_chain(chains.duplicate(chain_id))), 201

    @app.route("/v1/catalog/chains/<chain_id>/overrides/<overridden_id>", methods=["POST"])
    def api_link_override(chain_id: str, overridden_id: str):
        chain = chains.link_override(chain_id, overridden_id)
        return jsonify(serialize_chain(chain, include_graph=False))

    @app.route("/v1/catalog/chains/<chain_id>/overrides", methods=["DELETE"])
    def api_unlink_overrides(chain_id: str):
        return jsonify(serialize_chain(chains.unlink_overrides(chain_id), include_graph=False))

    # ─────────────────────────────────────────────────────────────────
    # Elements
    # ─────────────────────────────────────────────────────────────────

    def _element_in_chain(chain_id: str, element_id: str):
        element = elements.find_by_id(element_id)
        if element.chain_id != chain_id:
            raise NotFoundError(f"Can't find element with id {element_id} in chain {chain_id}")
        return element

    @app.route("/v1/catalog/chains/<chain_id>/elements", methods=["GET"])
    def api_elements(chain_id: str):
        chains.find_by_id(chain_id)
        return jsonify([serialize_element(e) for e in elements.find_all_by_chain_id(chain_id)])

    @app.route("/v1/catalog/chains/<chain_id>/elements", methods=["POST"])
    def api_create_element(chain_id: str):
        """POST /v1/catalog/chains/<id>/elements - Create an element, returns a ChainDiff."""
        data = _json_body()
        diff = elements.create(chain_id, data.get("type", ""), data.get("parentElementId"))
        return jsonify(serialize_diff(diff)), 201

    @app.route("/v1/catalog/chains/<chain_id>/elements/<element_id>", methods=["DELETE"])
    def api_delete_element(chain_id: str, element_id: str):
        _element_in_chain(chain_id, element_id)
        return jsonify(serialize_diff(elements.delete_by_id_and_update_unsaved(element_id)))

    @app.route("/v1/catalog/chains/<chain_id>/elements/<element_id>/parent", methods=["PUT"])
    def api_change_parent(chain_id: str, element_id: str):
        _element_in_chain(chain_id, element_id)
        parent_id = _json_body().get("parentElementId")
        return jsonify(serialize_element(elements.change_parent(element_id, parent_id)))

    @app.route("/v1/catalog/chains/<chain_id>/elements/group", methods=["POST"])
    def api_group(chain_id: str):
        element_ids = _json_body().get("elements") or []
        return jsonify(serialize_element(elements.group(chain_id, list(element_ids)))), 201

    @app.route("/v1/catalog/chains/<chain_id>/elements/<group_id>/ungroup", methods=["POST"])
    def api_ungroup(chain_id: str, group_id: str):
        _element_in_chain(chain_id, group_id)
        return jsonify([serialize_element(e) for e in elements.ungroup(group_id)])

    # ─────────────────────────────────────────────────────────────────
    # Folders
    # ─────────────────────────────────────────────────────────────────

    @app.route("/v1/catalog/folders", methods=["GET"])
    def api_folders():
        return jsonify([serialize_folder(f) for f in folders.find_all_in_root()])

    @app.route("/v1/catalog/folders", methods=["POST"])
    def api_create_folder():
        data = _json_body()
        folder = Folder(
            id=new_id(), name=data.get("name", ""), description=data.get("description", "")
        )
        return jsonify(serialize_folder(folders.save(folder, data.get("parentFolderId")))), 201

    @app.route("/v1/catalog/folders/<folder_id>", methods=["GET"])
    def api_folder(folder_id: str):
        return jsonify(serialize_folder(folders.find_by_id(folder_id)))

    @app.route("/v1/catalog/folders/<folder_id>", methods=["PUT"])
    def api_update_folder(folder_id: str):
        data = _json_body()
        folder = folders.update(
            folder_id,
            name=data.get("name"),
            description=data.get("description"),
            parent_folder_id=data.get("parentFolderId"),
        )
        return jsonify(serialize_folder(folder))

    @app.route("/v1/catalog/folders/<folder_id>", methods=["DELETE"])
    def api_delete_folder(folder_id: str):
        folders.delete_by_id(folder_id)
        return "", 204

    @app.route("/v1/catalog/folders/<folder_id>/move", methods=["POST"])
    def api_move_folder(folder_id: str):
        folder = folders.move(folder_id, request.args.get("targetFolderId"))
        return jsonify(serialize_folder(folder))

    @app.route("/v1/catalog/folders/<folder_id>/path", methods=["GET"])
    def api_folder_path(folder_id: str):
        return jsonify(folders.provide_navigation_path(folder_id))

    @app.route("/v1/catalog/folders/<folder_id>/chains", methods=["GET"])
    def api_nested_chains(folder_id: str):
        folders.find_by_id(folder_id)
        nested = folders.find_nested_chains(folder_id)
        return jsonify([serialize_chain(c, include_graph=False) for c in nested])

    # ─────────────────────────────────────────────────────────────────
    # Specification groups, system models, library
    # ─────────────────────────────────────────────────────────────────

    labeled_services = {
        "specification-groups": catalog.specification_groups,
        "models": catalog.system_models,
    }

    @app.route("/v1/catalog/<kind>/<entity_id>", methods=["GET"])
    def api_labeled(kind: str, entity_id: str):
        service = labeled_services.get(kind)
        if service is None:
            return jsonify({"errorMessage": f"Unknown resource: {kind}"}), 404
        return jsonify(serialize_labeled(service.find_by_id(entity_id)))

    @app.route("/v1/catalog/<kind>/<entity_id>", methods=["PUT"])
    def api_update_labeled(kind: str, entity_id: str):
        service = labeled_services.get(kind)
        if service is None:
            return jsonify({"errorMessage": f"Unknown resource: {kind}"}), 404
        data = _json_body()
        entity = service.update(
            entity_id,
            name=data.get("name"),
            description=data.get("description"),
            labels=_parse_labels(data.get("labels"), factory=service.label_type),
        )
        return jsonify(serialize_labeled(entity))

    @app.route("/v1/catalog/library", methods=["GET"])
    def api_library():
        """GET /v1/catalog/library - Element descriptors known to the catalog."""
        return jsonify(
            [
                {
                    "name": d.name,
                    "title": d.title,
                    "container": d.container,
                    "ordered": d.ordered,
                    "inputEnabled": d.input_enabled,
                    "allowedChildren": {
                        child: {"min": o.min, "max": o.max}
                        for child, o in d.allowed_children.items()
                    },
                }
                for d in catalog.registry
            ]
        )

    return app
