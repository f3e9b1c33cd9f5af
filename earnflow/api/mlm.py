import logging

from flask import request, jsonify

from . import mlm_bp, get_service
from earnflow.middleware.auth_middleware import AuthMiddleware
from earnflow.models.mlm_user_model import ParentNotFoundError
from earnflow.services.pending_queue import STATUS_CONFIRMED
from earnflow.services.validation_service import ValidationService

logger = logging.getLogger(__name__)


@mlm_bp.post("/parents")
@AuthMiddleware.optional_token
def create_parent():
    """Create a root node; answers 202 when the write is parked in the pending queue."""
    payload = request.get_json(silent=True) or {}
    result = ValidationService.validate_parent(payload)
    if not result["valid"]:
        return jsonify({"error": "; ".join(result["errors"])}), 400

    data = result["data"]
    parent = get_service("pending_sync").create_parent(data["name"], data["email"])

    if parent["status"] == STATUS_CONFIRMED:
        message = f"Created parent {parent['name']} (id: {parent['id']})"
        return jsonify({**parent, "message": message}), 201

    message = f"Parent saved locally (id: {parent['id']}), will sync when online."
    return jsonify({**parent, "message": message}), 202


@mlm_bp.post("/users")
@AuthMiddleware.optional_token
def create_user_under_parent():
    payload = request.get_json(silent=True) or {}
    result = ValidationService.validate_child(payload)
    if not result["valid"]:
        return jsonify({"error": "; ".join(result["errors"])}), 400

    data = result["data"]
    model = get_service("mlm_users")
    try:
        parent_ref = model.resolve_parent(data["parentId"])
        child_id = model.create_child(parent_ref, data["name"], data["email"])
    except ParentNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception as e:
        logger.exception("Failed to create user under %s", data["parentId"])
        return jsonify({"error": f"Failed to create user: {e}"}), 500

    return jsonify({
        "id": child_id,
        "parentId": parent_ref.id,
        "message": f"Created user {data['name']} (id: {child_id}) under parent {parent_ref.id}",
    }), 201


@mlm_bp.get("/users/<user_id>")
def get_mlm_user(user_id):
    user = get_service("mlm_users").get_user(user_id)
    if user is None:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user), 200


@mlm_bp.get("/pending")
def list_pending_parents():
    pending = get_service("pending_sync").pending()
    return jsonify({"pending": pending, "count": len(pending)}), 200


@mlm_bp.post("/sync")
def sync_pending_parents():
    """Called by clients when they come back online."""
    return jsonify(get_service("pending_sync").sync()), 200
