import logging

from flask import request, jsonify

from . import members_bp, get_service
from earnflow.middleware.auth_middleware import AuthMiddleware
from earnflow.middleware.error_middleware import StoreError
from earnflow.services.validation_service import ValidationService

logger = logging.getLogger(__name__)


@members_bp.get("/tree")
@AuthMiddleware.optional_token
def get_member_tree():
    """The nine tree nodes with the emails assigned by this user."""
    user_id = (request.args.get("userId") or "").strip()
    if not user_id:
        return jsonify({"error": "userId is required"}), 400

    if not AuthMiddleware.can_access_user(user_id):
        return jsonify({"error": "You can only view your own tree"}), 403

    members = get_service("member_tree").get_tree(user_id)
    return jsonify({"userId": user_id, "members": members}), 200


@members_bp.put("/<member_id>")
@AuthMiddleware.optional_token
def assign_member(member_id):
    payload = request.get_json(silent=True) or {}
    result = ValidationService.validate_member_assignment(member_id, payload)
    if not result["valid"]:
        return jsonify({"error": "; ".join(result["errors"])}), 400

    data = result["data"]
    if not AuthMiddleware.can_access_user(data["userId"]):
        return jsonify({"error": "You can only edit your own tree"}), 403

    try:
        member = get_service("member_tree").assign_member(
            data["userId"], data["memberId"], data["name"], data["email"]
        )
    except StoreError as e:
        logger.error("Error saving member %s: %s", member_id, e)
        return jsonify({"error": "Error saving form data"}), 500

    return jsonify({"success": True, "message": "Form data saved successfully", "member": member}), 200
