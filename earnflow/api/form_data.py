import logging

from flask import request, jsonify

from . import form_data_bp, get_service
from earnflow.middleware.auth_middleware import AuthMiddleware
from earnflow.middleware.error_middleware import StoreError
from earnflow.services.validation_service import ValidationService

logger = logging.getLogger(__name__)


@form_data_bp.post("/save-form-data")
@AuthMiddleware.optional_token
def save_form_data():
    payload = request.get_json(silent=True) or {}
    result = ValidationService.validate_form_entry(payload)
    if not result["valid"]:
        return jsonify({"error": "; ".join(result["errors"])}), 400

    data = result["data"]
    if not AuthMiddleware.can_access_user(data["userId"]):
        return jsonify({"error": "You can only save entries for your own account"}), 403

    try:
        entry = get_service("form_store").save(data["name"], data["email"], data["userId"])
    except StoreError as e:
        logger.error("Error saving form data: %s", e)
        return jsonify({"error": "Failed to save form data"}), 500

    return jsonify({"success": True, "message": "Form data saved successfully", "entry": entry}), 200


@form_data_bp.get("/form-data")
@AuthMiddleware.optional_token
def get_form_data():
    user_id = (request.args.get("userId") or "").strip()
    if not user_id:
        return jsonify({"error": "userId is required"}), 400

    if not AuthMiddleware.can_access_user(user_id):
        return jsonify({"error": "You can only read your own entries"}), 403

    try:
        entries = get_service("form_store").list_by_user(user_id)
    except StoreError as e:
        logger.error("Error reading form data: %s", e)
        return jsonify({"error": "Failed to read form data"}), 500

    return jsonify(entries), 200


@form_data_bp.delete("/form-data/", defaults={"entry_id": ""})
@form_data_bp.delete("/form-data/<entry_id>")
@AuthMiddleware.optional_token
def delete_form_entry(entry_id):
    entry_id = (entry_id or "").strip()
    if not entry_id:
        return jsonify({"error": "entryId is required"}), 400

    store = get_service("form_store")
    try:
        entry = store.get(entry_id)
        if entry is None:
            return jsonify({"error": "Entry not found"}), 404

        if not AuthMiddleware.can_access_user(entry.get("userId")):
            return jsonify({"error": "You can only delete your own entries"}), 403

        removed = store.delete(entry_id)
    except StoreError as e:
        logger.error("Error deleting entry %s: %s", entry_id, e)
        return jsonify({"error": "Failed to delete entry"}), 500

    if not removed:
        return jsonify({"error": "Entry not found"}), 404

    return jsonify({"success": True, "message": "Entry deleted successfully"}), 200
