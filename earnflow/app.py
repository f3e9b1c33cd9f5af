import atexit
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from earnflow.api import form_data_bp, members_bp, mlm_bp, auth_bp, config_bp
from earnflow.config.settings import Settings
from earnflow.firebase_utils import init_firebase
from earnflow.middleware.error_middleware import configure_logging, register_error_handlers
from earnflow.models.form_entry_model import build_form_store
from earnflow.models.member_model import MemberTreeModel
from earnflow.models.mlm_user_model import MlmUserModel
from earnflow.services.auth_service import IdentityService
from earnflow.services.pending_queue import PendingParentQueue, PendingParentSync

logger = logging.getLogger(__name__)


def build_services(config, provided: dict = None) -> dict:
    """Construct the data-access objects the blueprints use, keeping any provided ones."""
    services = dict(provided or {})
    if "form_store" not in services:
        services["form_store"] = build_form_store(config["FORM_STORE_BACKEND"], config["FORM_DATA_FILE"])
    services.setdefault("member_tree", MemberTreeModel())
    services.setdefault("mlm_users", MlmUserModel())
    if "pending_sync" not in services:
        queue = PendingParentQueue(config["PENDING_QUEUE_FILE"])
        services["pending_sync"] = PendingParentSync(queue, services["mlm_users"])
    services.setdefault("identity", IdentityService(config.get("FIREBASE_WEB_API_KEY")))
    return services


def create_app(config_overrides: dict = None, services: dict = None, run_startup_checks: bool = False):
    """Create and configure the Flask application.

    Args:
        config_overrides: values that replace the environment-derived Settings.
        services: prebuilt service objects (tests inject fakes here); anything
            missing is built from the config.
        run_startup_checks: flush the pending parent queue once before serving.
            Off by default so tests and imports never touch Firestore.
    """
    app = Flask(__name__)
    app.config.update(Settings.as_dict())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging(app.config["LOG_LEVEL"])
    Settings.validate(dict(app.config))

    CORS(app,
         resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])

    firebase_initialized = init_firebase(
        database_url=app.config.get("FIREBASE_DATABASE_URL"),
        dev_mode=app.config.get("DEV_MODE", False),
    )

    registry = build_services(app.config, services)
    app.extensions["earnflow"] = registry

    @app.get("/")
    def health():
        return jsonify({
            "status": "ok",
            "service": "earnflow-api",
            "firebase": "connected" if firebase_initialized else "not configured",
            "formStore": registry["form_store"].backend,
        }), 200

    register_error_handlers(app)

    app.register_blueprint(form_data_bp)
    app.register_blueprint(members_bp)
    app.register_blueprint(mlm_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(config_bp)

    # Same as a browser that is already online when the page loads
    if run_startup_checks and firebase_initialized:
        result = registry["pending_sync"].sync()
        logger.info("[startup] synced %d pending parents, %d remaining",
                    len(result["synced"]), result["remaining"])

    return app


def _report_pending(app):
    remaining = len(app.extensions["earnflow"]["pending_sync"].pending())
    if remaining:
        logger.warning("Shutting down with %d unsynced parent nodes; they will be retried on next start",
                       remaining)


def main():
    """Main entry point for running the application."""
    app = create_app(run_startup_checks=Settings.SYNC_ON_STARTUP)
    atexit.register(_report_pending, app)
    app.run(host="0.0.0.0", port=app.config["PORT"], debug=app.config["DEBUG"])


if __name__ == "__main__":  # pragma: no cover
    main()
