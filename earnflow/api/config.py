from flask import jsonify, current_app

from . import config_bp
from earnflow.utils.validators import Helpers


@config_bp.get("/firebase")
def get_firebase_config():
    """Public Firebase web SDK configuration for the front-end"""
    cfg = current_app.config
    config = {
        'apiKey': cfg.get('FIREBASE_WEB_API_KEY'),
        'authDomain': cfg.get('FIREBASE_AUTH_DOMAIN'),
        'projectId': cfg.get('FIREBASE_PROJECT_ID'),
        'databaseURL': cfg.get('FIREBASE_DATABASE_URL'),
        'storageBucket': cfg.get('FIREBASE_STORAGE_BUCKET'),
        'messagingSenderId': cfg.get('FIREBASE_MESSAGING_SENDER_ID'),
        'appId': cfg.get('FIREBASE_APP_ID'),
        'measurementId': cfg.get('FIREBASE_MEASUREMENT_ID')
    }

    return jsonify(Helpers.build_success_response(
        data=config,
        message='Firebase configuration retrieved successfully'
    )), 200
