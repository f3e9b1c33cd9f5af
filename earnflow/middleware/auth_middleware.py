from functools import wraps
from flask import request, jsonify, current_app, g
from earnflow.services.auth_service import IdentityService, IdentityError
from earnflow.utils.validators import Helpers


class AuthMiddleware:
    """Authentication middleware for Firebase ID tokens"""

    @staticmethod
    def _bearer_token():
        auth_header = request.headers.get('Authorization', '')
        scheme, _, token = auth_header.partition(' ')
        if scheme.lower() != 'bearer' or not token.strip():
            return None
        return token.strip()

    @staticmethod
    def verify_token(f):
        """Decorator: require a valid Firebase ID token and expose it as g.current_user"""
        @wraps(f)
        def decorated_function(*args, **kwargs):
            token = AuthMiddleware._bearer_token()
            if not token:
                return jsonify(Helpers.build_error_response('Token is missing', 'AUTHENTICATION_ERROR')), 401

            try:
                g.current_user = IdentityService.verify_id_token(token)
            except IdentityError as e:
                return jsonify(Helpers.build_error_response(e.message, 'AUTHENTICATION_ERROR')), e.status

            return f(*args, **kwargs)

        return decorated_function

    @staticmethod
    def optional_token(f):
        """Decorator: enforce verify_token only when AUTH_REQUIRED is set"""
        verified = AuthMiddleware.verify_token(f)

        @wraps(f)
        def decorated_function(*args, **kwargs):
            if current_app.config.get('AUTH_REQUIRED'):
                return verified(*args, **kwargs)
            return f(*args, **kwargs)

        return decorated_function

    @staticmethod
    def get_current_user():
        """Get the decoded token of the current request, if any"""
        return g.get('current_user')

    @staticmethod
    def can_access_user(user_id: str) -> bool:
        """Authenticated callers may only read and write their own records"""
        if not current_app.config.get('AUTH_REQUIRED'):
            return True
        current_user = AuthMiddleware.get_current_user()
        return bool(current_user) and current_user.get('uid') == user_id
