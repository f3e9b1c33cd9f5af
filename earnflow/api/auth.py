"""
Authentication endpoints backed by Firebase Authentication.
The front-end can use these instead of talking to the Firebase JS SDK directly.
"""
from flask import request, jsonify

from . import auth_bp, get_service
from earnflow.middleware.auth_middleware import AuthMiddleware
from earnflow.services.auth_service import IdentityError
from earnflow.services.validation_service import ValidationService


def _error(e: IdentityError):
    return jsonify({"error": e.message, "code": e.code}), e.status


@auth_bp.post("/signup")
def signup():
    """
    Create an email/password account and send the verification email.
    Expected payload: {email, password, confirmPassword?}
    """
    payload = request.get_json(silent=True) or {}

    email_check = ValidationService.validate_email(payload.get("email"))
    if not email_check["valid"]:
        return jsonify({"error": email_check["error"]}), 400

    password_check = ValidationService.validate_password(payload.get("password"), payload.get("confirmPassword"))
    if not password_check["valid"]:
        return jsonify({"error": password_check["error"]}), 400

    try:
        account = get_service("identity").sign_up(email_check["value"], password_check["value"])
    except IdentityError as e:
        return _error(e)

    return jsonify({
        **account,
        "message": "Account created! Check your email to verify your account.",
    }), 201


@auth_bp.post("/login")
def login():
    """
    Sign in with email and password; unverified addresses are refused.
    Returns: {idToken, refreshToken, expiresIn, userId, email}
    """
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    try:
        session = get_service("identity").sign_in(email, password)
    except IdentityError as e:
        return _error(e)

    return jsonify(session), 200


@auth_bp.post("/password-reset")
def password_reset():
    payload = request.get_json(silent=True) or {}
    email = (payload.get("email") or "").strip()
    if not email:
        return jsonify({"error": "Please enter your email address"}), 400

    try:
        get_service("identity").send_password_reset(email)
    except IdentityError as e:
        return _error(e)

    return jsonify({"success": True, "message": "Password reset email sent"}), 200


@auth_bp.get("/me")
@AuthMiddleware.verify_token
def me():
    user = AuthMiddleware.get_current_user()
    return jsonify({
        "uid": user.get("uid"),
        "email": user.get("email"),
        "emailVerified": user.get("email_verified", False),
    }), 200
