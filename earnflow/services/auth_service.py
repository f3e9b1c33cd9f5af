"""
Identity Toolkit client for email/password accounts.
Signup, login and password reset go through the Firebase Auth REST API;
ID token verification uses the Admin SDK.
"""
import logging
import os
from typing import Dict, Any, Optional

import requests
from firebase_admin import auth

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_HOST = "https://identitytoolkit.googleapis.com"
REQUEST_TIMEOUT = 15

# Identity Toolkit error code -> (message, HTTP status)
ERROR_MESSAGES = {
    "EMAIL_EXISTS": ("Email is already registered. Try signing in instead.", 409),
    "INVALID_EMAIL": ("Invalid email address", 400),
    "EMAIL_NOT_FOUND": ("No account found with this email", 404),
    "INVALID_PASSWORD": ("Incorrect password", 401),
    "INVALID_LOGIN_CREDENTIALS": ("Incorrect email or password", 401),
    "USER_DISABLED": ("This account has been disabled", 403),
    "TOO_MANY_ATTEMPTS_TRY_LATER": ("Too many failed login attempts. Try again later.", 429),
    "WEAK_PASSWORD": ("Password must be at least 6 characters", 400),
}


class IdentityError(Exception):
    def __init__(self, message: str, status: int = 400, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


class IdentityService:
    """Thin wrapper over the accounts:* endpoints"""

    def __init__(self, api_key: Optional[str], session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.session = session or requests.Session()

    @property
    def base_url(self) -> str:
        emulator = os.getenv("FIREBASE_AUTH_EMULATOR_HOST")
        if emulator:
            return f"http://{emulator}/identitytoolkit.googleapis.com/v1"
        return f"{IDENTITY_TOOLKIT_HOST}/v1"

    def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise IdentityError("Authentication is not configured", 503, "NO_API_KEY")

        try:
            response = self.session.post(
                f"{self.base_url}/accounts:{method}",
                params={"key": self.api_key},
                json=payload,
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error("Identity Toolkit %s failed: %s", method, e)
            raise IdentityError("Authentication service unavailable", 503, "UNAVAILABLE") from e

        data = response.json() if response.content else {}
        if not response.ok:
            raw = (data.get("error") or {}).get("message", "")
            # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
            code = raw.split(":")[0].strip()
            message, status = ERROR_MESSAGES.get(code, (raw or "An error occurred", 400))
            logger.info("Identity Toolkit %s rejected: %s", method, code or response.status_code)
            raise IdentityError(message, status, code)
        return data

    def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        data = self._call("signUp", {"email": email, "password": password, "returnSecureToken": True})
        self.send_verification_email(data["idToken"])
        return {"userId": data.get("localId"), "email": data.get("email", email)}

    def send_verification_email(self, id_token: str):
        self._call("sendOobCode", {"requestType": "VERIFY_EMAIL", "idToken": id_token})

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        data = self._call("signInWithPassword", {"email": email, "password": password, "returnSecureToken": True})

        lookup = self._call("lookup", {"idToken": data["idToken"]})
        users = lookup.get("users") or [{}]
        if not users[0].get("emailVerified"):
            raise IdentityError(
                "Please verify your email before logging in. Check your inbox for the verification link.",
                403,
                "EMAIL_NOT_VERIFIED",
            )

        return {
            "idToken": data["idToken"],
            "refreshToken": data.get("refreshToken"),
            "expiresIn": data.get("expiresIn"),
            "userId": data.get("localId"),
            "email": data.get("email", email),
        }

    def send_password_reset(self, email: str):
        self._call("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    @staticmethod
    def verify_id_token(id_token: str) -> Dict[str, Any]:
        try:
            return auth.verify_id_token(id_token)
        except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
            raise IdentityError("Invalid or expired token", 401, "INVALID_TOKEN") from e
        except ValueError as e:
            raise IdentityError("Invalid token", 401, "INVALID_TOKEN") from e
