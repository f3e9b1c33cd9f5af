from datetime import datetime, timezone
from typing import Dict, Any
import re

import requests
from google.api_core import exceptions as gcp_exceptions
from firebase_admin import exceptions as firebase_exceptions

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

# Substrings the Firebase clients put in connectivity failures
OFFLINE_MARKERS = ("client is offline", "unavailable", "failed to establish a new connection")

OFFLINE_EXCEPTIONS = (
    gcp_exceptions.ServiceUnavailable,
    gcp_exceptions.DeadlineExceeded,
    firebase_exceptions.UnavailableError,
    firebase_exceptions.DeadlineExceededError,
    requests.ConnectionError,
    ConnectionError,
)


class Validators:
    """Input validation utilities"""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        return bool(re.match(EMAIL_PATTERN, email or ""))

    @staticmethod
    def validate_user_id(user_id: str) -> bool:
        """Firebase UIDs and custom ids: 1-128 chars, no path separators"""
        if not user_id or len(user_id) > 128:
            return False
        return not any(c in user_id for c in "/.#$[]")

    @staticmethod
    def validate_member_id(member_id: Any) -> bool:
        """Assignable tree positions are 2-9; the root (1) is the dashboard owner"""
        try:
            value = int(member_id)
        except (TypeError, ValueError):
            return False
        return 2 <= value <= 9


class Helpers:
    """Utility helper functions"""

    @staticmethod
    def now_iso() -> str:
        return datetime.now(timezone.utc).isoformat()

    @staticmethod
    def now_millis() -> int:
        return int(datetime.now(timezone.utc).timestamp() * 1000)

    @staticmethod
    def millis_to_datetime(millis: int) -> datetime:
        return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)

    @staticmethod
    def sanitize_string(text: Any) -> str:
        """Sanitize string input"""
        if not text or not isinstance(text, str):
            return ""
        return text.strip()

    @staticmethod
    def is_offline_error(error: BaseException) -> bool:
        """True when the error means the backend could not be reached at all."""
        if isinstance(error, OFFLINE_EXCEPTIONS):
            return True
        message = str(error).lower()
        return any(marker in message for marker in OFFLINE_MARKERS)

    @staticmethod
    def build_error_response(message: str, code: str = "BAD_REQUEST", details: Any = None) -> Dict[str, Any]:
        """Build standardized error response"""
        response = {
            'error': message,
            'code': code,
            'timestamp': Helpers.now_iso()
        }
        if details is not None:
            response['details'] = details
        return response

    @staticmethod
    def build_success_response(data: Any = None, message: str = None) -> Dict[str, Any]:
        """Build standardized success response"""
        response = {
            'success': True,
            'timestamp': Helpers.now_iso()
        }

        if data is not None:
            response['data'] = data

        if message:
            response['message'] = message

        return response
