"""
Centralized Input Validation Service
Validates request payloads and returns cleaned values or error messages
"""
from typing import Dict, Any, List

from earnflow.utils.validators import Validators, Helpers


class ValidationService:
    """Validation for every payload the API accepts"""

    MIN_PASSWORD_LENGTH = 6
    MAX_NAME_LENGTH = 100
    MAX_EMAIL_LENGTH = 254  # RFC 5321 limit

    @staticmethod
    def validate_email(email: Any, required: bool = True) -> Dict[str, Any]:
        """Validate email format with detailed error message"""
        email = Helpers.sanitize_string(email)
        if not email:
            if required:
                return {'valid': False, 'error': 'Email is required'}
            return {'valid': True, 'value': None}

        if len(email) > ValidationService.MAX_EMAIL_LENGTH:
            return {'valid': False, 'error': 'Email is too long'}

        if not Validators.validate_email(email):
            return {'valid': False, 'error': 'Invalid email format'}

        return {'valid': True, 'value': email}

    @staticmethod
    def validate_name(name: Any) -> Dict[str, Any]:
        name = Helpers.sanitize_string(name)
        if not name:
            return {'valid': False, 'error': 'Name is required'}
        if len(name) > ValidationService.MAX_NAME_LENGTH:
            return {'valid': False, 'error': f'Name must be at most {ValidationService.MAX_NAME_LENGTH} characters'}
        return {'valid': True, 'value': name}

    @staticmethod
    def validate_user_id(user_id: Any) -> Dict[str, Any]:
        user_id = Helpers.sanitize_string(user_id)
        if not user_id:
            return {'valid': False, 'error': 'userId is required'}
        if not Validators.validate_user_id(user_id):
            return {'valid': False, 'error': 'Invalid userId'}
        return {'valid': True, 'value': user_id}

    @staticmethod
    def validate_password(password: Any, confirm_password: Any = None) -> Dict[str, Any]:
        if not password or not isinstance(password, str):
            return {'valid': False, 'error': 'Password is required'}
        if len(password) < ValidationService.MIN_PASSWORD_LENGTH:
            return {'valid': False, 'error': f'Password must be at least {ValidationService.MIN_PASSWORD_LENGTH} characters'}
        if confirm_password is not None and password != confirm_password:
            return {'valid': False, 'error': 'Passwords do not match'}
        return {'valid': True, 'value': password}

    @staticmethod
    def _collect(checks: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        errors: List[str] = [c['error'] for c in checks.values() if not c['valid']]
        if errors:
            return {'valid': False, 'errors': errors}
        return {'valid': True, 'data': {k: c['value'] for k, c in checks.items()}}

    @staticmethod
    def validate_form_entry(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a contact entry submission: name, email and userId are all required."""
        missing = [f for f in ('name', 'email', 'userId') if not Helpers.sanitize_string(payload.get(f))]
        if missing:
            return {'valid': False, 'errors': ['Name, email, and userId are required']}

        return ValidationService._collect({
            'name': ValidationService.validate_name(payload.get('name')),
            'email': ValidationService.validate_email(payload.get('email')),
            'userId': ValidationService.validate_user_id(payload.get('userId')),
        })

    @staticmethod
    def validate_member_assignment(member_id: Any, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not Validators.validate_member_id(member_id):
            return {'valid': False, 'errors': ['memberId must be between 2 and 9']}

        result = ValidationService.validate_form_entry(payload)
        if result['valid']:
            result['data']['memberId'] = int(member_id)
        return result

    @staticmethod
    def validate_parent(payload: Dict[str, Any]) -> Dict[str, Any]:
        """Parent nodes need a name; the email is optional."""
        return ValidationService._collect({
            'name': ValidationService.validate_name(payload.get('name')),
            'email': ValidationService.validate_email(payload.get('email'), required=False),
        })

    @staticmethod
    def validate_child(payload: Dict[str, Any]) -> Dict[str, Any]:
        parent_id = Helpers.sanitize_string(payload.get('parentId'))
        if not parent_id:
            return {'valid': False, 'errors': ['Please provide a parent ID']}
        if not Helpers.sanitize_string(payload.get('name')) or not Helpers.sanitize_string(payload.get('email')):
            return {'valid': False, 'errors': ['Please provide name and email for the new user']}

        result = ValidationService._collect({
            'name': ValidationService.validate_name(payload.get('name')),
            'email': ValidationService.validate_email(payload.get('email')),
        })
        if result['valid']:
            result['data']['parentId'] = parent_id
        return result
