from flask import Blueprint, current_app

form_data_bp = Blueprint("form_data", __name__, url_prefix="/api")
members_bp = Blueprint("members", __name__, url_prefix="/api/members")
mlm_bp = Blueprint("mlm", __name__, url_prefix="/api/mlm")
auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")
config_bp = Blueprint("config", __name__, url_prefix="/api/config")


def get_service(name: str):
    """Look up a service object registered by create_app."""
    return current_app.extensions["earnflow"][name]


# Import modules so routes attach
from . import form_data  # noqa
from . import members  # noqa
from . import mlm  # noqa
from . import auth  # noqa
from . import config  # noqa

__all__ = [
    "form_data_bp",
    "members_bp",
    "mlm_bp",
    "auth_bp",
    "config_bp",
    "get_service",
]
