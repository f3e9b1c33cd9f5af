import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.getenv(name, default).lower() == 'true'


class Settings:
    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY')
    FLASK_ENV = os.getenv('FLASK_ENV', 'development')
    DEBUG = FLASK_ENV == 'development'
    PORT = int(os.getenv('PORT', 3001))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # CORS settings
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*').split(',')

    # Runtime switches
    DEV_MODE = _env_flag('DEV_MODE')
    AUTH_REQUIRED = _env_flag('AUTH_REQUIRED')
    SYNC_ON_STARTUP = _env_flag('SYNC_ON_STARTUP', 'true')

    # Storage
    FORM_STORE_BACKEND = os.getenv('FORM_STORE_BACKEND', 'file').lower()
    FORM_DATA_FILE = os.getenv('FORM_DATA_FILE', 'form-data.json')
    PENDING_QUEUE_FILE = os.getenv('PENDING_QUEUE_FILE', 'pending_mlm_parents.json')

    # Firebase settings
    FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID')
    FIREBASE_DATABASE_URL = os.getenv('FIREBASE_DATABASE_URL')

    # Firebase Frontend Config (for client-side)
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY')
    FIREBASE_AUTH_DOMAIN = os.getenv('FIREBASE_AUTH_DOMAIN')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')
    FIREBASE_MESSAGING_SENDER_ID = os.getenv('FIREBASE_MESSAGING_SENDER_ID')
    FIREBASE_APP_ID = os.getenv('FIREBASE_APP_ID')
    FIREBASE_MEASUREMENT_ID = os.getenv('FIREBASE_MEASUREMENT_ID')

    VALID_FORM_STORE_BACKENDS = ('file', 'firebase')

    @classmethod
    def as_dict(cls) -> dict:
        return {k: v for k, v in vars(cls).items() if k.isupper()}

    @classmethod
    def validate(cls, settings: dict = None):
        """Validate settings; pass a dict to check app.config overrides instead of the class."""
        settings = settings if settings is not None else cls.as_dict()

        backend = settings.get('FORM_STORE_BACKEND')
        if backend not in cls.VALID_FORM_STORE_BACKENDS:
            raise ValueError(
                f"FORM_STORE_BACKEND must be one of {', '.join(cls.VALID_FORM_STORE_BACKENDS)}, got {backend!r}"
            )

        if backend == 'firebase' and not settings.get('DEV_MODE') and not settings.get('FIREBASE_DATABASE_URL'):
            raise ValueError("FIREBASE_DATABASE_URL is required when FORM_STORE_BACKEND=firebase")

        if settings.get('SECRET_KEY') and len(settings['SECRET_KEY']) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters long")

        return True
