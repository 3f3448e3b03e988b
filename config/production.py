import os
from .base import BaseConfig


class ProductionConfig(BaseConfig):
    """Deployed endpoint receiving reports from live visitors"""

    DEBUG = False
    TESTING = False
    PROPAGATE_EXCEPTIONS = False

    FLASK_HOST = os.getenv('FLASK_HOST', '0.0.0.0')
    HTTP_PORT = int(os.getenv('HTTP_PORT', '8080'))

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate_production_requirements(cls):
        """
        Refuse to start without a secret, a real document root and a
        writable place for the ledger and the generated files.
        """
        missing = [name for name in ('SECRET_KEY', 'DOCUMENT_ROOT') if not os.getenv(name)]
        if missing:
            raise ValueError(f"Missing required production environment variables: {missing}")

        if not cls.validate_secret_key():
            raise ValueError("SECRET_KEY must be at least 32 characters")

        if not os.path.isdir(cls.DOCUMENT_ROOT):
            raise FileNotFoundError(f"Document root not found: {cls.DOCUMENT_ROOT}")

        for path in (os.path.dirname(os.path.abspath(cls.LEDGER_FILE)), os.path.abspath(cls.OUTPUT_DIR)):
            os.makedirs(path, exist_ok=True)
            if not os.access(path, os.W_OK):
                raise PermissionError(f"Directory not writable: {path}")

        return True

    @classmethod
    def init_app(cls, app):
        cls.validate_production_requirements()
        app.logger.info("Production checks passed for %s", cls.DOCUMENT_ROOT)
