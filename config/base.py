import os
import secrets
from security_config import SecurityConfig


def _env_flag(name, default='False'):
    return os.getenv(name, default).lower() == 'true'


class BaseConfig:
    """Settings shared by every environment; each value can come from .env"""

    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Usage reports are small JSON bodies
    MAX_CONTENT_LENGTH = SecurityConfig.MAX_REQUEST_SIZE
    PROPAGATE_EXCEPTIONS = True

    # Site whose stylesheets are pruned; originals are only ever read
    DOCUMENT_ROOT = os.getenv('DOCUMENT_ROOT', 'public')

    LEDGER_FILE = os.getenv('LEDGER_FILE', 'data/unused_selectors.json')
    # Must lie outside DOCUMENT_ROOT
    OUTPUT_DIR = os.getenv('OUTPUT_DIR', 'build/css/')
    COMBINED_FILE_NAME = os.getenv('COMBINED_FILE_NAME', 'remove-unused-css.min.css')
    BACKUP_DIR = os.getenv('BACKUP_DIR', 'backup/')
    BACKUP_ENABLED = _env_flag('BACKUP_ENABLED', 'True')

    MAX_CSS_FILE_SIZE = int(os.getenv('MAX_CSS_FILE_SIZE', str(SecurityConfig.MAX_CSS_FILE_SIZE)))
    REWRITE_TIMEOUT = float(os.getenv('REWRITE_TIMEOUT', '100'))
    REWRITE_WORKERS = int(os.getenv('REWRITE_WORKERS', '4'))

    # Sampler side (cli.py and embedding code)
    SCAN_INTERVAL = float(os.getenv('SCAN_INTERVAL', '1.0'))
    SCAN_DEBOUNCE = float(os.getenv('SCAN_DEBOUNCE', '0.1'))
    FETCH_TIMEOUT = float(os.getenv('FETCH_TIMEOUT', '10'))

    FLASK_HOST = os.getenv('FLASK_HOST', '127.0.0.1')
    HTTP_PORT = int(os.getenv('HTTP_PORT', '5000'))
    PROXY_HOPS = int(os.getenv('PROXY_HOPS', '1'))

    RATE_LIMITS = SecurityConfig.RATE_LIMITS
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    @classmethod
    def validate_secret_key(cls):
        """
        True when a usable SECRET_KEY was provided. Outside production a
        missing key is replaced by a generated one and False is returned.
        """
        if cls.SECRET_KEY and len(cls.SECRET_KEY) >= 32:
            return True
        if os.environ.get('FLASK_ENV') == 'production':
            raise ValueError("SECRET_KEY must be set and at least 32 characters long in production")
        cls.SECRET_KEY = secrets.token_hex(32)
        return False

    @classmethod
    def init_app(cls, app):
        """Hook for environment-specific setup"""
