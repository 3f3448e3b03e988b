import secrets

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Used by the test suite; paths are overridden per test"""

    TESTING = True
    DEBUG = True
    SECRET_KEY = secrets.token_hex(32)

    RATELIMIT_ENABLED = False

    # No backups and a small pool keep each rewrite fast
    BACKUP_ENABLED = False
    REWRITE_WORKERS = 2
    REWRITE_TIMEOUT = 30

    # The sampler never goes to the network in tests
    FETCH_TIMEOUT = 1

    HTTP_PORT = 5001
    LOG_LEVEL = 'WARNING'

    @classmethod
    def init_app(cls, app):
        app.logger.info("Running in testing mode")
