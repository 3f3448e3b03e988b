import os
from .base import BaseConfig, _env_flag


class DevelopmentConfig(BaseConfig):
    """Local runs against a checkout of the site"""

    DEBUG = _env_flag('FLASK_DEBUG')
    TESTING = False

    # Every generate run can be rolled back while experimenting
    BACKUP_ENABLED = True

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')

    @classmethod
    def init_app(cls, app):
        if not cls.validate_secret_key():
            app.logger.warning("SECRET_KEY not set, using a generated one")

        if not os.path.isdir(app.config['DOCUMENT_ROOT']):
            app.logger.warning("Document root %s does not exist yet", app.config['DOCUMENT_ROOT'])

        app.logger.warning("Development mode: pruning %s, writing to %s",
                           app.config['DOCUMENT_ROOT'], app.config['OUTPUT_DIR'])
