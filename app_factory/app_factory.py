from flask import Flask

from config.logging import setup_logging

from .extensions import init_extensions
from .middleware_setup import setup_middleware
from .route_setup import register_blueprints


def create_app(config_class=None, overrides=None):
    """Flask application factory"""

    if config_class is None:
        from config import get_config
        config_class = get_config()

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)
    config_class.validate_secret_key()
    app.config['SECRET_KEY'] = config_class.SECRET_KEY

    setup_logging(
        app_name='pruner',
        log_level=app.config['LOG_LEVEL'],
        log_dir=app.config['LOG_DIR'],
    )

    # Initialize extensions
    init_extensions(app)

    # Setup middleware (includes ProxyFix)
    setup_middleware(app)

    # Register blueprints
    register_blueprints(app)

    return app
