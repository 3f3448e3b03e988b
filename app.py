import os

from config import get_config
from app_factory import create_app
from server import ProductionServer, DevelopmentServer


def main():
    """Serve the /remove-unused-css endpoint"""
    config_class = get_config()
    pruner_app = create_app(config_class)
    config_class.init_app(pruner_app)

    if os.getenv('FLASK_ENV') == 'production':
        ProductionServer(pruner_app).run()
    else:
        DevelopmentServer(pruner_app).run()


if __name__ == '__main__':
    main()
else:
    # gunicorn app:app
    app = create_app(get_config())
