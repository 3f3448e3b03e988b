import os
from dotenv import load_dotenv

# Must run before the config classes read os.environ
load_dotenv(os.getenv('PRUNER_ENV_FILE', '.env'))

from .base import BaseConfig  # noqa: E402
from .development import DevelopmentConfig  # noqa: E402
from .production import ProductionConfig  # noqa: E402
from .testing import TestingConfig  # noqa: E402

CONFIGS = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}


def get_config(env=None):
    """Config class for env (defaults to FLASK_ENV, then development)"""
    return CONFIGS.get(env or os.getenv('FLASK_ENV', 'development'), DevelopmentConfig)


__all__ = [
    'BaseConfig',
    'DevelopmentConfig',
    'ProductionConfig',
    'TestingConfig',
    'CONFIGS',
    'get_config',
]
