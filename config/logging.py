import os
from logging.config import dictConfig

LOG_FORMAT = '[%(asctime)s] %(levelname)s in %(name)s: %(message)s'
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def _rotating_file(log_dir, filename, level):
    return {
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': os.path.join(log_dir, filename),
        'maxBytes': MAX_LOG_BYTES,
        'backupCount': LOG_BACKUPS,
        'encoding': 'utf-8',
        'formatter': 'default',
        'level': level,
    }


def setup_logging(app_name='pruner', log_level='INFO', log_dir='logs'):
    """
    Console plus rotating files:
    <app>_general.log, <app>_errors.log (WARNING and up) and <app>_sampler.log.

    Module loggers under services/, lib/ and utils/ propagate to root and
    end up in the general file; the sampler package has its own file.
    """
    os.makedirs(log_dir, exist_ok=True)

    dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {'default': {'format': LOG_FORMAT}},
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'default',
                'level': log_level,
            },
            'general_file': _rotating_file(log_dir, f'{app_name}_general.log', log_level),
            'error_file': _rotating_file(log_dir, f'{app_name}_errors.log', 'WARNING'),
            'sampler_file': _rotating_file(log_dir, f'{app_name}_sampler.log', log_level),
        },
        'loggers': {
            'pruner.general': {
                'handlers': ['console', 'general_file'],
                'level': log_level,
                'propagate': False,
            },
            # Full tracebacks live here only, never in responses
            'pruner.error': {
                'handlers': ['console', 'error_file'],
                'level': 'WARNING',
                'propagate': False,
            },
            'sampler': {
                'handlers': ['console', 'sampler_file'],
                'level': log_level,
                'propagate': False,
            },
        },
        'root': {
            'level': log_level,
            'handlers': ['console', 'general_file', 'error_file'],
        },
    })
