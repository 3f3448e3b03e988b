import os
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from services.pruning_service import PruningService
from services.rewrite_engine import RewriteEngine
from services.usage_aggregator import UsageAggregator
from utils.ledger_store import LedgerStore

# Global extension objects
limiter = Limiter(
    key_func=get_remote_address,
    headers_enabled=True,
    swallow_errors=True,  # Don't break the endpoint if the limiter storage is down
)


def init_extensions(app):
    """Initialize Flask extensions with app context"""

    # Initialize rate limiter
    init_rate_limiter(app)

    # Ledger, aggregator and rewrite engine
    service = init_pruning_service(app)

    return {
        'limiter': limiter,
        'pruning_service': service,
    }


def init_rate_limiter(app):
    """Initialize Flask-Limiter"""
    app.config.setdefault('RATELIMIT_DEFAULT', '; '.join(app.config['RATE_LIMITS']['default']))
    limiter.init_app(app)
    app.logger.info("Rate limiter initialized")
    return limiter


def init_pruning_service(app):
    """Build the lock-guarded ledger store and the services around it"""
    config = app.config
    document_root = config['DOCUMENT_ROOT']

    store = LedgerStore(config['LEDGER_FILE'])
    aggregator = UsageAggregator(document_root, max_file_size=config['MAX_CSS_FILE_SIZE'])
    engine = RewriteEngine(
        document_root,
        config['OUTPUT_DIR'],
        combined_file_name=config['COMBINED_FILE_NAME'],
        max_file_size=config['MAX_CSS_FILE_SIZE'],
        workers=config['REWRITE_WORKERS'],
        timeout=config['REWRITE_TIMEOUT'],
        backup_dir=config['BACKUP_DIR'] if config['BACKUP_ENABLED'] else None,
    )

    service = PruningService(store, aggregator, engine)
    app.extensions['pruning_service'] = service
    app.logger.info("Pruning service ready for document root %s", os.path.abspath(document_root))
    return service

