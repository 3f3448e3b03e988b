import logging
import traceback

from flask import jsonify

logger = logging.getLogger('pruner.error')

ERROR_MESSAGES = {
    400: 'Bad Request',
    404: 'Not Found',
    405: 'Method Not Allowed',
    413: 'Request Too Large',
    429: 'Too Many Requests',
    500: 'Internal Server Error',
}


def json_error(status):
    return jsonify({
        'success': False,
        'error': ERROR_MESSAGES[status],
        'errors': [],
    }), status


def register_error_handlers(app):
    """Register JSON error handlers; bodies never carry internal details"""

    @app.errorhandler(400)
    def bad_request(error):
        logger.warning("[400] %s", error)
        return json_error(400)

    @app.errorhandler(404)
    def not_found(error):
        logger.warning("[404] %s", error)
        return json_error(404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        logger.warning("[405] %s", error)
        response, status = json_error(405)
        if getattr(error, 'valid_methods', None):
            response.headers['Allow'] = ', '.join(error.valid_methods)
        return response, status

    @app.errorhandler(413)
    def request_too_large(error):
        logger.warning("[413] %s", error)
        return json_error(413)

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        logger.warning("[429] %s", error)
        return json_error(429)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("[500] Internal Error")
        logger.error(error)
        logger.error(traceback.format_exc())
        return json_error(500)
