import logging

from flask import Blueprint, request, jsonify, current_app

from app_factory.extensions import limiter
from middleware.input_validation import validate_request_size, validate_usage_payload
from services.errors import PayloadError, RewriteTimeoutError

selectors_bp = Blueprint('selectors', __name__)

error_logger = logging.getLogger('pruner.error')

ACTION_HEADER = 'X-Action'
ACTIONS = ('save', 'generate')


def error_response(status, message, errors=None):
    return jsonify({
        'success': False,
        'error': message,
        'errors': errors or [],
    }), status


def get_pruning_service():
    return current_app.extensions['pruning_service']


def generate_limit():
    return '; '.join(current_app.config['RATE_LIMITS']['generate'])


def is_not_generate():
    return request.headers.get(ACTION_HEADER, 'save').strip().lower() != 'generate'


@selectors_bp.route('/remove-unused-css', methods=['POST'])
@limiter.limit(generate_limit, exempt_when=is_not_generate, override_defaults=False)
@validate_request_size()
def remove_unused_css():
    """Merge a page's usage report; with X-Action: generate also rewrite the CSS"""
    data = request.get_json(force=True, silent=True)
    try:
        payload = validate_usage_payload(data)
    except PayloadError as e:
        current_app.logger.warning("Rejected usage payload: %s", e)
        return error_response(400, str(e))

    action = request.headers.get(ACTION_HEADER, 'save').strip().lower()
    if action not in ACTIONS:
        return error_response(400, 'Unknown action')

    service = get_pruning_service()
    try:
        if action == 'save':
            merge_result = service.save(payload)
            return jsonify({
                'success': True,
                'message': 'Data saved successfully',
                'processed_files': merge_result.processed_files,
                'errors': merge_result.errors,
            })

        merge_result, rewrite_result = service.generate(payload)
        return jsonify({
            'success': True,
            'message': 'Files generated successfully',
            'processed_files': rewrite_result.processed_files,
            'statistics': rewrite_result.statistics.to_dict(),
            'errors': merge_result.errors + rewrite_result.errors,
        })

    except RewriteTimeoutError as e:
        error_logger.error("Rewrite aborted: %s", e)
        return error_response(504, 'Processing timed out')
    except Exception:
        error_logger.exception("Unhandled error while handling %r action", action)
        return error_response(500, 'Internal Server Error')
