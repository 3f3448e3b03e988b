from functools import wraps
from flask import request, abort, current_app

from services.errors import PayloadError


def validate_request_size(max_size=None):
    """Reject bodies above max_size (defaults to MAX_CONTENT_LENGTH)"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            limit = max_size or current_app.config.get('MAX_CONTENT_LENGTH')
            if limit and request.content_length and request.content_length > limit:
                current_app.logger.warning("Request too large: %s bytes", request.content_length)
                abort(413)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def validate_usage_payload(data):
    """
    Check the shape {file: [{"selector": str, "media": str|None}, ...]}.

    Raises:
        PayloadError: on any deviation; nothing has been merged at that point.
    """
    if not isinstance(data, dict) or not data:
        raise PayloadError('Invalid JSON data')

    for source_file, entries in data.items():
        if not isinstance(source_file, str) or not source_file.strip():
            raise PayloadError('Invalid source file key')
        if not isinstance(entries, list):
            raise PayloadError(f'Selectors for {source_file} must be a list')
        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get('selector'), str):
                raise PayloadError(f'Invalid selector entry for {source_file}')
            media = entry.get('media')
            if media is not None and not isinstance(media, str):
                raise PayloadError(f'Invalid media value for {source_file}')
    return data
