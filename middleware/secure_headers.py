from flask import request


def apply_secure_headers(response):
    """Security headers for the JSON API"""

    # Nothing here is meant to be rendered or framed
    response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

    # HSTS (if HTTPS)
    if request.is_secure:
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

    response.headers['Cross-Origin-Resource-Policy'] = 'same-origin'

    # Remove server information
    response.headers.pop('Server', None)
    response.headers.pop('X-Powered-By', None)

    # Ledger-derived responses change on every call
    if request.endpoint == 'selectors.remove_unused_css':
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate, private'
        response.headers['Pragma'] = 'no-cache'

    return response
