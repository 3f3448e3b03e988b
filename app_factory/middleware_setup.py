from werkzeug.middleware.proxy_fix import ProxyFix
from middleware.secure_headers import apply_secure_headers
from routes.errors import register_error_handlers


def setup_middleware(app):
    """Proxy handling, JSON error handlers and response headers"""
    hops = app.config.get('PROXY_HOPS', 1)
    if hops:
        # Reports arrive through the site's reverse proxy; rate limits key on the real client
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=hops, x_proto=hops, x_host=hops, x_prefix=hops)
        app.logger.debug("ProxyFix trusting %d hop(s)", hops)

    register_error_handlers(app)
    app.after_request(apply_secure_headers)

    app.logger.debug("Middleware ready")
