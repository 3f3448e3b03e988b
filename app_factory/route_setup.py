def register_blueprints(app):
    """Register all application blueprints"""
    from routes.selector_routes import selectors_bp

    app.register_blueprint(selectors_bp)
