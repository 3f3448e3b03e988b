import logging
from werkzeug.serving import make_server


class ProductionServer:
    """Threaded WSGI server without debugger or reloader"""

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger('pruner.general')

    def run(self):
        """Serve until interrupted"""
        host = self.app.config['FLASK_HOST']
        port = self.app.config['HTTP_PORT']

        self.logger.info("Starting production server on %s:%s", host, port)

        try:
            server = make_server(host, port, self.app, threaded=True)
            server.serve_forever()
        except KeyboardInterrupt:
            self.logger.info("Server stopped")
        except Exception as e:
            self.logger.error("Failed to start production server: %s", e)
            raise
