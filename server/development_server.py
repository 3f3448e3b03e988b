import logging
import socket


def is_port_available(host, port):
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, port))
            return True
    except OSError:
        return False


def find_free_port(host, preferred, attempts=100):
    """preferred if it is free, else the next free port after it"""
    for port in range(preferred, preferred + attempts):
        if is_port_available(host, port):
            return port
    raise OSError(f"No available ports found near {preferred}")


class DevelopmentServer:
    """Flask's threaded dev server; moves to a free port if the configured one is taken"""

    def __init__(self, app):
        self.app = app
        self.logger = logging.getLogger('pruner.general')

    def run(self):
        host = self.app.config['FLASK_HOST']
        wanted = self.app.config['HTTP_PORT']
        port = find_free_port(host, wanted)
        if port != wanted:
            self.logger.warning("Port %s is in use, using %s instead", wanted, port)

        self.logger.info("Pruning endpoint at http://%s:%s/remove-unused-css", host, port)
        self.app.run(
            host=host,
            port=port,
            debug=self.app.config.get('DEBUG', False),
            threaded=True,
        )
