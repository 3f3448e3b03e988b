# server/__init__.py
from .production_server import ProductionServer
from .development_server import DevelopmentServer

__all__ = ['ProductionServer', 'DevelopmentServer']
