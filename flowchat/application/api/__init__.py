from .api_server import create_app, serve

__all__ = ["create_app", "serve"]
