from .flows import router

__all__ = ["router"]
