from .middleware import Middleware, MiddlewareStack, CallNext, FunctionMiddleware
from .session import SessionMiddleware
from .pagination import PaginationMiddleware
from .executor import FlowExecutor

__all__ = [
    "CallNext",
    "FlowExecutor",
    "FunctionMiddleware",
    "Middleware",
    "MiddlewareStack",
    "PaginationMiddleware",
    "SessionMiddleware",
]
