"""
Middleware package.
"""
from texawave.middleware.error_handler import add_exception_handlers, request_logging_middleware

__all__ = ["add_exception_handlers", "request_logging_middleware"]
