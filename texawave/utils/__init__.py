"""
Utilities package.
Provides helper functions and dependencies.
"""
from .logger import setup_logging, LoggerAdapter, log_function_call
from .dependencies import (
    get_current_user,
    get_current_admin_user,
    is_admin,
    require_feature,
    pagination_params,
    date_range_params
)

__all__ = [
    "setup_logging",
    "LoggerAdapter",
    "log_function_call",
    "get_current_user",
    "get_current_admin_user",
    "is_admin",
    "require_feature",
    "pagination_params",
    "date_range_params"
]
