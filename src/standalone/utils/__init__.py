"""
Utility functions for the standalone harness
"""

from .enum_helper import EnumHelper
from .logger import get_logger, get_category_logger, configure_logger, parse_log_level

__all__ = [
    'EnumHelper',
    'get_logger',
    'get_category_logger',
    'configure_logger',
    'parse_log_level',
]
