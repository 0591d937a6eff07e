"""
Utilities package for the case registry.

Exports shared helpers for logging and profiling. Keep this package
lightweight and free of domain-specific logic.
"""

from case_registry.utils.logging import configure_logging, get_logger
from case_registry.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
