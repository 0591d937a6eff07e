"""
Case Registry - an authoritative index of reported cases.

This package stores case records (title, description, category, owner,
bounty, evidence hash, status) under durable, never-reused identifiers and
provides:

- Create/read/update/delete by identifier
- Filtered, paginated listing by keyword, category, and status
- An owner-gated switch of the registry's executable logic
- In-memory and PostgreSQL storage backends
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from case_registry.config import Settings, get_settings
from case_registry.domain import (
    CasePage,
    CaseRecord,
    Category,
    FieldFilter,
    IdentifiedCase,
    IdentifierConflict,
    IdentifierExhausted,
    RecordNotFound,
    RegistryError,
    RuntimeSwitchFailed,
    Status,
    Unauthorized,
)
from case_registry.registry import CaseQuery, CaseRegistry, IdentifierAllocator
from case_registry.storage import CaseStore, InMemoryCaseStore, build_store
from case_registry.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "CasePage",
    "CaseRecord",
    "Category",
    "FieldFilter",
    "IdentifiedCase",
    "Status",
    # Errors
    "IdentifierConflict",
    "IdentifierExhausted",
    "RecordNotFound",
    "RegistryError",
    "RuntimeSwitchFailed",
    "Unauthorized",
    # Registry
    "CaseQuery",
    "CaseRegistry",
    "IdentifierAllocator",
    # Storage
    "CaseStore",
    "InMemoryCaseStore",
    "build_store",
    # Logging
    "configure_logging",
    "get_logger",
]
