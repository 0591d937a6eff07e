"""
Domain package for the case registry.

Exports the record model, the stored and filter enumerations, and the error
taxonomy. Keep this package free of storage and I/O concerns.
"""

from case_registry.domain.errors import (
    IdentifierConflict,
    IdentifierExhausted,
    RecordNotFound,
    RegistryError,
    RuntimeSwitchFailed,
    Unauthorized,
)
from case_registry.domain.models import (
    MAX_CASE_ID,
    NOT_FOUND_ID,
    CaseId,
    CasePage,
    CaseRecord,
    Category,
    CategoryFilter,
    FieldFilter,
    IdentifiedCase,
    Status,
    StatusFilter,
)

__all__ = [
    "CaseId",
    "CasePage",
    "CaseRecord",
    "Category",
    "CategoryFilter",
    "FieldFilter",
    "IdentifiedCase",
    "MAX_CASE_ID",
    "NOT_FOUND_ID",
    "Status",
    "StatusFilter",
    "IdentifierConflict",
    "IdentifierExhausted",
    "RecordNotFound",
    "RegistryError",
    "RuntimeSwitchFailed",
    "Unauthorized",
]
