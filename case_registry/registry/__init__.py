"""
Registry package: identifier allocation, the filtered pagination engine, and
the CaseRegistry service that ties them to a store.
"""

from case_registry.registry.allocator import IdentifierAllocator
from case_registry.registry.query import CaseQuery, paginate
from case_registry.registry.service import CaseRegistry

__all__ = [
    "CaseQuery",
    "CaseRegistry",
    "IdentifierAllocator",
    "paginate",
]
