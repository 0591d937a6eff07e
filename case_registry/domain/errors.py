"""
Error taxonomy for registry operations.

Lookups that may legitimately miss (`read_by_id`, `read_title`) return `None`
instead of raising; only operations that require the target to exist raise
`RecordNotFound`.
"""
from __future__ import annotations

from typing import Optional


class RegistryError(Exception):
    """Base class for all registry failures."""

    code: str = "REGISTRY_ERROR"


class RecordNotFound(RegistryError):
    code = "NOT_FOUND"

    def __init__(self, case_id: int) -> None:
        self.case_id = case_id
        super().__init__(f"Case {case_id} does not exist")


class Unauthorized(RegistryError):
    code = "UNAUTHORIZED"

    def __init__(self, caller: str, owner: Optional[str]) -> None:
        self.caller = caller
        self.owner = owner
        super().__init__(f"Caller '{caller}' is not the registry owner")


class IdentifierExhausted(RegistryError):
    """
    The identifier space is used up.

    Fatal: the registry cannot accept new records once this is raised.
    """

    code = "IDENTIFIER_EXHAUSTED"

    def __init__(self, last_id: int) -> None:
        self.last_id = last_id
        super().__init__(f"No identifier left after {last_id}")


class IdentifierConflict(RegistryError):
    """Another writer stored a case under the identifier just allocated."""

    code = "IDENTIFIER_CONFLICT"

    def __init__(self, case_id: int) -> None:
        self.case_id = case_id
        super().__init__(f"Case {case_id} was stored concurrently; retry the create")


class RuntimeSwitchFailed(RegistryError):
    code = "RUNTIME_SWITCH_FAILED"

    def __init__(self, code_hash: str, cause: Exception) -> None:
        self.code_hash = code_hash
        self.cause = cause
        super().__init__(f"Failed to switch code hash to {code_hash}: {cause}")


__all__ = [
    "RegistryError",
    "RecordNotFound",
    "Unauthorized",
    "IdentifierConflict",
    "IdentifierExhausted",
    "RuntimeSwitchFailed",
]
