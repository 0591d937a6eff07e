"""
Runtime host primitives.

The hosting environment owns the executable logic behind the registry; the
registry only asks it to switch to a new code hash after the ownership check.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from case_registry.storage.abstract import CaseStore

CODE_HASH_KEY = "code_hash"


@runtime_checkable
class RuntimeHost(Protocol):
    def set_code_hash(self, code_hash: str) -> None:
        """Switch the executable logic to `code_hash`. Raises on refusal."""
        ...


class StoreRuntimeHost:
    """
    Host that records the active code hash in the case store's settings.

    Hashes must be 64 hex characters (a 32-byte hash); anything else is refused
    with ValueError.
    """

    def __init__(self, store: CaseStore) -> None:
        self._store = store

    def set_code_hash(self, code_hash: str) -> None:
        normalized = code_hash.lower().removeprefix("0x")
        if len(normalized) != 64:
            raise ValueError(f"code hash must be 64 hex characters, got {len(normalized)}")
        bytes.fromhex(normalized)
        self._store.save_setting(CODE_HASH_KEY, normalized)

    def current_code_hash(self) -> Optional[str]:
        return self._store.load_setting(CODE_HASH_KEY)


__all__ = ["RuntimeHost", "StoreRuntimeHost", "CODE_HASH_KEY"]
