"""
Domain models for the case registry.

Stored enumerations (`Category`, `Status`) never contain a wildcard; the
query-only "All" value lives in `FieldFilter`, a separate type, so it cannot
be written into a `CaseRecord`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, field_validator

CaseId = int

NOT_FOUND_ID: CaseId = 0
MAX_CASE_ID: CaseId = 2**32 - 1

WILDCARD = "All"
HASH_SIZE_BYTES = 32


class Category(str, Enum):
    """Kind of reported case."""

    SCAM = "Scam"
    WEB = "Web"
    PERSON = "Person"
    CONSPIRACY_THEORY = "ConspiracyTheory"
    OTHERS = "Others"


class Status(str, Enum):
    """Lifecycle stage of a case."""

    NEW = "New"
    EVIDENCE = "Evidence"
    VOTING = "Voting"
    CLOSE = "Close"


E = TypeVar("E", Category, Status)


@dataclass(frozen=True)
class FieldFilter(Generic[E]):
    """
    Filter over a stored enum field: either one specific value or any value.

    `value=None` means "match any".
    """

    value: Optional[E] = None

    @classmethod
    def any(cls) -> "FieldFilter[E]":
        return cls(None)

    @classmethod
    def only(cls, value: E) -> "FieldFilter[E]":
        return cls(value)

    @classmethod
    def parse(cls, raw: Union[str, E, None, "FieldFilter[E]"], enum_type: Type[E]) -> "FieldFilter[E]":
        """
        Build a filter from user input.

        Accepts an existing filter, an enum member, `None`, the wildcard text
        "All", or an enum value such as "Scam". Matching on text is exact.
        """
        if isinstance(raw, FieldFilter):
            return raw
        if raw is None:
            return cls.any()
        if isinstance(raw, enum_type):
            return cls.only(raw)
        if raw == WILDCARD:
            return cls.any()
        try:
            return cls.only(enum_type(raw))
        except ValueError:
            allowed = ", ".join([WILDCARD] + [member.value for member in enum_type])
            raise ValueError(f"Unknown {enum_type.__name__} filter '{raw}'. Allowed: {allowed}") from None

    @property
    def is_any(self) -> bool:
        return self.value is None

    def matches(self, candidate: E) -> bool:
        return self.value is None or self.value == candidate

    def __str__(self) -> str:
        return WILDCARD if self.value is None else self.value.value


CategoryFilter = FieldFilter[Category]
StatusFilter = FieldFilter[Status]


class CaseRecord(BaseModel):
    """
    One reported case.

    Title and description are free text; empty strings are accepted. Only the
    bounty (non-negative) and the evidence hash (32 bytes) are checked.
    """

    title: str = Field(..., description="Display name of the case.")
    description: str = Field(..., description="Free-form detail.")
    category: Category = Field(..., description="Stored category, never the wildcard.")
    owner: str = Field(..., description="Opaque identity of the submitter.")
    bounty: int = Field(0, ge=0, description="Bounty in the host's smallest currency unit.")
    file: str = Field(
        ...,
        description="Hex-encoded 32-byte hash of externally stored evidence.",
    )
    status: Status = Field(Status.NEW, description="Stored status, never the wildcard.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("file", mode="before")
    @classmethod
    def _normalize_file_hash(cls, value: object) -> object:
        if isinstance(value, (bytes, bytearray)):
            if len(value) != HASH_SIZE_BYTES:
                raise ValueError(f"file hash must be {HASH_SIZE_BYTES} bytes, got {len(value)}")
            return bytes(value).hex()
        if isinstance(value, str):
            text = value.lower()
            if text.startswith("0x"):
                text = text[2:]
            if len(text) != HASH_SIZE_BYTES * 2:
                raise ValueError(f"file hash must be {HASH_SIZE_BYTES * 2} hex characters")
            try:
                bytes.fromhex(text)
            except ValueError:
                raise ValueError("file hash must be hexadecimal") from None
            return text
        return value


class IdentifiedCase(BaseModel):
    """A stored record together with its identifier."""

    id: CaseId = Field(..., ge=1, le=MAX_CASE_ID)
    record: CaseRecord

    model_config = {"frozen": True}


class CasePage(BaseModel):
    """One page of a filtered listing plus the total number of matches."""

    items: List[IdentifiedCase] = Field(default_factory=list)
    total: int = Field(0, ge=0, description="Matches across the whole registry.")
    page: int = Field(1, ge=1)
    page_size: int

    model_config = {"frozen": True}

    @property
    def page_count(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total / self.page_size)


__all__ = [
    "CaseId",
    "NOT_FOUND_ID",
    "MAX_CASE_ID",
    "WILDCARD",
    "Category",
    "Status",
    "FieldFilter",
    "CategoryFilter",
    "StatusFilter",
    "CaseRecord",
    "IdentifiedCase",
    "CasePage",
]
