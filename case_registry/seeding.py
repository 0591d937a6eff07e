"""
Deterministic synthetic case generation.

Used by the `seed` and `bench` commands and by tests that need a populated
registry.
"""

from __future__ import annotations

import hashlib
import random
from typing import Iterator, List

from case_registry.domain.models import CaseRecord, Category, Status
from case_registry.registry.service import CaseRegistry

_SUBJECTS = ["wallet", "airdrop", "exchange", "domain", "profile", "token", "forum", "bridge"]
_VERBS = ["drained", "phished", "spoofed", "impersonated", "leaked", "rugged"]


def generate_cases(count: int, seed: int = 42) -> Iterator[CaseRecord]:
    rng = random.Random(seed)
    categories = list(Category)
    statuses = list(Status)
    for i in range(count):
        subject = rng.choice(_SUBJECTS)
        verb = rng.choice(_VERBS)
        yield CaseRecord(
            title=f"{subject.capitalize()} {verb} #{i + 1}",
            description=f"Report of a {subject} that was {verb}; reference {rng.randint(1, 1_000_000)}.",
            category=rng.choice(categories),
            owner=f"reporter-{rng.randint(1, 50)}",
            bounty=rng.randint(0, 10_000),
            file=hashlib.sha256(f"{seed}:{i}".encode()).hexdigest(),
            status=rng.choice(statuses),
        )


def seed_registry(registry: CaseRegistry, count: int, seed: int = 42) -> List[int]:
    """Create `count` synthetic cases and return their identifiers."""
    return [registry.create(record) for record in generate_cases(count, seed=seed)]


__all__ = ["generate_cases", "seed_registry"]
