"""
Scope -- who a resource belongs to.

Responsibility:
    Models resource ownership as an explicit tagged value instead of a
    nullable owner column, so the "no owner" branch is never forgotten.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

    GlobalScope       shared, read-only reference data (system categories)
    OwnedScope(uid)   exclusively owned by one user
"""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class GlobalScope:
    """Visible to every user, mutable by none."""

    @property
    def is_global(self) -> bool:
        return True


@dataclass(frozen=True)
class OwnedScope:
    """Owned by exactly one user."""

    owner_id: UUID

    @property
    def is_global(self) -> bool:
        return False


Scope = GlobalScope | OwnedScope


def scope_for(owner_id: UUID | None) -> Scope:
    """Lift a nullable owner column into a Scope."""
    if owner_id is None:
        return GlobalScope()
    return OwnedScope(owner_id)
