"""
Base building blocks:
identity shared by every persisted domain record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Identified:
    """Internal identity exists immediately in the domain, before persistence."""

    id: UUID = field(default_factory=new_id)

    @property
    def sort_key(self) -> str:
        """Stable string form of the identity used for deterministic ordering."""
        return str(self.id)
