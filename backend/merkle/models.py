"""
Merkle Tree Data Models.

Proof and path records exchanged with callers. Indexes refer to positions
in the tree's flat, root-first hash array.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ProofItem:
    """
    One step of an inclusion proof.

    ``is_left`` means the sibling goes before the running hash
    (``sibling + current``); otherwise it goes after (``current + sibling``).
    """

    is_left: bool
    index: int

    @property
    def as_tuple(self) -> tuple[bool, int]:
        """Plain ``(is_left, index)`` pair."""
        return (self.is_left, self.index)

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"is_left": self.is_left, "index": self.index}


@dataclass(frozen=True, slots=True)
class PathStep:
    """A proof item plus the parent node it produces."""

    is_left: bool
    index: int
    parent_index: int

    @property
    def proof_item(self) -> ProofItem:
        return ProofItem(is_left=self.is_left, index=self.index)

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "is_left": self.is_left,
            "index": self.index,
            "parent_index": self.parent_index,
        }
