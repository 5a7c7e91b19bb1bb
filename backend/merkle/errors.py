"""
Merkle Tree Errors.

Closed set of failures raised by tree operations. Each error keeps the
offending values as attributes so callers can branch on kind and context
instead of parsing messages.
Requires Python 3.11+.
"""


class MerkleTreeError(Exception):
    """Base class for all Merkle tree failures."""


class EmptyTreeError(MerkleTreeError):
    """An operation needs a leaf but the tree has none."""

    def __init__(self) -> None:
        super().__init__("merkle tree is empty")


class LeafIndexOutOfRangeError(MerkleTreeError, IndexError):
    """A leaf index falls outside ``[0, leaf_count)``."""

    def __init__(self, index: int, leaf_count: int) -> None:
        self.index = index
        self.leaf_count = leaf_count
        super().__init__(
            f"leaf index {index} should be within 0-{leaf_count - 1} range"
        )

    @property
    def valid_range(self) -> range:
        """Indexes that would have been accepted."""
        return range(self.leaf_count)


class HashComputationError(MerkleTreeError, ValueError):
    """The hash adapter could not hash its input."""

    def __init__(self, data: str, reason: str = "unable to compute merkle hash") -> None:
        self.data = data
        super().__init__(reason)


class InvalidEncodingError(HashComputationError):
    """Input to the hash adapter is not valid hexadecimal."""

    def __init__(self, data: str) -> None:
        super().__init__(data, "input is not valid hexadecimal")
