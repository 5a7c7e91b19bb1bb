"""
Merkle Tree Layer Arithmetic.

Index math for the flat array: layer sizes, layer boundaries and sibling
lookup. The array is root-first, so moving to a parent layer moves the
offsets towards index 0.
Requires Python 3.11+.
"""

from dataclasses import dataclass


def _parent_width(width: int) -> int:
    if width % 2 == 0:
        return width // 2
    return width // 2 + 1


def tree_element_count(leaf_count: int) -> int:
    """
    Total number of array entries for a tree with ``leaf_count`` leaves.

    Sums the layer widths from the leaves up to the root, halving and
    rounding up at each step.

    Args:
        leaf_count: Number of leaves, at least 1

    Returns:
        Length of the flat hash array
    """
    if leaf_count < 1:
        raise ValueError(f"leaf_count must be positive, got {leaf_count}")

    total = leaf_count
    current = leaf_count
    while current != 1:
        current = _parent_width(current)
        total += current
    return total


@dataclass(frozen=True, slots=True)
class Layer:
    """One horizontal slice of the flat array (inclusive offsets)."""

    start: int
    end: int
    width: int

    @classmethod
    def leaves(cls, total: int, leaf_count: int) -> "Layer":
        """The leaf layer, which occupies the last ``leaf_count`` slots."""
        return cls(start=total - leaf_count, end=total - 1, width=leaf_count)

    @property
    def is_odd(self) -> bool:
        return self.width % 2 == 1

    @property
    def is_root(self) -> bool:
        return self.width == 1

    def parent(self) -> "Layer":
        """The layer directly above this one."""
        width = _parent_width(self.width)
        return Layer(start=self.start - width, end=self.start - 1, width=width)

    def position(self, index: int) -> int:
        """Offset of an absolute array index within this layer."""
        return index - self.start

    def parent_index(self, index: int) -> int:
        """Absolute index of the parent of ``index``."""
        return self.parent().start + self.position(index) // 2

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index <= self.end


def resolve_sibling(index: int, layer: Layer) -> tuple[bool, int]:
    """
    Find the node that is combined with ``index`` to form its parent.

    The last element of an odd-width layer pairs with itself.

    Returns:
        Tuple of (is_left, sibling_index)
    """
    if layer.is_odd and index == layer.end:
        return False, index
    if layer.position(index) % 2 == 0:
        return False, index + 1
    return True, index - 1
