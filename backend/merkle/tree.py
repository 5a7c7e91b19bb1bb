"""
Merkle Tree.

Binary hash tree stored as one flat, root-first array of hex digests.
Index 0 holds the root, the last ``leaf_count`` entries hold the leaves in
their original order, and the layers in between are addressed by index
arithmetic (see ``merkle.layers``). The last node of an odd-width layer is
paired with itself.
Requires Python 3.11+.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any

from merkle.errors import EmptyTreeError, HashComputationError, LeafIndexOutOfRangeError
from merkle.hash_calculator import HashCalculator
from merkle.layers import Layer, resolve_sibling
from merkle.models import PathStep, ProofItem
from utils.config import get_settings
from utils.logger import LoggerMixin


class MerkleTree(LoggerMixin):
    """
    Merkle tree over a fixed, ordered set of leaf hashes.

    The tree is built once from its leaves. Afterwards it answers inclusion
    proofs, verifies itself or individual leaves, and accepts in-place leaf
    updates. The number of leaves never changes.

    Not thread-safe: callers sharing a tree must serialize ``update_leaf``
    against every other operation.
    """

    def __init__(
        self,
        leaf_hashes: Iterable[str] = (),
        *,
        hasher: HashCalculator | None = None,
        atomic_updates: bool | None = None,
    ) -> None:
        """
        Build the tree.

        Args:
            leaf_hashes: Ordered hex-encoded leaf hashes, possibly empty
            hasher: Hash adapter used for every pair combination
            atomic_updates: Commit ``update_leaf`` writes only after the whole
                path is recomputed; defaults to ``MERKLE_ATOMIC_UPDATES``

        Raises:
            HashComputationError: If a pair of hashes cannot be combined
        """
        self._hasher = hasher or HashCalculator()
        if atomic_updates is None:
            atomic_updates = get_settings().merkle.atomic_updates
        self._atomic_updates = atomic_updates

        leaves = list(leaf_hashes)
        self._leaf_count = len(leaves)
        self._hashes = self._build(leaves)

        self.log.debug(
            "tree_built",
            leaf_count=self._leaf_count,
            node_count=len(self._hashes),
        )

    def _build(self, leaves: list[str]) -> list[str]:
        hashes = list(leaves)
        current = leaves
        while len(current) > 1:
            layer: list[str] = []
            for i in range(0, len(current), 2):
                left = current[i]
                right = current[i + 1] if i + 1 < len(current) else left
                layer.append(self._hasher.combine(left, right))
            hashes[:0] = layer
            current = layer
        return hashes

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def leaf_count(self) -> int:
        return self._leaf_count

    @property
    def root(self) -> str | None:
        """Root hash, or None for an empty tree."""
        return self._hashes[0] if self._hashes else None

    @property
    def hashes(self) -> list[str]:
        """Copy of the flat, root-first hash array."""
        return list(self._hashes)

    @property
    def leaves(self) -> list[str]:
        """Copy of the leaf layer in original order."""
        return self._hashes[len(self._hashes) - self._leaf_count:]

    @property
    def atomic_updates(self) -> bool:
        return self._atomic_updates

    def leaf(self, leaf_index: int) -> str:
        """Stored hash of one leaf."""
        return self._hashes[self._leaf_position(leaf_index)]

    def layers(self) -> Iterator[Layer]:
        """Yield the layers from the leaves up to the root."""
        if not self._leaf_count:
            return
        layer = Layer.leaves(len(self._hashes), self._leaf_count)
        yield layer
        while not layer.is_root:
            layer = layer.parent()
            yield layer

    def __len__(self) -> int:
        return len(self._hashes)

    def __repr__(self) -> str:
        return f"MerkleTree(leaf_count={self._leaf_count}, root={self.root!r})"

    @property
    def as_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "leaf_count": self._leaf_count,
            "root": self.root,
            "hashes": self.hashes,
        }

    # ------------------------------------------------------------------
    # Path traversal
    # ------------------------------------------------------------------

    def _check_leaf_index(self, leaf_index: int) -> None:
        if self._leaf_count == 0:
            raise EmptyTreeError()
        if leaf_index < 0 or leaf_index >= self._leaf_count:
            raise LeafIndexOutOfRangeError(leaf_index, self._leaf_count)

    def _leaf_position(self, leaf_index: int) -> int:
        self._check_leaf_index(leaf_index)
        return len(self._hashes) - self._leaf_count + leaf_index

    def iter_path(self, leaf_index: int) -> Iterator[PathStep]:
        """
        Iterate the path from a leaf up to the root.

        Each step names the sibling combined with the current node and the
        index of the parent they produce. The leaf index is validated before
        the iterator is returned.

        A single-leaf tree yields one self-paired step
        ``PathStep(is_left=False, index=1, parent_index=0)``.

        Args:
            leaf_index: Position of the leaf in the original leaf order

        Raises:
            EmptyTreeError: If the tree has no leaves
            LeafIndexOutOfRangeError: If ``leaf_index`` is not a valid leaf
        """
        position = self._leaf_position(leaf_index)
        return self._path_steps(position)

    def _path_steps(self, position: int) -> Iterator[PathStep]:
        if self._leaf_count == 1:
            yield PathStep(is_left=False, index=1, parent_index=0)
            return

        layer = Layer.leaves(len(self._hashes), self._leaf_count)
        index = position
        while index != 0:
            is_left, sibling = resolve_sibling(index, layer)
            parent = layer.parent()
            parent_index = parent.start + layer.position(index) // 2
            yield PathStep(is_left=is_left, index=sibling, parent_index=parent_index)
            index, layer = parent_index, parent

    def path(self, leaf_index: int) -> list[PathStep]:
        """Materialized ``iter_path``."""
        return list(self.iter_path(leaf_index))

    def walk(self, leaf_index: int, visit: Callable[[PathStep], Any]) -> None:
        """
        Call ``visit`` with each path step in leaf-to-root order.

        An exception raised by ``visit`` stops the walk and propagates.
        """
        for step in self.iter_path(leaf_index):
            visit(step)

    def _fold_path(self, leaf_index: int, seed: str) -> Iterator[tuple[PathStep, str]]:
        """Recompute hashes along the path, starting from ``seed``."""
        node = self._leaf_position(leaf_index)
        running = seed
        for step in self._path_steps(node):
            # self-paired nodes combine with their own (running) value
            sibling = running if step.index == node else self._hashes[step.index]
            running = self._hasher.combine_step(running, sibling, step.is_left)
            yield step, running
            node = step.parent_index

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def generate_proof(self, leaf_index: int) -> list[ProofItem]:
        """
        Generate the inclusion proof for a leaf.

        Args:
            leaf_index: Position of the leaf in the original leaf order

        Returns:
            Proof items in leaf-to-root order
        """
        return [step.proof_item for step in self.iter_path(leaf_index)]

    def resolve_proof(self, proof: Sequence[ProofItem]) -> list[tuple[bool, str]]:
        """
        Replace the array indexes of a proof with the hashes stored there.

        The result can be checked with ``verify_proof`` without the tree.
        A single-leaf tree has no material siblings, so its proof resolves
        to an empty list.
        """
        if self._leaf_count == 1:
            return []
        resolved: list[tuple[bool, str]] = []
        for item in proof:
            if not 0 <= item.index < len(self._hashes):
                raise IndexError(f"proof index {item.index} outside hash array")
            resolved.append((item.is_left, self._hashes[item.index]))
        return resolved

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def _iter_mismatches(self) -> Iterator[int]:
        layers = self.layers()
        layer = next(layers, None)
        for parent in layers:
            for offset in range(0, layer.width, 2):
                left_index = layer.start + offset
                right_index = left_index + 1 if left_index < layer.end else left_index
                expected = self._hasher.combine(
                    self._hashes[left_index], self._hashes[right_index]
                )
                parent_index = parent.start + offset // 2
                if self._hashes[parent_index] != expected:
                    yield parent_index
            layer = parent

    def find_mismatches(self) -> list[int]:
        """
        Recompute every internal node and report the inconsistent ones.

        Returns:
            Indexes of stored parents that do not match their children,
            in leaf-to-root order
        """
        mismatches = list(self._iter_mismatches())
        if mismatches:
            self.log.warning(
                "tree_mismatch",
                count=len(mismatches),
                indexes=mismatches,
            )
        return mismatches

    def verify_tree(self) -> bool:
        """
        Check that every internal node matches the hash of its children.

        Stops at the first inconsistent node. Empty and single-leaf trees
        are trivially consistent.

        Raises:
            HashComputationError: If stored hashes cannot be combined
        """
        first = next(self._iter_mismatches(), None)
        if first is not None:
            self.log.warning("tree_mismatch", index=first)
            return False
        return True

    def verify_leaf(self, leaf_index: int, leaf_hash: str) -> bool:
        """
        Check a leaf hash against the stored root.

        ``leaf_hash`` is supplied by the caller rather than read from the
        tree, so an externally obtained leaf can be checked against the
        recorded root. A non-matching hash returns False.

        Args:
            leaf_index: Position of the leaf in the original leaf order
            leaf_hash: Hex-encoded hash claimed for that leaf

        Raises:
            EmptyTreeError: If the tree has no leaves
            LeafIndexOutOfRangeError: If ``leaf_index`` is not a valid leaf
            HashComputationError: If ``leaf_hash`` is not valid hexadecimal
        """
        self._check_leaf_index(leaf_index)
        if self._leaf_count == 1:
            # the stored root is the leaf itself
            return leaf_hash == self._hashes[0]

        for step, running in self._fold_path(leaf_index, leaf_hash):
            if step.parent_index == 0:
                return running == self._hashes[0]
        return False

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_leaf(
        self, leaf_index: int, new_hash: str, *, atomic: bool | None = None
    ) -> None:
        """
        Replace a leaf hash and recompute every ancestor.

        With atomic updates the new hashes are staged and written only once
        the whole path has been recomputed, so a failure leaves the tree
        untouched. Without them each ancestor is written as soon as it is
        computed and a failure part way up leaves the lower part updated.

        Args:
            leaf_index: Position of the leaf in the original leaf order
            new_hash: Hex-encoded replacement hash
            atomic: Overrides the tree's ``atomic_updates`` setting

        Raises:
            EmptyTreeError: If the tree has no leaves
            LeafIndexOutOfRangeError: If ``leaf_index`` is not a valid leaf
            HashComputationError: If an ancestor hash cannot be computed
        """
        position = self._leaf_position(leaf_index)
        if atomic is None:
            atomic = self._atomic_updates

        if self._leaf_count == 1:
            self._hashes[position] = new_hash
            self.log.debug("leaf_updated", leaf_index=leaf_index, root=new_hash)
            return

        try:
            if atomic:
                staged = {position: new_hash}
                for step, running in self._fold_path(leaf_index, new_hash):
                    staged[step.parent_index] = running
                for index, value in staged.items():
                    self._hashes[index] = value
            else:
                self._hashes[position] = new_hash
                for step, running in self._fold_path(leaf_index, new_hash):
                    self._hashes[step.parent_index] = running
        except HashComputationError as e:
            self.log.error(
                "update_failed",
                leaf_index=leaf_index,
                atomic=atomic,
                error=str(e),
            )
            raise

        self.log.debug("leaf_updated", leaf_index=leaf_index, root=self._hashes[0])


def build_tree(leaf_hashes: Iterable[str], **kwargs: Any) -> MerkleTree:
    """Build a tree from ordered leaf hashes; see ``MerkleTree``."""
    return MerkleTree(leaf_hashes, **kwargs)


def verify_proof(
    leaf_hash: str,
    proof: Sequence[tuple[bool, str]],
    root: str,
    hasher: HashCalculator | None = None,
) -> bool:
    """
    Verify a resolved inclusion proof without the tree.

    Args:
        leaf_hash: Hex-encoded leaf hash to check
        proof: ``(is_left, sibling_hash)`` pairs in leaf-to-root order,
            as returned by ``MerkleTree.resolve_proof``
        root: Expected root hash

    Returns:
        True if folding the proof over ``leaf_hash`` yields ``root``
    """
    hasher = hasher or HashCalculator()
    running = leaf_hash
    for is_left, sibling in proof:
        running = hasher.combine_step(running, sibling, is_left)
    return running == root
