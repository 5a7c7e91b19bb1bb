"""
Merkle Tree Package.

Flat-array Merkle tree with inclusion proofs, verification and
incremental leaf updates.
Requires Python 3.11+.
"""

from merkle.errors import (
    EmptyTreeError,
    HashComputationError,
    InvalidEncodingError,
    LeafIndexOutOfRangeError,
    MerkleTreeError,
)
from merkle.hash_calculator import HashCalculator, merkle_hash
from merkle.layers import Layer, resolve_sibling, tree_element_count
from merkle.models import PathStep, ProofItem
from merkle.tree import MerkleTree, build_tree, verify_proof

__all__ = [
    # Tree
    "MerkleTree",
    "build_tree",
    "verify_proof",
    # Data classes
    "ProofItem",
    "PathStep",
    "Layer",
    # Hashing and index math
    "HashCalculator",
    "merkle_hash",
    "resolve_sibling",
    "tree_element_count",
    # Errors
    "MerkleTreeError",
    "EmptyTreeError",
    "LeafIndexOutOfRangeError",
    "HashComputationError",
    "InvalidEncodingError",
]
