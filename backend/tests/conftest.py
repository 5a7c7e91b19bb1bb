"""
Merkle Tree Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

import hashlib
import random
from collections.abc import Callable, Generator

import pytest

from merkle.tree import MerkleTree
from utils.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Drop cached settings so environment changes in a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_hashes() -> Callable[[int], list[str]]:
    """Factory producing ``n`` random SHA-256 hex digests."""
    rng = random.Random(1234)

    def _make(n: int) -> list[str]:
        return [
            hashlib.sha256(str(rng.getrandbits(64)).encode("utf-8")).hexdigest()
            for _ in range(n)
        ]

    return _make


@pytest.fixture
def five_leaves(make_hashes: Callable[[int], list[str]]) -> list[str]:
    """Leaves for a tree whose lower layers both have odd width."""
    return make_hashes(5)


@pytest.fixture
def five_leaf_tree(five_leaves: list[str]) -> MerkleTree:
    """Tree built from ``five_leaves``."""
    return MerkleTree(five_leaves)


@pytest.fixture
def six_leaf_tree(make_hashes: Callable[[int], list[str]]) -> MerkleTree:
    """Tree with an even leaf layer above which the layer is odd."""
    return MerkleTree(make_hashes(6))
