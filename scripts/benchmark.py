#!/usr/bin/env python3
"""
Merkle Tree Benchmark Script.

Performance benchmarks for building, proving, verifying and updating trees.
Requires Python 3.11+.

Usage:
    python scripts/benchmark.py --leaves 100000
"""

import argparse
import hashlib
import random
import statistics
import sys
import time
from pathlib import Path
from typing import Callable, TypeVar

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from merkle.tree import MerkleTree
from utils.logger import configure_logging, get_logger


configure_logging()
logger = get_logger("benchmark")

T = TypeVar("T")


def benchmark(name: str, func: Callable[[], T], iterations: int = 5) -> tuple[T, dict]:
    """
    Benchmark a function.

    Returns:
        Tuple of (result, stats)
    """
    times = []
    result = None

    for _ in range(iterations):
        start = time.perf_counter()
        result = func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)  # Convert to ms

    stats = {
        "name": name,
        "iterations": iterations,
        "min_ms": min(times),
        "max_ms": max(times),
        "mean_ms": statistics.mean(times),
        "median_ms": statistics.median(times),
        "stdev_ms": statistics.stdev(times) if len(times) > 1 else 0,
    }

    return result, stats


def print_stats(stats: dict) -> None:
    """Print benchmark statistics."""
    print(f"\n  {stats['name']}:")
    print(f"    Mean:   {stats['mean_ms']:.2f}ms")
    print(f"    Median: {stats['median_ms']:.2f}ms")
    print(f"    Min:    {stats['min_ms']:.2f}ms")
    print(f"    Max:    {stats['max_ms']:.2f}ms")
    if stats["stdev_ms"] > 0:
        print(f"    StdDev: {stats['stdev_ms']:.2f}ms")


def random_hashes(count: int, seed: int) -> list[str]:
    """Generate ``count`` random SHA-256 hex digests."""
    rng = random.Random(seed)
    return [
        hashlib.sha256(str(rng.getrandbits(64)).encode("utf-8")).hexdigest()
        for _ in range(count)
    ]


def run_benchmarks(leaf_count: int, iterations: int, seed: int) -> None:
    """Run all benchmarks."""
    print("\n=== Merkle Tree Benchmarks ===")
    print(f"Leaves: {leaf_count}")

    leaves = random_hashes(leaf_count, seed)
    replacements = random_hashes(iterations, seed + 1)
    rng = random.Random(seed)

    tree, stats = benchmark(
        f"Build tree ({leaf_count} leaves)",
        lambda: MerkleTree(leaves),
        iterations=iterations,
    )
    print_stats(stats)
    print(f"    Nodes:  {len(tree)}")

    _, stats = benchmark("Verify tree", tree.verify_tree, iterations=iterations)
    print_stats(stats)

    def proof() -> list:
        return tree.generate_proof(rng.randrange(leaf_count))

    _, stats = benchmark("Generate proof", proof, iterations=iterations)
    print_stats(stats)

    def verify_leaf() -> bool:
        index = rng.randrange(leaf_count)
        return tree.verify_leaf(index, leaves[index])

    _, stats = benchmark("Verify leaf", verify_leaf, iterations=iterations)
    print_stats(stats)

    pending = iter(replacements)

    def update() -> None:
        tree.update_leaf(rng.randrange(leaf_count), next(pending))

    _, stats = benchmark("Update leaf", update, iterations=iterations)
    print_stats(stats)

    consistent = tree.verify_tree()
    logger.info("benchmark_complete", leaf_count=leaf_count, consistent=consistent)
    print("\n=== Benchmark Complete ===\n")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run Merkle tree performance benchmarks"
    )
    parser.add_argument(
        "--leaves",
        type=int,
        default=10_000,
        help="Number of random leaves to build the tree from",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Timed runs per benchmark",
    )
    parser.add_argument("--seed", type=int, default=0, help="Random seed")

    args = parser.parse_args()

    if args.leaves < 1 or args.iterations < 1:
        print("Error: --leaves and --iterations must be positive")
        sys.exit(1)

    try:
        run_benchmarks(args.leaves, args.iterations, args.seed)
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)


if __name__ == "__main__":
    main()
