"""
Example usage of sparsedim
Demonstrates element access, arithmetic and persistence on N-dimensional arrays
"""

import logging
import os
import sys
import tempfile
import time

import numpy as np

# Add parent directory to path to import sparsedim without installing it
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python'))

from sparsedim import (
    LoadStatus,
    MultiDim,
    SparseDim,
    SparseMatrix,
    create_random_sparse,
)


def example_basic_access():
    """Example 1: Setting and reading elements"""
    print("=" * 60)
    print("Example 1: Element Access")
    print("=" * 60)

    a = MultiDim((2, 2), default=0)
    a.set(5, (0, 0))
    a.set(-3, (1, 1))
    print(f"\n{a!r}")
    print(a)

    print(f"\na[0, 1] = {a.get((0, 1))} (default)")

    # Writing the default removes the entry
    a.set(0, (0, 0))
    print(f"After a[0, 0] = 0: nnz = {a.nnz}")


def example_n_dimensional():
    """Example 2: Arrays with more than two dimensions"""
    print("\n" + "=" * 60)
    print("Example 2: N-Dimensional Arrays")
    print("=" * 60)

    cube = MultiDim((3, 2, 4), default=1)
    cube.set(7, (2, 1, 3))
    cube.set(0, (0, 0, 0))
    print(f"\n{cube!r}, {cube.slice_count} slices")
    print(cube)

    print("\nStored entries:")
    for coord, value in cube.items():
        print(f"  {coord} -> {value}")


def example_arithmetic():
    """Example 3: Elementwise arithmetic"""
    print("\n" + "=" * 60)
    print("Example 3: Arithmetic")
    print("=" * 60)

    m1 = create_random_sparse((2, 4, 4), density=0.25, seed=1)
    m2 = create_random_sparse((2, 4, 4), density=0.25, seed=2)

    print(f"\nm1 = {m1!r}")
    print(f"m2 = {m2!r}")
    print(f"m1 + m2 == m2 + m1: {(m1 + m2) == (m2 + m1)}")
    print(f"m1 * 2 == m1 + m1: {(m1 * 2) == (m1 + m1)}")
    print(f"(m1 * 5) / 5 == m1: {((m1 * 5) / 5) == m1}")
    print(f"m1 * 0 stores {(m1 * 0).nnz} entries")

    tripled = m2.transform(lambda v: v * 3, memoize=True)
    print(f"m2.transform(v * 3) == m2 * 3: {tripled == m2 * 3}")


def example_persistence():
    """Example 4: Dumping and loading"""
    print("\n" + "=" * 60)
    print("Example 4: Persistence")
    print("=" * 60)

    m = create_random_sparse((20, 3, 7, 8, 9), density=0.2, seed=3)
    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "m.bin")
        m.dump(path)
        print(f"\nWrote {m!r} ({os.path.getsize(path)} bytes)")

        loaded, status = MultiDim.load(path, 5)
        print(f"Loaded with status {status.name}, equal: {loaded == m}")

    missing, status = SparseDim.load("/nonexistent/m.bin", 5)
    print(f"Missing file: status {status.name} ({int(status)}), placeholder shape {missing.shape}")
    assert status == LoadStatus.OPEN_FAILED


def example_matrix():
    """Example 5: Two-dimensional matrices"""
    print("\n" + "=" * 60)
    print("Example 5: SparseMatrix")
    print("=" * 60)

    m = SparseMatrix(3, 3)
    for i in range(3):
        m.set(i + 1, i, i)
    print("\nDiagonal matrix:")
    print(m)
    print("\nm * 2:")
    print(m * 2)


def example_performance_comparison():
    """Example 6: Sparse-patch vs general addition"""
    print("\n" + "=" * 60)
    print("Example 6: Performance Comparison")
    print("=" * 60)

    shape = (10, 100, 100)
    a = create_random_sparse(shape, density=0.01, seed=4)
    b = create_random_sparse(shape, density=0.01, seed=5)
    dense_b = b.to_dense()
    b_shifted = MultiDim.from_dense(dense_b + 1, default=1)

    start = time.time()
    a + b
    patch_time = time.time() - start

    start = time.time()
    a + b_shifted
    general_time = time.time() - start

    print(f"\nShape: {shape}, density: 1%")
    print(f"Sparse-patch addition: {patch_time:.4f} seconds")
    print(f"General addition: {general_time:.4f} seconds")
    print(f"Speedup: {general_time / patch_time:.2f}x")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    # Run all examples
    example_basic_access()
    example_n_dimensional()
    example_arithmetic()
    example_persistence()
    example_matrix()

    # Uncomment for performance test (takes a bit longer)
    # example_performance_comparison()

    print("\n" + "=" * 60)
    print("All examples completed successfully!")
    print("=" * 60)
