"""
Benchmark Suite

Step throughput of the wind tunnel with NumPy and Numba kernels, and of the
three streaming variants on their own.
"""

import numpy as np
import time
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from windtunnel import Fluid
from windtunnel.equilibrium import compute_equilibrium
from windtunnel.streaming import (
    stream_interior, stream_interior_fast, stream_interior_inplace
)


def benchmark_fluid(nx, ny, num_steps, use_fast=True, warmup_steps=20):
    """
    Benchmark full solver ticks with a small obstacle in place.

    Returns
    -------
    mlups : float
        Million Lattice Updates Per Second
    """
    fluid = Fluid(nx, ny, 1.0, 0.1, 0.02, use_fast=use_fast)
    fluid.update_obstacle([(x, y) for x in range(-4, 5) for y in range(-2, 3)])

    for _ in range(warmup_steps):
        fluid.step()

    start = time.perf_counter()
    for _ in range(num_steps):
        fluid.step()
    elapsed = time.perf_counter() - start

    return num_steps * nx * ny / elapsed / 1e6


def benchmark_streaming(nx, ny, num_steps, warmup_steps=5):
    """
    Benchmark streaming variants in isolation.

    Returns
    -------
    results : dict
        MLUPS per variant
    """
    rng = np.random.default_rng(0)
    rho = 1.0 + 0.01 * rng.standard_normal((ny, nx))
    ux = 0.05 * rng.standard_normal((ny, nx))
    uy = 0.05 * rng.standard_normal((ny, nx))
    f = compute_equilibrium(rho, ux, uy)

    variants = {
        'numpy': stream_interior,
        'numba': stream_interior_fast,
        'numba_inplace': stream_interior_inplace,
    }

    results = {}
    for name, func in variants.items():
        g = f.copy()
        for _ in range(warmup_steps):
            g = func(g)

        start = time.perf_counter()
        for _ in range(num_steps):
            g = func(g)
        elapsed = time.perf_counter() - start

        results[name] = num_steps * nx * ny / elapsed / 1e6

    return results


def run_benchmarks(sizes=((128, 64), (256, 128), (512, 256)), num_steps=100):
    """Print a table of MLUPS for each grid size."""
    print(f"{'Grid':>12} {'NumPy':>10} {'Numba':>10} {'Speedup':>10}")
    print("-" * 46)

    for nx, ny in sizes:
        mlups_numpy = benchmark_fluid(nx, ny, num_steps, use_fast=False)
        mlups_numba = benchmark_fluid(nx, ny, num_steps, use_fast=True)
        speedup = mlups_numba / mlups_numpy if mlups_numpy > 0 else 0.0
        print(f"{nx:>5}x{ny:<6} {mlups_numpy:>10.2f} {mlups_numba:>10.2f} "
              f"{speedup:>9.1f}x")

    print("\nStreaming only:")
    for nx, ny in sizes:
        results = benchmark_streaming(nx, ny, num_steps)
        row = ", ".join(f"{name}: {mlups:.1f}" for name, mlups in results.items())
        print(f"  {nx}x{ny}: {row} MLUPS")


if __name__ == "__main__":
    run_benchmarks()
