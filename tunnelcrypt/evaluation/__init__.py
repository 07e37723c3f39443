"""
Benchmarking tools for tunnelcrypt.
"""

from .benchmark import BenchmarkResult, CipherBenchmark, run_comprehensive_benchmark

__all__ = [
    'BenchmarkResult',
    'CipherBenchmark',
    'run_comprehensive_benchmark',
]
