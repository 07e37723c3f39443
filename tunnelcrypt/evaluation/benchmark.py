"""
Benchmark module for per-cipher datagram throughput.

Measures encryption and decryption time, padding overhead and memory use
for every registered cipher across a range of datagram sizes.
"""

import gc
import logging
import os
import statistics
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import psutil

from ..crypto.kdf import derive_key
from ..crypto.registry import require_cipher, supported_ciphers
from ..crypto.transform import datagram_decrypt, datagram_encrypt

logger = logging.getLogger(__name__)

BENCHMARK_PASSPHRASE = "tunnelcrypt-benchmark"


@dataclass
class BenchmarkResult:
    """Container for benchmark results."""
    name: str
    cipher: str
    operation: str
    message_size: int
    iterations: int
    total_time: float
    avg_time: float
    throughput_mbps: float
    padded_size: int
    overhead_bytes: int
    overhead_percent: float
    memory_usage: Optional[Dict[str, float]] = None


class CipherBenchmark:
    """
    Throughput benchmarking for the datagram transform engine.
    """

    def __init__(self, passphrase: str = BENCHMARK_PASSPHRASE):
        self.passphrase = passphrase
        self.results: List[BenchmarkResult] = []

    def measure_memory_usage(self) -> Dict[str, float]:
        """
        Measure current memory usage.

        Returns:
            Dictionary with memory statistics in MB
        """
        process = psutil.Process()
        memory_info = process.memory_info()

        return {
            'rss': memory_info.rss / 1024 / 1024,
            'vms': memory_info.vms / 1024 / 1024,
            'percent': process.memory_percent()
        }

    def benchmark_cipher(self, cipher_name: str, message_sizes: List[int],
                         iterations: int = 1000) -> List[BenchmarkResult]:
        """
        Benchmark encryption and decryption of one cipher.

        Args:
            cipher_name: Registered cipher name
            message_sizes: Plaintext sizes to test
            iterations: Datagrams per size

        Returns:
            Two results per size, one for each direction
        """
        if iterations <= 0:
            raise ValueError("Iterations must be positive")

        cipher = require_cipher(cipher_name)
        key = derive_key(self.passphrase, cipher.key_length)
        results = []

        for size in message_sizes:
            plaintext = os.urandom(size)
            gc.collect()
            memory_before = self.measure_memory_usage()

            start = time.perf_counter()
            for _ in range(iterations):
                ciphertext = datagram_encrypt(key, cipher, plaintext)
            encrypt_time = time.perf_counter() - start

            start = time.perf_counter()
            for _ in range(iterations):
                datagram_decrypt(key, cipher, ciphertext)
            decrypt_time = time.perf_counter() - start

            memory_after = self.measure_memory_usage()
            memory_delta = {
                'rss_delta': memory_after['rss'] - memory_before['rss'],
                'vms_delta': memory_after['vms'] - memory_before['vms']
            }

            padded_size = len(ciphertext)
            overhead = padded_size - size
            overhead_percent = (overhead / size) * 100 if size else 0.0

            for operation, total_time in (('encrypt', encrypt_time), ('decrypt', decrypt_time)):
                # Guard against a zero timer delta on very small runs
                total_time = max(total_time, 1e-9)
                result = BenchmarkResult(
                    name=f"{operation}-{cipher.name}-{size}B",
                    cipher=cipher.name,
                    operation=operation,
                    message_size=size,
                    iterations=iterations,
                    total_time=total_time,
                    avg_time=total_time / iterations,
                    throughput_mbps=(padded_size * iterations) / total_time / 1024 / 1024,
                    padded_size=padded_size,
                    overhead_bytes=overhead,
                    overhead_percent=overhead_percent,
                    memory_usage=memory_delta,
                )
                results.append(result)
                self.results.append(result)

            logger.debug(f"{cipher.name} {size}B: encrypt {encrypt_time:.4f}s, "
                         f"decrypt {decrypt_time:.4f}s over {iterations} datagrams")

        return results

    def compare_ciphers(self, message_sizes: List[int], iterations: int = 1000,
                        ciphers: Optional[List[str]] = None) -> Dict[str, List[BenchmarkResult]]:
        """
        Benchmark several ciphers on the same sizes.

        Returns:
            Results keyed by cipher name
        """
        if ciphers is None:
            ciphers = supported_ciphers()

        comparison = {}
        for name in ciphers:
            logger.info(f"Benchmarking {name}...")
            comparison[name] = self.benchmark_cipher(name, message_sizes, iterations)
        return comparison

    def get_summary_report(self) -> Dict[str, Any]:
        """
        Summarize all results collected so far.

        Returns:
            Per-cipher averages and maxima
        """
        if not self.results:
            return {'error': 'No benchmark results available'}

        by_cipher: Dict[str, List[BenchmarkResult]] = {}
        for result in self.results:
            by_cipher.setdefault(result.cipher, []).append(result)

        summary = {
            'total_benchmarks': len(self.results),
            'ciphers_tested': list(by_cipher.keys()),
            'by_cipher': {}
        }

        for cipher, results in by_cipher.items():
            throughputs = [r.throughput_mbps for r in results]
            latencies = [r.avg_time for r in results]

            summary['by_cipher'][cipher] = {
                'benchmark_count': len(results),
                'avg_throughput_mbps': statistics.mean(throughputs),
                'max_throughput_mbps': max(throughputs),
                'avg_latency_ms': statistics.mean(latencies) * 1000,
                'min_latency_ms': min(latencies) * 1000,
                'avg_overhead_percent': statistics.mean(r.overhead_percent for r in results),
                'message_sizes_tested': sorted(set(r.message_size for r in results))
            }

        return summary


def run_comprehensive_benchmark(quick: bool = False,
                                ciphers: Optional[List[str]] = None,
                                sizes: Optional[List[int]] = None,
                                iterations: Optional[int] = None) -> Dict[str, Any]:
    """
    Run the benchmark over every cipher.

    Args:
        quick: If True, run reduced test set for faster execution
        ciphers: Cipher names to test (default: all registered)
        sizes: Message sizes to test, overriding the quick/full default
        iterations: Datagrams per size, overriding the quick/full default

    Returns:
        Summary, per-cipher comparison and raw results
    """
    benchmark = CipherBenchmark()

    if quick:
        message_sizes = [64, 512, 1400]
        default_iterations = 100
    else:
        message_sizes = [1, 32, 64, 128, 256, 512, 1024, 1400, 4096]
        default_iterations = 1000

    if sizes is not None:
        message_sizes = list(sizes)
    if iterations is None:
        iterations = default_iterations

    logger.info("Running comprehensive tunnelcrypt benchmark...")
    comparison = benchmark.compare_ciphers(message_sizes, iterations, ciphers)

    return {
        'summary': benchmark.get_summary_report(),
        'cipher_comparison': comparison,
        'raw_results': benchmark.results
    }
