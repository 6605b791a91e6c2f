from __future__ import annotations
import csv
import logging
import statistics as stats
import time
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "DRBG", "NumBits", "GenerationTimeUs", "StateSize", "OutputSize",
    "Zeros", "Ones", "Ratio", "Bias", "BitsPerMicrosecond",
]


@dataclass
class BenchmarkResult:
    drbg_name: str
    num_bits: int
    generation_time_us: float
    state_size: int
    output_size: int
    count_zeros: int
    count_ones: int
    ratio: float
    bias: float
    bits_per_microsecond: float


def timeit(fn, *args, **kwargs):
    t0 = time.perf_counter()
    res = fn(*args, **kwargs)
    t1 = time.perf_counter()
    return res, (t1 - t0)


def count_bits(data: bytes, num_bits: int) -> tuple[int, int]:
    """(zeros, ones) over the first num_bits bits of data, MSB first."""
    num_bits = min(num_bits, len(data) * 8)
    full, rest = divmod(num_bits, 8)
    ones = int.from_bytes(data[:full], "big").bit_count() if full else 0
    if rest:
        ones += (data[full] >> (8 - rest)).bit_count()
    return num_bits - ones, ones


def run(drbg, num_bits: int) -> BenchmarkResult:
    data, dt = timeit(drbg.generate, num_bits)
    elapsed_us = dt * 1e6
    zeros, ones = count_bits(data, num_bits)
    return BenchmarkResult(
        drbg_name=drbg.name(),
        num_bits=num_bits,
        generation_time_us=elapsed_us,
        state_size=drbg.state_size(),
        output_size=len(data),
        count_zeros=zeros,
        count_ones=ones,
        ratio=ones / zeros if zeros > 0 else 0.0,
        bias=abs(0.5 - ones / num_bits) if num_bits else 0.0,
        bits_per_microsecond=num_bits / elapsed_us if elapsed_us > 0 else 0.0,
    )


def run_suite(drbgs, bit_lengths, seed: bytes, progress=None) -> list[BenchmarkResult]:
    """Benchmark every generator over every length.

    Each generator is reseeded with the shared seed before its run so the
    mechanisms start from comparable states.
    """
    results = []
    total = len(drbgs) * len(bit_lengths)
    current = 0
    for drbg in drbgs:
        drbg.reseed(seed)
        for bits in bit_lengths:
            current += 1
            if progress:
                progress(drbg.name(), bits, current, total)
            r = run(drbg, bits)
            logger.debug("%s %d bits: %.2f us", r.drbg_name, bits, r.generation_time_us)
            results.append(r)
    return results


def summarize(results: list[BenchmarkResult]) -> list[dict]:
    def m(x): return stats.mean(x) if x else 0.0

    by_name: dict[str, list[BenchmarkResult]] = {}
    for r in results:
        by_name.setdefault(r.drbg_name, []).append(r)

    summaries = []
    for name, rs in by_name.items():
        largest = max(rs, key=lambda r: r.num_bits)
        summaries.append({
            "drbg": name,
            "state_size": rs[0].state_size,
            "total_time_ms": sum(r.generation_time_us for r in rs) / 1000,
            "avg_bias_pct": m([r.bias for r in rs]) * 100,
            "max_throughput": max(r.bits_per_microsecond for r in rs),
            "largest_bits": largest.num_bits,
            "largest_time_ms": largest.generation_time_us / 1000,
        })
    return summaries


def _row(r: BenchmarkResult) -> dict:
    return {
        "DRBG": r.drbg_name,
        "NumBits": r.num_bits,
        "GenerationTimeUs": f"{r.generation_time_us:.2f}",
        "StateSize": r.state_size,
        "OutputSize": r.output_size,
        "Zeros": r.count_zeros,
        "Ones": r.count_ones,
        "Ratio": f"{r.ratio:.6f}",
        "Bias": f"{r.bias:.8f}",
        "BitsPerMicrosecond": f"{r.bits_per_microsecond:.2f}",
    }


def export_csv(results: list[BenchmarkResult], path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for r in results:
            writer.writerow(_row(r))
    logger.info("CSV data saved to %s", path)
    return path


def load_csv(path) -> list[BenchmarkResult]:
    types = [f.type for f in fields(BenchmarkResult)]
    casts = {"str": str, "int": int, "float": float}
    results = []
    with open(path, newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            values = [casts[t](row[col]) for t, col in zip(types, CSV_FIELDS)]
            results.append(BenchmarkResult(*values))
    return results
