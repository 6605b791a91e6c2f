from pathlib import Path

import pytest
from pydantic import ValidationError

from drbgbench.config import DEFAULT_BIT_LENGTHS, get_settings, parse_bit_lengths


def test_defaults():
    s = get_settings(environ={})
    assert s.bit_lengths == DEFAULT_BIT_LENGTHS
    assert s.seed_size == 48
    assert s.output_dir == Path(".")
    assert s.log_level == "INFO"
    assert s.reseed_interval is None
    assert s.csv_path == Path("benchmark_results.csv")
    assert s.html_path == Path("visualization.html")


def test_environment_overrides():
    s = get_settings(environ={
        "DRBG_BIT_LENGTHS": "8, 1e3,64",
        "DRBG_SEED_SIZE": "32",
        "DRBG_OUTPUT_DIR": "/tmp/drbg",
        "DRBG_LOG_LEVEL": "debug",
        "DRBG_MAX_API_BITS": "4096",
        "DRBG_RESEED_INTERVAL": "10",
    })
    assert s.bit_lengths == [8, 1000, 64]
    assert s.seed_size == 32
    assert s.csv_path == Path("/tmp/drbg/benchmark_results.csv")
    assert s.log_level == "DEBUG"
    assert s.max_api_bits == 4096
    assert s.reseed_interval == 10


def test_explicit_overrides_beat_environment():
    s = get_settings(environ={"DRBG_SEED_SIZE": "32"}, seed_size=16, output_dir=None)
    assert s.seed_size == 16
    assert s.output_dir == Path(".")


def test_parse_bit_lengths():
    assert parse_bit_lengths("10,100,1e7") == [10, 100, 10_000_000]
    assert parse_bit_lengths("5,") == [5]


@pytest.mark.parametrize("overrides", [
    {"bit_lengths": []},
    {"bit_lengths": [10, -1]},
    {"seed_size": 0},
    {"reseed_interval": 0},
])
def test_invalid_settings(overrides):
    with pytest.raises(ValidationError):
        get_settings(environ={}, **overrides)
