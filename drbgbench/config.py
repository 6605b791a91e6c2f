from __future__ import annotations
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# ========= Defaults =========
# Every setting can be overridden from the environment (DRBG_*), and the CLI
# flags override the environment.
DEFAULT_BIT_LENGTHS = [10, 100, 1_000, 10_000, 100_000, 1_000_000, 10_000_000]


class Settings(BaseModel):
    bit_lengths: List[int] = Field(default_factory=lambda: list(DEFAULT_BIT_LENGTHS))
    seed_size: int = Field(48, ge=1, description="Seed bytes drawn from os.urandom")
    output_dir: Path = Path(".")
    log_level: str = "INFO"
    max_api_bits: int = Field(1_000_000, ge=1, description="Upper bound for /generate requests")
    reseed_interval: Optional[int] = Field(None, ge=1)

    @field_validator("bit_lengths")
    @classmethod
    def _non_negative(cls, v: List[int]) -> List[int]:
        if not v:
            raise ValueError("bit_lengths must not be empty")
        if any(b < 0 for b in v):
            raise ValueError("bit_lengths must be >= 0")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper()

    @property
    def csv_path(self) -> Path:
        return self.output_dir / "benchmark_results.csv"

    @property
    def html_path(self) -> Path:
        return self.output_dir / "visualization.html"

    @property
    def png_path(self) -> Path:
        return self.output_dir / "drbg_comparison.png"

    @property
    def svg_path(self) -> Path:
        return self.output_dir / "drbg_comparison.svg"


def parse_bit_lengths(raw: str) -> List[int]:
    return [int(float(x)) for x in raw.split(",") if x.strip()]


def get_settings(environ=None, **overrides) -> Settings:
    env = os.environ if environ is None else environ
    values = {}
    if env.get("DRBG_BIT_LENGTHS"):
        values["bit_lengths"] = parse_bit_lengths(env["DRBG_BIT_LENGTHS"])
    if env.get("DRBG_SEED_SIZE"):
        values["seed_size"] = env["DRBG_SEED_SIZE"]
    if env.get("DRBG_OUTPUT_DIR"):
        values["output_dir"] = env["DRBG_OUTPUT_DIR"]
    if env.get("DRBG_LOG_LEVEL"):
        values["log_level"] = env["DRBG_LOG_LEVEL"]
    if env.get("DRBG_MAX_API_BITS"):
        values["max_api_bits"] = env["DRBG_MAX_API_BITS"]
    if env.get("DRBG_RESEED_INTERVAL"):
        values["reseed_interval"] = env["DRBG_RESEED_INTERVAL"]
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
