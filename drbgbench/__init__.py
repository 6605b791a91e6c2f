"""Educational CTR-, Hash- and HMAC-DRBG implementations and a benchmark harness.

Not for production use: the primitives are pure Python, not constant time,
and CTR-DRBG runs over a toy cipher.
"""
from .drbg import (
    MECHANISMS, CtrDrbg, Drbg, HashDrbg, HmacDrbg, ReseedRequiredError,
    new_drbg, new_seed,
)
from .hmac_sha256 import HmacSha256, hmac_sha256
from .sha256 import Sha256, sha256

__version__ = "1.0.0"

__all__ = [
    "MECHANISMS", "CtrDrbg", "Drbg", "HashDrbg", "HmacDrbg", "ReseedRequiredError",
    "new_drbg", "new_seed", "HmacSha256", "hmac_sha256", "Sha256", "sha256",
]
