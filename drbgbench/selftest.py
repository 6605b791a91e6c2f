from __future__ import annotations
import logging
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from .drbg import MECHANISMS
from .hmac_sha256 import hmac_sha256
from .sha256 import sha256

logger = logging.getLogger(__name__)

# FIPS 180-2 appendix B
SHA256_VECTORS = [
    (b"", "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"),
    (b"abc", "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
    (b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq",
     "248d6a61d20638b8e5c026930c3e6039a33ce45964ff2167f6ecedd419db06c1"),
]

# RFC 4231 test cases 1, 2 and 6 (short, very short and longer-than-block keys)
HMAC_VECTORS = [
    (b"\x0b" * 20, b"Hi There",
     "b0344c61d8db38535ca8afceaf0bf12b881dc200c9833da726e9376c2e32cff7"),
    (b"Jefe", b"what do ya want for nothing?",
     "5bdcc146bf60754e6a042426089575c75a003f089d2739839dec58b964ec3843"),
    (b"\xaa" * 131, b"Test Using Larger Than Block-Size Key - Hash Key First",
     "60e431591ee0b67f0d8a26aacbf5b77f8e0bc6213728c5140546040f0ee37f54"),
]


def reference_sha256(data: bytes) -> bytes:
    h = hashes.Hash(hashes.SHA256())
    h.update(data)
    return h.finalize()


def reference_hmac_sha256(key: bytes, data: bytes) -> bytes:
    h = crypto_hmac.HMAC(key, hashes.SHA256())
    h.update(data)
    return h.finalize()


def _kat_sha256() -> bool:
    return all(sha256(msg).hex() == want for msg, want in SHA256_VECTORS)


def _kat_hmac() -> bool:
    return all(hmac_sha256(key, msg).hex() == want for key, msg, want in HMAC_VECTORS)


def _cross_check(rounds: int) -> bool:
    # lengths straddle the 55/56/64-byte padding boundaries
    for n in (0, 1, 31, 55, 56, 63, 64, 65, 127, 200)[:max(rounds, 1)]:
        msg = os.urandom(n)
        key = os.urandom(32)
        if sha256(msg) != reference_sha256(msg):
            return False
        if hmac_sha256(key, msg) != reference_hmac_sha256(key, msg):
            return False
    return True


def _determinism(cls) -> bool:
    seed = os.urandom(48)
    a, b = cls(seed), cls(seed)
    return a.generate(1000) == b.generate(1000) and a.generate(77) == b.generate(77)


def run_selftest(rounds: int = 10) -> list[tuple[str, bool]]:
    checks = [
        ("SHA-256 known answers", _kat_sha256()),
        ("HMAC-SHA256 known answers (RFC 4231)", _kat_hmac()),
        ("cross-check against cryptography", _cross_check(rounds)),
    ]
    for cls in MECHANISMS:
        checks.append((f"{cls.NAME} determinism", _determinism(cls)))
    for name, ok in checks:
        logger.log(logging.INFO if ok else logging.ERROR, "selftest %s: %s", name, "ok" if ok else "FAILED")
    return checks
