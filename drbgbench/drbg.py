from __future__ import annotations
import logging
import os
from typing import Protocol, runtime_checkable

from .hmac_sha256 import HmacSha256
from .sha256 import DIGEST_SIZE, sha256
from .spn import BLOCK_SIZE as SPN_BLOCK, KEY_SIZE as SPN_KEY, SpnCipher

logger = logging.getLogger(__name__)

COUNTER_SIZE = 8  # reseed_counter is accounted as a 64-bit integer


class ReseedRequiredError(RuntimeError):
    """Raised by generate() once the configured reseed interval is used up."""


@runtime_checkable
class Drbg(Protocol):
    def generate(self, num_bits: int) -> bytes: ...

    def reseed(self, seed: bytes) -> None: ...

    def name(self) -> str: ...

    def state_size(self) -> int: ...


def add_be(buf: bytearray, value: bytes) -> None:
    """buf += value (mod 2**(8*len(buf))), both big-endian, in place.

    Only the low-order len(buf) bytes of a longer value take part.
    """
    carry = 0
    n = len(value)
    for i in range(1, len(buf) + 1):
        total = buf[-i] + carry
        if i <= n:
            total += value[-i]
        buf[-i] = total & 0xFF
        carry = total >> 8


def increment_be(buf: bytearray) -> None:
    for i in range(len(buf) - 1, -1, -1):
        buf[i] = (buf[i] + 1) & 0xFF
        if buf[i]:
            break


def _num_bytes(num_bits: int) -> int:
    if num_bits < 0:
        raise ValueError(f"num_bits must be >= 0, got {num_bits}")
    return (num_bits + 7) // 8


def _check_interval(drbg) -> None:
    if drbg.reseed_interval is not None and drbg.reseed_counter > drbg.reseed_interval:
        raise ReseedRequiredError(
            f"{drbg.name()}: reseed required after {drbg.reseed_interval} generate calls"
        )


class CtrDrbg:
    """Counter-mode DRBG over the toy SPN cipher (see drbgbench.spn).

    Output inherits the cipher's bit skew, so its ones ratio drifts a few
    percent from 0.5 where Hash-DRBG and HMAC-DRBG stay within 1%.
    """

    NAME = "CTR-DRBG"
    KEY_SIZE = SPN_KEY
    BLOCK_SIZE = SPN_BLOCK
    SEED_LENGTH = SPN_KEY + SPN_BLOCK

    def __init__(self, seed: bytes, reseed_interval: int | None = None):
        self.key = bytes(self.KEY_SIZE)
        self.counter = bytearray(self.BLOCK_SIZE)
        self.reseed_counter = 1
        self.reseed_interval = reseed_interval
        self._cipher = SpnCipher(self.key)
        self._update(seed)
        logger.debug("%s instantiated from %d-byte seed", self.NAME, len(seed))

    def _keystream(self, n: int) -> bytes:
        out = bytearray()
        encrypt = self._cipher.encrypt
        while len(out) < n:
            increment_be(self.counter)
            out += encrypt(self.counter)
        del out[n:]
        return bytes(out)

    def _update(self, provided_data: bytes = b"") -> None:
        temp = bytearray(self._keystream(self.SEED_LENGTH))
        for i, b in enumerate(provided_data[:self.SEED_LENGTH]):
            temp[i] ^= b
        self.key = bytes(temp[:self.KEY_SIZE])
        self.counter = temp[self.KEY_SIZE:]
        self._cipher = SpnCipher(self.key)

    def generate(self, num_bits: int) -> bytes:
        n = _num_bytes(num_bits)
        _check_interval(self)
        out = self._keystream(n)
        self._update()
        self.reseed_counter += 1
        return out

    def reseed(self, seed: bytes) -> None:
        self._update(seed)
        self.reseed_counter = 1
        logger.debug("%s reseeded with %d bytes", self.NAME, len(seed))

    def name(self) -> str:
        return self.NAME

    def state_size(self) -> int:
        return self.KEY_SIZE + self.BLOCK_SIZE + COUNTER_SIZE


def hash_df(input_string: bytes, no_of_bits: int) -> bytes:
    """SP 800-90A Hash_df over SHA-256."""
    no_of_bytes = (no_of_bits + 7) // 8
    bits = (no_of_bits & 0xFFFFFFFF).to_bytes(4, "big")
    temp = bytearray()
    counter = 1
    while len(temp) < no_of_bytes:
        temp += sha256(bytes([counter]) + bits + input_string)
        counter = (counter + 1) & 0xFF
    return bytes(temp[:no_of_bytes])


class HashDrbg:
    """SP 800-90A Hash_DRBG, SHA-256 profile (seedlen = 440 bits)."""

    NAME = "Hash-DRBG"
    SEED_LENGTH = 55
    OUTLEN = DIGEST_SIZE

    def __init__(self, seed: bytes, reseed_interval: int | None = None):
        self.reseed_interval = reseed_interval
        self._derive(seed)
        logger.debug("%s instantiated from %d-byte seed", self.NAME, len(seed))

    def _derive(self, seed_material: bytes) -> None:
        self.V = bytearray(hash_df(seed_material, self.SEED_LENGTH * 8))
        self.C = hash_df(b"\x00" + self.V, self.SEED_LENGTH * 8)
        self.reseed_counter = 1

    def _hashgen(self, requested_bits: int) -> bytes:
        m = (requested_bits + self.OUTLEN * 8 - 1) // (self.OUTLEN * 8)
        data = bytearray(self.V)
        W = bytearray()
        for _ in range(m):
            W += sha256(data)
            increment_be(data)
        del W[(requested_bits + 7) // 8:]
        return bytes(W)

    def generate(self, num_bits: int) -> bytes:
        _num_bytes(num_bits)
        _check_interval(self)
        returned = self._hashgen(num_bits)
        H = sha256(b"\x03" + self.V)
        add_be(self.V, H)
        add_be(self.V, self.C)
        add_be(self.V, self.reseed_counter.to_bytes(COUNTER_SIZE, "big"))
        self.reseed_counter += 1
        return returned

    def reseed(self, seed: bytes) -> None:
        self._derive(b"\x01" + self.V + seed)
        logger.debug("%s reseeded with %d bytes", self.NAME, len(seed))

    def name(self) -> str:
        return self.NAME

    def state_size(self) -> int:
        return len(self.V) + len(self.C) + COUNTER_SIZE


class HmacDrbg:
    """SP 800-90A HMAC_DRBG, HMAC-SHA256 profile."""

    NAME = "HMAC-DRBG"
    OUTLEN = DIGEST_SIZE

    def __init__(self, seed: bytes, reseed_interval: int | None = None):
        self.K = b"\x00" * self.OUTLEN
        self.V = b"\x01" * self.OUTLEN
        self.reseed_counter = 1
        self.reseed_interval = reseed_interval
        self._update(seed)
        logger.debug("%s instantiated from %d-byte seed", self.NAME, len(seed))

    def _update(self, provided_data: bytes = b"") -> None:
        self.K = HmacSha256(self.K).mac(self.V + b"\x00" + provided_data)
        self.V = HmacSha256(self.K).mac(self.V)
        if provided_data:
            self.K = HmacSha256(self.K).mac(self.V + b"\x01" + provided_data)
            self.V = HmacSha256(self.K).mac(self.V)

    def generate(self, num_bits: int) -> bytes:
        n = _num_bytes(num_bits)
        _check_interval(self)
        mac = HmacSha256(self.K).mac
        out = bytearray()
        while len(out) < n:
            self.V = mac(self.V)
            out += self.V
        del out[n:]
        self._update()
        self.reseed_counter += 1
        return bytes(out)

    def reseed(self, seed: bytes) -> None:
        self._update(seed)
        self.reseed_counter = 1
        logger.debug("%s reseeded with %d bytes", self.NAME, len(seed))

    def name(self) -> str:
        return self.NAME

    def state_size(self) -> int:
        return len(self.K) + len(self.V) + COUNTER_SIZE


MECHANISMS = (CtrDrbg, HashDrbg, HmacDrbg)

_ALIASES = {}
for _cls in MECHANISMS:
    _ALIASES[_cls.NAME.lower()] = _cls
    _ALIASES[_cls.NAME.split("-")[0].lower()] = _cls


def new_seed(size: int = 48) -> bytes:
    return os.urandom(size)


def mechanism_class(name: str):
    """Map a mechanism name or alias (ctr, hash, hmac) to its class."""
    try:
        return _ALIASES[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown DRBG mechanism: {name!r}") from None


def new_drbg(name: str = "hmac", seed: bytes | None = None, **kwargs):
    cls = mechanism_class(name)
    if seed is None:
        seed = new_seed()
    return cls(seed, **kwargs)
