from __future__ import annotations

from .sha256 import BLOCK_SIZE, DIGEST_SIZE, Sha256, sha256

_IPAD = 0x36
_OPAD = 0x5C


def _block_key(key: bytes) -> bytes:
    if len(key) > BLOCK_SIZE:
        key = sha256(key)
    return bytes(key) + b"\x00" * (BLOCK_SIZE - len(key))


class HmacSha256:
    """HMAC-SHA256 bound to one key.

    The inner and outer hash states are absorbed once per key, so every
    mac() call only hashes the message and the inner digest.
    """

    digest_size = DIGEST_SIZE

    def __init__(self, key: bytes):
        k = _block_key(key)
        self._inner = Sha256(bytes(b ^ _IPAD for b in k))
        self._outer = Sha256(bytes(b ^ _OPAD for b in k))

    def mac(self, data: bytes) -> bytes:
        inner = self._inner.copy()
        inner.update(data)
        outer = self._outer.copy()
        outer.update(inner.digest())
        return outer.digest()


def hmac_sha256(key: bytes, data: bytes) -> bytes:
    return HmacSha256(key).mac(data)
