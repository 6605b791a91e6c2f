from __future__ import annotations
import struct

DIGEST_SIZE = 32
BLOCK_SIZE = 64

_MASK32 = 0xFFFFFFFF

_K = (
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5, 0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3, 0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc, 0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7, 0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13, 0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3, 0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5, 0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208, 0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2,
)

_H0 = (
    0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
    0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19,
)


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK32


def _compress(h: list[int], block: bytes) -> None:
    w = list(struct.unpack(">16L", block))
    for i in range(16, 64):
        x = w[i - 15]
        y = w[i - 2]
        g0 = _rotr(x, 7) ^ _rotr(x, 18) ^ (x >> 3)
        g1 = _rotr(y, 17) ^ _rotr(y, 19) ^ (y >> 10)
        w.append((g1 + w[i - 7] + g0 + w[i - 16]) & _MASK32)

    a, b, c, d, e, f, g, hh = h
    for i in range(64):
        s1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        t1 = (hh + s1 + ch + _K[i] + w[i]) & _MASK32
        s0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = (s0 + maj) & _MASK32
        hh = g
        g = f
        f = e
        e = (d + t1) & _MASK32
        d = c
        c = b
        b = a
        a = (t1 + t2) & _MASK32

    for i, v in enumerate((a, b, c, d, e, f, g, hh)):
        h[i] = (h[i] + v) & _MASK32


class Sha256:
    """Incremental SHA-256 (FIPS 180-4), hashlib-style: update/digest/copy."""

    digest_size = DIGEST_SIZE
    block_size = BLOCK_SIZE

    def __init__(self, data: bytes = b""):
        self._h = list(_H0)
        self._buf = b""
        self._length = 0
        if data:
            self.update(data)

    def update(self, data: bytes) -> None:
        self._length += len(data)
        buf = self._buf + bytes(data)
        full = len(buf) - len(buf) % BLOCK_SIZE
        for off in range(0, full, BLOCK_SIZE):
            _compress(self._h, buf[off:off + BLOCK_SIZE])
        self._buf = buf[full:]

    def copy(self) -> Sha256:
        other = Sha256.__new__(Sha256)
        other._h = list(self._h)
        other._buf = self._buf
        other._length = self._length
        return other

    def digest(self) -> bytes:
        # padding is applied to a copy so the object can keep absorbing data
        h = list(self._h)
        bit_len = (self._length * 8) & 0xFFFFFFFFFFFFFFFF
        tail = self._buf + b"\x80"
        tail += b"\x00" * ((56 - len(tail)) % BLOCK_SIZE)
        tail += struct.pack(">Q", bit_len)
        for off in range(0, len(tail), BLOCK_SIZE):
            _compress(h, tail[off:off + BLOCK_SIZE])
        return struct.pack(">8L", *h)

    def hexdigest(self) -> str:
        return self.digest().hex()


def sha256(data: bytes) -> bytes:
    return Sha256(data).digest()
