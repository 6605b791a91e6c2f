"""
DRBG state machine tests.

Each mechanism is checked against an independent re-expression built on
hashlib/hmac (or on the cipher function for CTR-DRBG), and against the
generic properties every generator must satisfy.
"""
import hashlib
import hmac
import os

import pytest

from drbgbench.drbg import (
    MECHANISMS, CtrDrbg, Drbg, HashDrbg, HmacDrbg, ReseedRequiredError,
    add_be, hash_df, increment_be, mechanism_class, new_drbg, new_seed,
)
from drbgbench.spn import encrypt_block

SEED = bytes(range(48))


def snapshot(drbg):
    return tuple(
        (k, bytes(v) if isinstance(v, (bytes, bytearray)) else v)
        for k, v in sorted(vars(drbg).items())
        if not k.startswith("_") and k != "reseed_interval"
    )


# ---- references ----

class RefCtrDrbg:
    def __init__(self, seed):
        self.key = bytes(32)
        self.ctr = 0
        self._update(seed)

    def _blocks(self, n):
        out = b""
        while len(out) < n:
            self.ctr = (self.ctr + 1) % 2 ** 128
            out += encrypt_block(self.key, self.ctr.to_bytes(16, "big"))
        return out[:n]

    def _update(self, data):
        t = bytearray(self._blocks(48))
        for i, b in enumerate(data[:48]):
            t[i] ^= b
        self.key = bytes(t[:32])
        self.ctr = int.from_bytes(t[32:], "big")

    def generate(self, bits):
        out = self._blocks((bits + 7) // 8)
        self._update(b"")
        return out

    def reseed(self, seed):
        self._update(seed)


def ref_hash_df(data, bits):
    n = (bits + 7) // 8
    out = b""
    c = 1
    while len(out) < n:
        out += hashlib.sha256(bytes([c]) + bits.to_bytes(4, "big") + data).digest()
        c += 1
    return out[:n]


class RefHashDrbg:
    MOD = 2 ** 440

    def __init__(self, seed):
        self._derive(seed)

    def _derive(self, material):
        self.v = ref_hash_df(material, 440)
        self.c = ref_hash_df(b"\x00" + self.v, 440)
        self.rc = 1

    def generate(self, bits):
        v = int.from_bytes(self.v, "big")
        data = v
        out = b""
        for _ in range((bits + 255) // 256):
            out += hashlib.sha256(data.to_bytes(55, "big")).digest()
            data = (data + 1) % self.MOD
        h = int.from_bytes(hashlib.sha256(b"\x03" + self.v).digest(), "big")
        v = (v + h + int.from_bytes(self.c, "big") + self.rc) % self.MOD
        self.v = v.to_bytes(55, "big")
        self.rc += 1
        return out[:(bits + 7) // 8]

    def reseed(self, seed):
        self._derive(b"\x01" + self.v + seed)


class RefHmacDrbg:
    def __init__(self, seed):
        self.K = b"\x00" * 32
        self.V = b"\x01" * 32
        self._update(seed)

    def _hmac(self, key, data):
        return hmac.new(key, data, hashlib.sha256).digest()

    def _update(self, provided_data):
        self.K = self._hmac(self.K, self.V + b"\x00" + (provided_data or b""))
        self.V = self._hmac(self.K, self.V)
        if provided_data:
            self.K = self._hmac(self.K, self.V + b"\x01" + provided_data)
            self.V = self._hmac(self.K, self.V)

    def generate(self, bits):
        n = (bits + 7) // 8
        out = b""
        while len(out) < n:
            self.V = self._hmac(self.K, self.V)
            out += self.V
        self._update(None)
        return out[:n]

    def reseed(self, seed):
        self._update(seed)


REFERENCES = [(CtrDrbg, RefCtrDrbg), (HashDrbg, RefHashDrbg), (HmacDrbg, RefHmacDrbg)]


@pytest.mark.parametrize("cls, ref_cls", REFERENCES)
@pytest.mark.parametrize("seed", [b"", b"\x42", SEED, os.urandom(100)])
def test_matches_reference(cls, ref_cls, seed):
    drbg, ref = cls(seed), ref_cls(seed)
    for bits in (256, 10, 0, 1000, 513):
        assert drbg.generate(bits) == ref.generate(bits)
    drbg.reseed(b"fresh entropy")
    ref.reseed(b"fresh entropy")
    assert drbg.generate(777) == ref.generate(777)


# ---- generic properties ----

@pytest.mark.parametrize("cls", MECHANISMS)
def test_determinism(cls):
    seed = os.urandom(32)
    a, b = cls(seed), cls(seed)
    assert a.generate(1000) == b.generate(1000)
    assert a.generate(3) == b.generate(3)


@pytest.mark.parametrize("cls", MECHANISMS)
@pytest.mark.parametrize("bits", [0, 1, 7, 8, 9, 1_000_000])
def test_length_contract(cls, bits):
    assert len(cls(SEED).generate(bits)) == (bits + 7) // 8


@pytest.mark.parametrize("cls", MECHANISMS)
def test_zero_bits_is_empty_but_advances(cls):
    drbg = cls(SEED)
    before = snapshot(drbg)
    assert drbg.generate(0) == b""
    assert drbg.reseed_counter == 2
    assert snapshot(drbg) != before


@pytest.mark.parametrize("cls", MECHANISMS)
@pytest.mark.parametrize("bits", [1, 128, 256, 1000])
def test_generate_changes_state(cls, bits):
    drbg = cls(SEED)
    before = snapshot(drbg)
    drbg.generate(bits)
    assert snapshot(drbg) != before


@pytest.mark.parametrize("cls", MECHANISMS)
def test_state_widths_are_fixed(cls):
    drbg = cls(SEED)
    widths = [len(v) for _, v in snapshot(drbg) if isinstance(v, bytes)]
    for bits in (0, 5, 4096):
        drbg.generate(bits)
    drbg.reseed(os.urandom(200))
    assert [len(v) for _, v in snapshot(drbg) if isinstance(v, bytes)] == widths


@pytest.mark.parametrize("cls", MECHANISMS)
def test_successive_outputs_differ(cls):
    drbg = cls(SEED)
    assert drbg.generate(256) != drbg.generate(256)


@pytest.mark.parametrize("cls", MECHANISMS)
def test_shorter_request_is_prefix_of_longer(cls):
    assert cls(SEED).generate(1000) == cls(SEED).generate(4000)[:125]


@pytest.mark.parametrize("cls", MECHANISMS)
def test_reseed_changes_trajectory(cls):
    a, b = cls(b"seed one"), cls(b"seed one")
    a.generate(256)
    b.generate(256)
    b.reseed(b"seed two")
    assert a.generate(256) != b.generate(256)


@pytest.mark.parametrize("cls", MECHANISMS)
def test_reseed_counter_lifecycle(cls):
    drbg = cls(SEED)
    assert drbg.reseed_counter == 1
    for expected in (2, 3, 4):
        drbg.generate(64)
        assert drbg.reseed_counter == expected
    drbg.reseed(b"")
    assert drbg.reseed_counter == 1


@pytest.mark.parametrize("cls", MECHANISMS)
def test_different_seeds_differ(cls):
    assert cls(b"a").generate(256) != cls(b"b").generate(256)


@pytest.mark.parametrize("cls, expected", [(HashDrbg, 499_751), (HmacDrbg, 500_103)])
def test_bit_balance(cls, expected):
    data = cls(SEED).generate(1_000_000)
    ones = int.from_bytes(data, "big").bit_count()
    assert ones == expected
    assert abs(ones / 1_000_000 - 0.5) < 0.01


def test_ctr_bit_count_is_skewed_by_toy_cipher():
    # the SPN cipher is not balanced; 1e6 bits land anywhere in roughly 47..55% ones
    data = CtrDrbg(SEED).generate(1_000_000)
    ones = int.from_bytes(data, "big").bit_count()
    assert ones == 525_218
    assert abs(ones / 1_000_000 - 0.5) < 0.05


# ---- known answers (seed = bytes(range(48))) ----

@pytest.mark.parametrize("cls, bits, expected", [
    (CtrDrbg, 256, "a6e07ee6414c28179fb2e60473a6e07ea6e07ee65d4c18cad4fba7abbda6e07e"),
    (HashDrbg, 256, "48f1bd755b6b0625155a440483340d86901795fb5f804e0e5e2720d8c1692912"),
    (HmacDrbg, 256, "0ffb80875a3e9022a4941a3fa1b0d3611df14e1cf651a73ce9229b9f3ad56887"),
])
def test_known_answer(cls, bits, expected):
    assert cls(SEED).generate(bits).hex() == expected


def test_known_answer_ctr_empty_seed():
    assert CtrDrbg(b"").generate(128).hex() == "dddddddd4d1f46d724dc1ce72cdddddd"


def test_known_answer_ctr_after_reseed():
    drbg = CtrDrbg(SEED)
    drbg.generate(256)
    drbg.reseed(b"\x01\x02\x03")
    assert drbg.generate(513).hex() == (
        "637530434886033369442731da6375306375304371824408babbe2951663753063"
        "753043f1d88441bc5f2ed10f63753063753043537e3d2e209188219763753063"
    )


@pytest.mark.parametrize("cls, name, size", [
    (CtrDrbg, "CTR-DRBG", 56),
    (HashDrbg, "Hash-DRBG", 118),
    (HmacDrbg, "HMAC-DRBG", 72),
])
def test_name_and_state_size(cls, name, size):
    drbg = cls(SEED)
    assert isinstance(drbg, Drbg)
    assert drbg.name() == name
    assert drbg.state_size() == size
    drbg.generate(100)
    assert drbg.state_size() == size


@pytest.mark.parametrize("cls", MECHANISMS)
def test_negative_bits_rejected(cls):
    drbg = cls(SEED)
    before = snapshot(drbg)
    with pytest.raises(ValueError):
        drbg.generate(-1)
    assert snapshot(drbg) == before


@pytest.mark.parametrize("cls", MECHANISMS)
def test_reseed_interval_policy(cls):
    drbg = cls(SEED, reseed_interval=2)
    drbg.generate(8)
    drbg.generate(8)
    before = snapshot(drbg)
    with pytest.raises(ReseedRequiredError):
        drbg.generate(8)
    assert snapshot(drbg) == before
    drbg.reseed(b"more")
    assert len(drbg.generate(8)) == 1


# ---- helpers ----

def test_add_be_wraps_around():
    buf = bytearray(b"\xff" * 55)
    add_be(buf, b"\x01")
    assert buf == bytearray(55)

    buf = bytearray(b"\xff" * 4)
    add_be(buf, b"\x00\x00\x00\x02")
    assert buf == bytearray(b"\x00\x00\x00\x01")


def test_add_be_carries_and_keeps_width():
    buf = bytearray(b"\x00\x00\xff\xff")
    add_be(buf, b"\x01")
    assert buf == bytearray(b"\x00\x01\x00\x00")
    assert len(buf) == 4


def test_add_be_uses_low_bytes_of_longer_addend():
    buf = bytearray(b"\x00\x01")
    add_be(buf, b"\x99\x99\x00\x01")
    assert buf == bytearray(b"\x00\x02")


def test_add_be_matches_integer_arithmetic():
    a, b = os.urandom(55), os.urandom(32)
    buf = bytearray(a)
    add_be(buf, b)
    want = (int.from_bytes(a, "big") + int.from_bytes(b, "big")) % 2 ** 440
    assert int.from_bytes(buf, "big") == want


def test_increment_be():
    buf = bytearray(b"\x00\xff")
    increment_be(buf)
    assert buf == bytearray(b"\x01\x00")
    buf = bytearray(b"\xff" * 16)
    increment_be(buf)
    assert buf == bytearray(16)


def test_hash_df():
    data = b"input"
    assert hash_df(data, 256) == hashlib.sha256(b"\x01" + (256).to_bytes(4, "big") + data).digest()
    assert len(hash_df(data, 440)) == 55
    assert len(hash_df(data, 1)) == 1
    assert hash_df(data, 0) == b""
    assert hash_df(data, 440) == ref_hash_df(data, 440)


def test_ctr_counter_wraps():
    drbg = CtrDrbg(SEED)
    drbg.counter = bytearray(b"\xff" * 16)
    ref = RefCtrDrbg(SEED)
    ref.key = drbg.key
    ref.ctr = 2 ** 128 - 1
    assert drbg.generate(256) == ref.generate(256)


# ---- factory ----

@pytest.mark.parametrize("alias, cls", [
    ("ctr", CtrDrbg), ("CTR-DRBG", CtrDrbg),
    ("hash", HashDrbg), ("hash-drbg", HashDrbg),
    ("HMAC", HmacDrbg), ("HMAC-DRBG", HmacDrbg),
])
def test_new_drbg_aliases(alias, cls):
    assert isinstance(new_drbg(alias, SEED), cls)


def test_new_drbg_unknown():
    with pytest.raises(ValueError):
        new_drbg("aes-ctr", SEED)
    with pytest.raises(ValueError, match="aes-ctr"):
        mechanism_class("aes-ctr")
    assert mechanism_class("Ctr") is CtrDrbg


def test_new_drbg_random_seed():
    a, b = new_drbg("hmac"), new_drbg("hmac")
    assert a.generate(128) != b.generate(128)


def test_new_seed():
    assert len(new_seed()) == 48
    assert len(new_seed(16)) == 16
