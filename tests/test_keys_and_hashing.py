from __future__ import annotations

import math
from types import SimpleNamespace

import pytest
from hypothesis import given, strategies as st

import hashstudy.core.hashing as hashing
from hashstudy.contracts.error import BadInputError
from hashstudy.core.hashing import HashFunction, string_hash32
from hashstudy.core.keys import KEY_LIMIT, Key


def _reference_hash32(text: str) -> int:
    n = len(text)
    raw = sum(ord(ch) * 31 ** (n - 1 - i) for i, ch in enumerate(text)) % (1 << 32)
    return raw - (1 << 32) if raw >= (1 << 31) else raw


def test_key_renders_nine_digits_with_leading_zeros() -> None:
    assert str(Key(42)) == "000000042"
    assert str(Key(999_999_999)) == "999999999"


def test_key_equality_uses_numeric_value() -> None:
    assert Key.parse("000000042") == Key(42)
    assert len({Key(7), Key.parse("000000007")}) == 1


@pytest.mark.parametrize("text", ["42", "0000000042", "00000004a", "-00000042", "", "４２３４５６７８９"])
def test_key_parse_rejects_malformed_codes(text: str) -> None:
    with pytest.raises(BadInputError):
        Key.parse(text)


@pytest.mark.parametrize("value", [-1, KEY_LIMIT, True, 1.5])
def test_key_rejects_out_of_range_values(value: object) -> None:
    with pytest.raises(BadInputError):
        Key(value)  # type: ignore[arg-type]


def test_labels_are_stable() -> None:
    assert [fn.label for fn in HashFunction] == ["mod", "mult", "default"]
    assert HashFunction.from_label(" MULT ") is HashFunction.MULTIPLICATIVE
    with pytest.raises(BadInputError):
        HashFunction.from_label("crc32")


def test_modulo_hash() -> None:
    assert HashFunction.MODULO(Key(5), 10) == 5
    assert HashFunction.MODULO(Key(123_456_789), 1000) == 789


def test_multiplicative_hash_known_values() -> None:
    # frac(k * 0.6180339887...) * 10 for k = 0..3
    assert [HashFunction.MULTIPLICATIVE(Key(k), 10) for k in range(4)] == [0, 6, 2, 8]


def test_default_hash_matches_polynomial_reference() -> None:
    assert string_hash32("000000000") == -2_032_408_528
    assert string_hash32("000000000") == _reference_hash32("000000000")
    # Negative scalar hashes still land in range via floor modulo.
    assert HashFunction.DEFAULT(Key(0), 10) == 2


@pytest.mark.parametrize("hash_fn", list(HashFunction))
def test_hash_rejects_non_positive_capacity(hash_fn: HashFunction) -> None:
    with pytest.raises(ValueError):
        hash_fn(Key(1), 0)


@given(
    value=st.integers(0, KEY_LIMIT - 1),
    capacity=st.integers(1, 200_003),
    hash_fn=st.sampled_from(list(HashFunction)),
)
def test_every_hash_stays_in_range_and_is_deterministic(
    value: int, capacity: int, hash_fn: HashFunction
) -> None:
    key = Key(value)
    idx = hash_fn(key, capacity)
    assert 0 <= idx < capacity
    assert hash_fn(Key(value), capacity) == idx


@given(st.text(alphabet="0123456789", min_size=0, max_size=12))
def test_string_hash_matches_reference(text: str) -> None:
    assert string_hash32(text) == _reference_hash32(text)


@given(
    value=st.integers(KEY_LIMIT - 10_000, KEY_LIMIT - 1),
    capacity=st.integers(10**9, 10**15),
)
def test_multiplicative_hash_stays_below_huge_capacities(value: int, capacity: int) -> None:
    idx = HashFunction.MULTIPLICATIVE(Key(value), capacity)
    assert 0 <= idx < capacity


def test_multiplicative_hash_clamps_rounding_to_last_slot(monkeypatch: pytest.MonkeyPatch) -> None:
    # Simulate capacity * frac rounding up to capacity itself.
    monkeypatch.setattr(hashing, "math", SimpleNamespace(fmod=math.fmod, floor=lambda x: 17))
    assert hashing.multiplicative_index(Key(123), 17) == 16
