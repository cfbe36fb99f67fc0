import itertools
import re
import time

import pytest

from config_service.utils.ulid import (
    CROCKFORD_ALPHABET,
    ULID_LENGTH,
    UlidGenerator,
    encode_ulid,
    is_ulid,
    new_ulid,
    ulid_timestamp,
)

ULID_RE = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")


def fixed_entropy(value: int):
    return lambda n: value.to_bytes(n, "big")


class TestEncoding:

    def test_alphabet_excludes_ambiguous_letters(self):
        assert len(CROCKFORD_ALPHABET) == 32
        assert not set("ILOU") & set(CROCKFORD_ALPHABET)

    def test_zero(self):
        assert encode_ulid(0, 0) == "0" * ULID_LENGTH

    def test_max(self):
        assert encode_ulid((1 << 48) - 1, (1 << 80) - 1) == "7" + "Z" * 25

    def test_timestamp_round_trips(self):
        ts = 1_700_000_000_123
        assert ulid_timestamp(encode_ulid(ts, 12345)) == ts

    @pytest.mark.parametrize("ts,rand", [(-1, 0), (1 << 48, 0), (0, -1), (0, 1 << 80)])
    def test_out_of_range(self, ts, rand):
        with pytest.raises(ValueError):
            encode_ulid(ts, rand)

    def test_later_timestamp_sorts_later(self):
        assert encode_ulid(1000, (1 << 80) - 1) < encode_ulid(1001, 0)


class TestIsUlid:

    def test_generated_ids_are_valid(self):
        value = new_ulid()
        assert len(value) == ULID_LENGTH
        assert ULID_RE.match(value)
        assert is_ulid(value)

    @pytest.mark.parametrize("value", ["", "0" * 25, "0" * 27, "8" + "0" * 25, "0" * 25 + "U", None, 42])
    def test_rejects(self, value):
        assert not is_ulid(value)

    def test_ulid_timestamp_rejects_garbage(self):
        with pytest.raises(ValueError):
            ulid_timestamp("not-a-ulid")


class TestGenerator:

    def test_timestamp_comes_from_clock(self):
        generator = UlidGenerator(clock=lambda: 1_234_567, entropy=fixed_entropy(7))
        assert ulid_timestamp(generator.new()) == 1_234_567

    def test_same_millisecond_increments_randomness(self):
        generator = UlidGenerator(clock=lambda: 5000, entropy=fixed_entropy(10))
        first, second = generator.new(), generator()
        assert first == encode_ulid(5000, 10)
        assert second == encode_ulid(5000, 11)

    def test_clock_going_backwards_keeps_order(self):
        ticks = iter([5000, 4000])
        generator = UlidGenerator(clock=lambda: next(ticks), entropy=fixed_entropy(3))
        first, second = generator.new(), generator.new()
        assert second > first
        assert ulid_timestamp(second) == 5000

    def test_new_millisecond_draws_fresh_entropy(self):
        ticks = iter([1, 2])
        draws = itertools.count(100)
        generator = UlidGenerator(clock=lambda: next(ticks), entropy=lambda n: next(draws).to_bytes(n, "big"))
        assert generator.new() == encode_ulid(1, 100)
        assert generator.new() == encode_ulid(2, 101)

    def test_overflow_within_one_millisecond(self):
        generator = UlidGenerator(clock=lambda: 1, entropy=fixed_entropy((1 << 80) - 1))
        generator.new()
        with pytest.raises(OverflowError):
            generator.new()

    def test_default_generator_is_strictly_increasing(self):
        ids = [new_ulid() for _ in range(500)]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_timestamp_is_close_to_now(self):
        now_ms = time.time_ns() // 1_000_000
        assert abs(ulid_timestamp(new_ulid()) - now_ms) < 60_000
