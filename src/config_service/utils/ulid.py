"""
ULID identifiers: 26-character, lexicographically sortable, time-prefixed ids.

Layout (Crockford base32, 130 bits of which the top 2 are always zero):

    01ARZ3NDEK   TSV4RRFFQ69G5FAV
    |--------|   |--------------|
     48-bit ms     80-bit random
     timestamp

Ordering contract:
  - Ids from one `UlidGenerator` are strictly increasing. Within the same
    millisecond the random part of the previous id is incremented by one;
    if the wall clock steps backwards, the previous timestamp is reused.
  - Ids from different processes are ordered by their millisecond timestamp
    only; ties are broken by random bits.

Collision contract:
  - Two processes drawing in the same millisecond collide with probability
    about 2**-80. The database primary key is the final arbiter.
"""

import os
import re
import threading
import time

CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ULID_LENGTH = 26

_TIMESTAMP_BITS = 48
_RANDOM_BITS = 80
_MAX_TIMESTAMP = (1 << _TIMESTAMP_BITS) - 1
_MAX_RANDOM = (1 << _RANDOM_BITS) - 1

_ULID_RE = re.compile(rf"^[0-7][{CROCKFORD_ALPHABET}]{{25}}$")
_DECODE = {ch: idx for idx, ch in enumerate(CROCKFORD_ALPHABET)}


def _encode(value: int, length: int) -> str:
    chars = []
    for _ in range(length):
        value, rem = divmod(value, 32)
        chars.append(CROCKFORD_ALPHABET[rem])
    return "".join(reversed(chars))


def encode_ulid(timestamp_ms: int, randomness: int) -> str:
    """Encode a (timestamp, randomness) pair into its 26-character form."""
    if not 0 <= timestamp_ms <= _MAX_TIMESTAMP:
        raise ValueError(f"timestamp out of range: {timestamp_ms}")
    if not 0 <= randomness <= _MAX_RANDOM:
        raise ValueError("randomness out of range")
    return _encode((timestamp_ms << _RANDOM_BITS) | randomness, ULID_LENGTH)


def is_ulid(value: str) -> bool:
    return isinstance(value, str) and bool(_ULID_RE.match(value))


def ulid_timestamp(value: str) -> int:
    """Return the millisecond unix timestamp embedded in a ULID."""
    if not is_ulid(value):
        raise ValueError(f"not a ULID: {value!r}")
    number = 0
    for ch in value:
        number = number * 32 + _DECODE[ch]
    return number >> _RANDOM_BITS


class UlidGenerator:
    """
    Thread-safe monotonic ULID factory.

    `clock` returns milliseconds since the epoch and `entropy` returns n random
    bytes; both are injectable for tests.
    """

    def __init__(self, clock=None, entropy=None):
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._entropy = entropy or os.urandom
        self._lock = threading.Lock()
        self._last_timestamp = -1
        self._last_random = 0

    def __call__(self) -> str:
        return self.new()

    def new(self) -> str:
        with self._lock:
            timestamp = self._clock()
            if timestamp <= self._last_timestamp:
                # same millisecond (or clock went backwards): keep order
                timestamp = self._last_timestamp
                randomness = self._last_random + 1
                if randomness > _MAX_RANDOM:
                    raise OverflowError("ULID random component exhausted for this millisecond")
            else:
                randomness = int.from_bytes(self._entropy(_RANDOM_BITS // 8), "big")

            self._last_timestamp = timestamp
            self._last_random = randomness
            return encode_ulid(timestamp, randomness)


_default_generator = UlidGenerator()


def new_ulid() -> str:
    """Draw the next id from the process-wide generator."""
    return _default_generator.new()


__all__ = [
    "ULID_LENGTH",
    "UlidGenerator",
    "encode_ulid",
    "is_ulid",
    "new_ulid",
    "ulid_timestamp",
]
