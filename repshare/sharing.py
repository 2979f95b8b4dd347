"""Replicated three-party secret sharing: channels, correlated randomness and share containers."""

from __future__ import annotations

import copy
import queue
from dataclasses import dataclass, field

import numpy as np

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_WORD_BITS = 64


def _wrap(value: int) -> int:
    """Reduce an integer to the signed 64-bit range, wrapping like two's complement."""
    return ((int(value) - _I64_MIN) % (1 << 64)) + _I64_MIN


def _words(bits: int) -> int:
    return (bits + _WORD_BITS - 1) // _WORD_BITS


@dataclass
class Channel:
    """One end of a point-to-point link between two parties."""

    inbox: queue.Queue
    outbox: queue.Queue
    timeout: float | None = None

    def send(self, value):
        """Send a private copy of ``value`` to the peer."""
        self.outbox.put(copy.deepcopy(value))

    def recv(self):
        """Receive the next value from the peer, raising TimeoutError if none arrives."""
        try:
            return self.inbox.get(timeout=self.timeout)
        except queue.Empty:
            raise TimeoutError("no message arrived on the channel") from None


@dataclass
class CommPkg:
    """The two channels a party holds: to the previous and to the next party."""

    prev: Channel
    next: Channel


def connect_parties():
    """Build connected communication packages for parties 0, 1 and 2."""
    links = {(i, j): queue.Queue() for i in range(3) for j in range(3) if i != j}
    comms = []
    for i in range(3):
        prev_idx, next_idx = (i + 2) % 3, (i + 1) % 3
        comms.append(
            CommPkg(
                prev=Channel(inbox=links[(prev_idx, i)], outbox=links[(i, prev_idx)]),
                next=Channel(inbox=links[(next_idx, i)], outbox=links[(i, next_idx)]),
            )
        )
    return tuple(comms)


def _draw(gen: np.random.Generator, count: int) -> np.ndarray:
    return gen.integers(_I64_MIN, _I64_MAX, size=count, dtype=np.int64, endpoint=True)


class ShareGen:
    """Randomness shared pairwise with the neighbouring parties.

    The generator seeded with ``next_seed`` agrees with the next party's
    ``prev_seed`` generator, which makes zero-sharings and replicated random
    sharings possible without communication.
    """

    def __init__(self, prev_seed, next_seed):
        self._prev = np.random.Generator(np.random.PCG64(prev_seed))
        self._next = np.random.Generator(np.random.PCG64(next_seed))

    def next_common_ints(self, count):
        """Values common with the next party."""
        return _draw(self._next, count)

    def prev_common_ints(self, count):
        """Values common with the previous party."""
        return _draw(self._prev, count)

    def _pair(self) -> tuple[int, int]:
        return int(_draw(self._next, 1)[0]), int(_draw(self._prev, 1)[0])

    def get_share(self):
        """An additive share of zero: the three parties' values sum to 0 mod 2^64."""
        n, p = self._pair()
        return _wrap(n - p)

    def get_binary_share(self):
        """An XOR share of zero."""
        n, p = self._pair()
        return n ^ p

    def get_rand_int_share(self):
        """A replicated additive sharing of a random value."""
        n, p = self._pair()
        return SharedInt([n, p])

    def get_rand_binary_share(self):
        """A replicated XOR sharing of a random value."""
        n, p = self._pair()
        return SharedBinary([n, p])


def _check_pair(shares) -> list[int]:
    values = [_wrap(v) for v in shares]
    if len(values) != 2:
        raise ValueError("a replicated share holds exactly two values")
    return values


@dataclass
class SharedInt:
    """A party's two components of an additively shared 64-bit integer."""

    shares: list[int] = field(default_factory=lambda: [0, 0])

    def __post_init__(self):
        self.shares = _check_pair(self.shares)

    def __getitem__(self, i):
        return self.shares[i]

    def __setitem__(self, i, value):
        self.shares[i] = _wrap(value)

    def __add__(self, other):
        if not isinstance(other, SharedInt):
            return NotImplemented
        return SharedInt([a + b for a, b in zip(self.shares, other.shares)])

    def __sub__(self, other):
        if not isinstance(other, SharedInt):
            return NotImplemented
        return SharedInt([a - b for a, b in zip(self.shares, other.shares)])


@dataclass
class SharedBinary:
    """A party's two components of an XOR-shared 64-bit word."""

    shares: list[int] = field(default_factory=lambda: [0, 0])

    def __post_init__(self):
        self.shares = _check_pair(self.shares)

    def __getitem__(self, i):
        return self.shares[i]

    def __setitem__(self, i, value):
        self.shares[i] = _wrap(value)

    def __xor__(self, other):
        if not isinstance(other, SharedBinary):
            return NotImplemented
        return SharedBinary([a ^ b for a, b in zip(self.shares, other.shares)])


def _as_share_arrays(shares) -> tuple[np.ndarray, np.ndarray]:
    if len(shares) != 2:
        raise ValueError("a replicated share holds exactly two matrices")
    s0, s1 = (np.array(s, dtype=np.int64) for s in shares)
    if s0.ndim != 2 or s0.shape != s1.shape:
        raise ValueError("share matrices must be two-dimensional and of equal shape")
    return s0, s1


@dataclass(eq=False)
class SharedIntMatrix:
    """A party's two components of an additively shared integer matrix."""

    shares: tuple

    def __post_init__(self):
        self.shares = _as_share_arrays(self.shares)

    @classmethod
    def zeros(cls, rows, cols):
        z = np.zeros((rows, cols), dtype=np.int64)
        return cls((z, z.copy()))

    @property
    def rows(self) -> int:
        return self.shares[0].shape[0]

    @property
    def cols(self) -> int:
        return self.shares[0].shape[1]

    @property
    def size(self) -> int:
        return self.shares[0].size

    def __getitem__(self, i):
        return self.shares[i]

    def _check(self, other):
        if self.shares[0].shape != other.shares[0].shape:
            raise ValueError("matrix shapes differ")

    def __add__(self, other):
        if not isinstance(other, SharedIntMatrix):
            return NotImplemented
        self._check(other)
        return SharedIntMatrix(tuple(a + b for a, b in zip(self.shares, other.shares)))

    def __sub__(self, other):
        if not isinstance(other, SharedIntMatrix):
            return NotImplemented
        self._check(other)
        return SharedIntMatrix(tuple(a - b for a, b in zip(self.shares, other.shares)))

    def __eq__(self, other):
        if not isinstance(other, SharedIntMatrix):
            return NotImplemented
        return all(np.array_equal(a, b) for a, b in zip(self.shares, other.shares))


@dataclass(eq=False)
class SharedBinMatrix:
    """XOR-shared rows of ``bit_count`` bits, each row packed into 64-bit words."""

    bit_count: int
    shares: tuple

    def __post_init__(self):
        self.shares = _as_share_arrays(self.shares)
        if self.shares[0].shape[1] != _words(self.bit_count):
            raise ValueError("share width does not match the bit count")

    @classmethod
    def zeros(cls, rows, bit_count):
        z = np.zeros((rows, _words(bit_count)), dtype=np.int64)
        return cls(bit_count, (z, z.copy()))

    @property
    def rows(self) -> int:
        return self.shares[0].shape[0]

    @property
    def i64_cols(self) -> int:
        return self.shares[0].shape[1]

    @property
    def i64_size(self) -> int:
        return self.shares[0].size

    def __getitem__(self, i):
        return self.shares[i]

    def __eq__(self, other):
        if not isinstance(other, SharedBinMatrix):
            return NotImplemented
        return self.bit_count == other.bit_count and all(
            np.array_equal(a, b) for a, b in zip(self.shares, other.shares)
        )


@dataclass(eq=False)
class SharedPackedBin:
    """Bit-sliced XOR shares: row ``b`` holds bit ``b`` of every one of ``share_count`` values."""

    share_count: int
    shares: tuple

    def __post_init__(self):
        self.shares = _as_share_arrays(self.shares)
        if self.shares[0].shape[1] != _words(self.share_count):
            raise ValueError("share width does not match the share count")

    @classmethod
    def zeros(cls, share_count, bit_count):
        z = np.zeros((bit_count, _words(share_count)), dtype=np.int64)
        return cls(share_count, (z, z.copy()))

    @property
    def bit_count(self) -> int:
        return self.shares[0].shape[0]

    @property
    def simd_width(self) -> int:
        return self.shares[0].shape[1]

    def __getitem__(self, i):
        return self.shares[i]

    def __eq__(self, other):
        if not isinstance(other, SharedPackedBin):
            return NotImplemented
        return self.share_count == other.share_count and all(
            np.array_equal(a, b) for a, b in zip(self.shares, other.shares)
        )