"""Turning plaintext values into replicated shares and revealing them again."""

from __future__ import annotations

import numpy as np

from .fixedpoint import Fixed, FixedMatrix, SharedFixed, SharedFixedMatrix
from .sharing import (
    CommPkg,
    ShareGen,
    SharedBinary,
    SharedBinMatrix,
    SharedInt,
    SharedIntMatrix,
    SharedPackedBin,
)

_I64_MIN = -(1 << 63)
_WORD_BITS = 64


def _wrap(value: int) -> int:
    return ((int(value) - _I64_MIN) % (1 << 64)) + _I64_MIN


def _words(bits: int) -> int:
    return (bits + _WORD_BITS - 1) // _WORD_BITS


def _as_matrix(m) -> np.ndarray:
    arr = np.array(m, dtype=np.int64)
    if arr.ndim != 2:
        raise ValueError("expected a two-dimensional matrix")
    return arr


def _to_bits(words: np.ndarray, width: int) -> np.ndarray:
    """Unpack each row of 64-bit words into its first ``width`` bits, least significant first."""
    arr = np.ascontiguousarray(words, dtype="<i8")
    rows, cols = arr.shape
    raw = arr.view(np.uint8).reshape(rows, cols * 8)
    return np.unpackbits(raw, axis=1, bitorder="little")[:, :width]


def _from_bits(bits: np.ndarray, word_count: int) -> np.ndarray:
    """Pack each row of bits into ``word_count`` 64-bit words, zero padded."""
    rows, width = bits.shape
    padded = np.zeros((rows, word_count * _WORD_BITS), dtype=np.uint8)
    padded[:, :width] = bits
    packed = np.ascontiguousarray(np.packbits(padded, axis=1, bitorder="little"))
    return packed.view("<i8").astype(np.int64).reshape(rows, word_count)


class Encryptor:
    """Creates and opens replicated shares for one of the three parties."""

    def __init__(self, party_idx, prev_seed, next_seed):
        if party_idx not in (0, 1, 2):
            raise ValueError("party index must be 0, 1 or 2")
        self.party_idx = party_idx
        self.share_gen = ShareGen(prev_seed, next_seed)

    # -- helpers -----------------------------------------------------------

    def _zero_shares(self, shape, binary: bool) -> np.ndarray:
        count = int(np.prod(shape, dtype=np.int64))
        draw = self.share_gen.get_binary_share if binary else self.share_gen.get_share
        return np.array([draw() for _ in range(count)], dtype=np.int64).reshape(shape)

    @staticmethod
    def _exchange(comm: CommPkg, own):
        comm.next.send(own)
        return comm.prev.recv()

    @staticmethod
    def _recv_matrix(comm: CommPkg, shape) -> np.ndarray:
        received = np.asarray(comm.next.recv(), dtype=np.int64)
        if received.shape != tuple(shape):
            raise ValueError("received matrix has the wrong shape")
        return received

    # -- scalars -----------------------------------------------------------

    def local_int(self, comm, value):
        """Share an integer this party knows; the others call remote_int."""
        s0 = _wrap(self.share_gen.get_share() + int(value))
        s1 = self._exchange(comm, s0)
        return SharedInt([s0, s1])

    def remote_int(self, comm):
        """Take part in sharing an integer input by another party."""
        return self.local_int(comm, 0)

    def local_binary(self, comm, value):
        """XOR-share a 64-bit word this party knows; the others call remote_binary."""
        s0 = self.share_gen.get_binary_share() ^ _wrap(value)
        s1 = self._exchange(comm, s0)
        return SharedBinary([s0, s1])

    def remote_binary(self, comm):
        """Take part in XOR-sharing a word input by another party."""
        return self.local_binary(comm, 0)

    # -- matrices ----------------------------------------------------------

    def local_int_matrix(self, comm, m):
        """Additively share a matrix this party knows."""
        arr = _as_matrix(m)
        s0 = self._zero_shares(arr.shape, binary=False) + arr
        s1 = self._exchange(comm, s0)
        return SharedIntMatrix((s0, s1))

    def remote_int_matrix(self, comm, rows, cols):
        """Take part in sharing a ``rows`` x ``cols`` matrix input by another party."""
        s0 = self._zero_shares((rows, cols), binary=False)
        s1 = self._exchange(comm, s0)
        return SharedIntMatrix((s0, s1))

    def local_bin_matrix(self, comm, m):
        """XOR-share a matrix of 64-bit words; each row becomes a row of ``64 * cols`` bits."""
        arr = _as_matrix(m)
        s0 = self._zero_shares(arr.shape, binary=True) ^ arr
        s1 = self._exchange(comm, s0)
        return SharedBinMatrix(arr.shape[1] * _WORD_BITS, (s0, s1))

    def remote_bin_matrix(self, comm, rows, cols):
        """Take part in XOR-sharing a ``rows`` x ``cols`` word matrix input by another party."""
        s0 = self._zero_shares((rows, cols), binary=True)
        s1 = self._exchange(comm, s0)
        return SharedBinMatrix(cols * _WORD_BITS, (s0, s1))

    def local_packed_binary(self, comm, m):
        """Share a word matrix in bit-sliced form: one value per row of ``m``."""
        arr = _as_matrix(m)
        share_count, bit_count = arr.shape[0], arr.shape[1] * _WORD_BITS
        bits = _to_bits(arr, bit_count)
        packed = _from_bits(np.ascontiguousarray(bits.T), _words(share_count))
        s0 = packed ^ self._zero_shares(packed.shape, binary=True)
        s1 = self._exchange(comm, s0)
        return SharedPackedBin(share_count, (s0, s1))

    def remote_packed_binary(self, comm, share_count, bit_count):
        """Take part in a bit-sliced sharing input by another party."""
        s0 = self._zero_shares((bit_count, _words(share_count)), binary=True)
        s1 = self._exchange(comm, s0)
        return SharedPackedBin(share_count, (s0, s1))

    # -- revealing ---------------------------------------------------------

    def reveal(self, comm, x):
        """Receive the missing share from the next party and return the plaintext."""
        if isinstance(x, SharedFixed):
            return Fixed(self.reveal(comm, x.share), x.decimal)
        if isinstance(x, SharedFixedMatrix):
            out = FixedMatrix(x.rows, x.cols, x.decimal)
            out.data = self.reveal(comm, x.share)
            return out
        if isinstance(x, SharedInt):
            return _wrap(int(comm.next.recv()) + x[0] + x[1])
        if isinstance(x, SharedBinary):
            return _wrap(int(comm.next.recv()) ^ x[0] ^ x[1])
        if isinstance(x, SharedIntMatrix):
            received = self._recv_matrix(comm, x.shares[0].shape)
            return received + x.shares[0] + x.shares[1]
        if isinstance(x, SharedBinMatrix):
            received = self._recv_matrix(comm, x.shares[0].shape)
            return received ^ x.shares[0] ^ x.shares[1]
        if isinstance(x, SharedPackedBin):
            received = self._recv_matrix(comm, x.shares[0].shape)
            buff = received ^ x.shares[0] ^ x.shares[1]
            bits = _to_bits(buff, x.share_count)
            return _from_bits(np.ascontiguousarray(bits.T), _words(x.bit_count))
        raise TypeError(f"cannot reveal a value of type {type(x).__name__}")

    def reveal_to(self, comm, party_idx, x):
        """Send this party's own share to ``party_idx`` if that party needs it from us."""
        if party_idx not in (0, 1, 2):
            raise ValueError("party index must be 0, 1 or 2")
        own = self._own_share(x)
        if (self.party_idx + 2) % 3 == party_idx:
            comm.prev.send(own)

    def reveal_all(self, comm, x):
        """Open ``x`` to every party."""
        self.reveal_to(comm, (self.party_idx + 2) % 3, x)
        return self.reveal(comm, x)

    @staticmethod
    def _own_share(x):
        if isinstance(x, SharedFixed):
            return x.share[0]
        if isinstance(x, SharedFixedMatrix):
            return x.share.shares[0]
        if isinstance(x, (SharedInt, SharedBinary)):
            return x[0]
        if isinstance(x, (SharedIntMatrix, SharedBinMatrix, SharedPackedBin)):
            return x.shares[0]
        raise TypeError(f"cannot reveal a value of type {type(x).__name__}")

    # -- randomness --------------------------------------------------------

    def rand(self, dest):
        """Fill ``dest`` in place with a sharing of fresh random values; returns ``dest``."""
        if isinstance(dest, SharedFixedMatrix):
            self.rand(dest.share)
            return dest
        if isinstance(dest, SharedIntMatrix):
            draw = self.share_gen.get_rand_int_share
        elif isinstance(dest, (SharedBinMatrix, SharedPackedBin)):
            draw = self.share_gen.get_rand_binary_share
        else:
            raise TypeError(f"cannot fill a value of type {type(dest).__name__}")
        s0, s1 = dest.shares
        pairs = [draw() for _ in range(s0.size)]
        s0[...] = np.array([p[0] for p in pairs], dtype=np.int64).reshape(s0.shape)
        s1[...] = np.array([p[1] for p in pairs], dtype=np.int64).reshape(s1.shape)
        return dest