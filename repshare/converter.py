"""Conversion between row-packed and bit-sliced binary sharings."""

from __future__ import annotations

import numpy as np

from .sharing import SharedBinMatrix, SharedPackedBin

_WORD_BITS = 64


def _words(bits: int) -> int:
    return (bits + _WORD_BITS - 1) // _WORD_BITS


def _to_bits(words: np.ndarray, width: int) -> np.ndarray:
    arr = np.ascontiguousarray(words, dtype="<i8")
    rows, cols = arr.shape
    raw = arr.view(np.uint8).reshape(rows, cols * 8)
    return np.unpackbits(raw, axis=1, bitorder="little")[:, :width]


def _from_bits(bits: np.ndarray, word_count: int) -> np.ndarray:
    rows, width = bits.shape
    padded = np.zeros((rows, word_count * _WORD_BITS), dtype=np.uint8)
    padded[:, :width] = bits
    packed = np.ascontiguousarray(np.packbits(padded, axis=1, bitorder="little"))
    return packed.view("<i8").astype(np.int64).reshape(rows, word_count)


def _transpose(words: np.ndarray, width: int, out_width: int) -> np.ndarray:
    bits = _to_bits(words, width)
    return _from_bits(np.ascontiguousarray(bits.T), _words(out_width))


def to_packed_bin(matrix):
    """Bit-slice a binary matrix sharing: bit ``b`` of row ``i`` becomes bit ``i`` of row ``b``."""
    if not isinstance(matrix, SharedBinMatrix):
        raise TypeError("a SharedBinMatrix is required")
    shares = tuple(_transpose(s, matrix.bit_count, matrix.rows) for s in matrix.shares)
    return SharedPackedBin(matrix.rows, shares)


def to_binary_matrix(packed):
    """Undo bit slicing: one row of ``bit_count`` bits per shared value."""
    if not isinstance(packed, SharedPackedBin):
        raise TypeError("a SharedPackedBin is required")
    shares = tuple(
        _transpose(s, packed.share_count, packed.bit_count) for s in packed.shares
    )
    return SharedBinMatrix(packed.bit_count, shares)