"""Fixed-point numbers and matrices held as scaled signed 64-bit integers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from .sharing import SharedInt, SharedIntMatrix

_I64_MIN = -(1 << 63)


def _wrap(value: int) -> int:
    return ((int(value) - _I64_MIN) % (1 << 64)) + _I64_MIN


class Decimal(IntEnum):
    """Supported numbers of fractional bits."""

    D0 = 0
    D8 = 8
    D16 = 16
    D32 = 32


def _same_decimal(a, b):
    if a.decimal != b.decimal:
        raise ValueError("fixed-point values have different decimal places")


def format_fixed(value, decimal):
    """Render a raw fixed-point value as an exact decimal string."""
    decimal = int(decimal)
    mask = (1 << decimal) - 1
    value = int(value)
    sign = "-" if value < 0 else ""
    v = -value if value < 0 else value
    parts = [sign, str(v >> decimal), "."]
    v &= mask
    if v:
        while v & mask:
            v *= 10
            parts.append(str(v >> decimal))
            v &= mask
    else:
        parts.append("0")
    return "".join(parts)


class Fixed:
    """A fixed-point number: ``value / 2**decimal`` with a 64-bit raw value."""

    __slots__ = ("value", "decimal")

    def __init__(self, value, decimal):
        self.value = _wrap(value)
        self.decimal = Decimal(decimal)

    @classmethod
    def from_float(cls, value, decimal):
        decimal = Decimal(decimal)
        return cls(int(float(value) * float(1 << decimal)), decimal)

    def __add__(self, other):
        if not isinstance(other, Fixed):
            return NotImplemented
        _same_decimal(self, other)
        return Fixed(self.value + other.value, self.decimal)

    def __sub__(self, other):
        if not isinstance(other, Fixed):
            return NotImplemented
        _same_decimal(self, other)
        return Fixed(self.value - other.value, self.decimal)

    def __mul__(self, other):
        if not isinstance(other, Fixed):
            return NotImplemented
        _same_decimal(self, other)
        product = self.value * other.value
        quotient = abs(product) >> self.decimal
        return Fixed(-quotient if product < 0 else quotient, self.decimal)

    def __rshift__(self, shift):
        return Fixed(self.value >> shift, self.decimal)

    def __lshift__(self, shift):
        return Fixed(self.value << shift, self.decimal)

    def __float__(self):
        return self.value / float(1 << self.decimal)

    def __eq__(self, other):
        if not isinstance(other, Fixed):
            return NotImplemented
        return self.value == other.value and self.decimal == other.decimal

    def __hash__(self):
        return hash((self.value, int(self.decimal)))

    def __str__(self):
        return format_fixed(self.value, self.decimal)

    def __repr__(self):
        return f"Fixed({self.value}, Decimal.{self.decimal.name})"


class FixedMatrix:
    """A matrix of fixed-point numbers stored as raw int64 values."""

    def __init__(self, rows, cols, decimal):
        self.decimal = Decimal(decimal)
        self.data = np.zeros((rows, cols), dtype=np.int64)

    @classmethod
    def _from_raw(cls, data, decimal):
        m = cls(0, 0, decimal)
        m.data = np.asarray(data, dtype=np.int64)
        return m

    @classmethod
    def from_floats(cls, values, decimal):
        arr = np.asarray(values, dtype=float)
        if arr.ndim != 2:
            raise ValueError("expected a two-dimensional array")
        decimal = Decimal(decimal)
        return cls._from_raw(np.trunc(arr * float(1 << decimal)).astype(np.int64), decimal)

    @property
    def rows(self) -> int:
        return self.data.shape[0]

    @property
    def cols(self) -> int:
        return self.data.shape[1]

    @property
    def size(self) -> int:
        return self.data.size

    def __getitem__(self, key):
        raw = self.data[key] if isinstance(key, tuple) else self.data.flat[key]
        return Fixed(int(raw), self.decimal)

    def __setitem__(self, key, value):
        if not isinstance(value, Fixed):
            value = Fixed.from_float(value, self.decimal)
        _same_decimal(self, value)
        if isinstance(key, tuple):
            self.data[key] = value.value
        else:
            self.data.flat[key] = value.value

    def _check_shape(self, other):
        _same_decimal(self, other)
        if self.data.shape != other.data.shape:
            raise ValueError("matrix shapes differ")

    def __add__(self, other):
        if not isinstance(other, FixedMatrix):
            return NotImplemented
        self._check_shape(other)
        return FixedMatrix._from_raw(self.data + other.data, self.decimal)

    def __sub__(self, other):
        if not isinstance(other, FixedMatrix):
            return NotImplemented
        self._check_shape(other)
        return FixedMatrix._from_raw(self.data - other.data, self.decimal)

    def __mul__(self, other):
        if not isinstance(other, FixedMatrix):
            return NotImplemented
        _same_decimal(self, other)
        if self.cols != other.rows:
            raise ValueError("inner matrix dimensions differ")
        product = self.data @ other.data
        return FixedMatrix._from_raw(product >> int(self.decimal), self.decimal)

    def __eq__(self, other):
        if not isinstance(other, FixedMatrix):
            return NotImplemented
        return self.decimal == other.decimal and np.array_equal(self.data, other.data)

    __hash__ = None

    def __str__(self):
        lines = []
        for row in self.data:
            cells = ", ".join(format_fixed(v, self.decimal) for v in row)
            lines.append(f"({cells})\n")
        return "[" + "".join(lines) + "]"


@dataclass
class SharedFixed:
    """A replicated share of a fixed-point number."""

    decimal: Decimal
    share: SharedInt = field(default_factory=SharedInt)

    def __post_init__(self):
        self.decimal = Decimal(self.decimal)

    def __getitem__(self, i):
        return self.share[i]

    def __add__(self, other):
        if not isinstance(other, SharedFixed):
            return NotImplemented
        _same_decimal(self, other)
        return SharedFixed(self.decimal, self.share + other.share)

    def __sub__(self, other):
        if not isinstance(other, SharedFixed):
            return NotImplemented
        _same_decimal(self, other)
        return SharedFixed(self.decimal, self.share - other.share)


class SharedFixedMatrix:
    """A replicated share of a fixed-point matrix."""

    def __init__(self, rows, cols, decimal):
        self.decimal = Decimal(decimal)
        self.share = SharedIntMatrix.zeros(rows, cols)

    @classmethod
    def _with_share(cls, share, decimal):
        m = cls(0, 0, decimal)
        m.share = share
        return m

    @property
    def rows(self) -> int:
        return self.share.rows

    @property
    def cols(self) -> int:
        return self.share.cols

    @property
    def size(self) -> int:
        return self.share.size

    def __getitem__(self, i):
        return self.share[i]

    def __add__(self, other):
        if not isinstance(other, SharedFixedMatrix):
            return NotImplemented
        _same_decimal(self, other)
        return SharedFixedMatrix._with_share(self.share + other.share, self.decimal)

    def __sub__(self, other):
        if not isinstance(other, SharedFixedMatrix):
            return NotImplemented
        _same_decimal(self, other)
        return SharedFixedMatrix._with_share(self.share - other.share, self.decimal)

    def transpose(self):
        flipped = SharedIntMatrix(tuple(s.T.copy() for s in self.share.shares))
        return SharedFixedMatrix._with_share(flipped, self.decimal)

    def __eq__(self, other):
        if not isinstance(other, SharedFixedMatrix):
            return NotImplemented
        return (
            self.decimal == other.decimal
            and self.rows == other.rows
            and self.cols == other.cols
            and self.share == other.share
        )

    __hash__ = None