"""Piecewise polynomial functions evaluated over fixed-point inputs."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

_MOD = 1 << 64
_MASK32 = 0xFFFFFFFF
_I64_MIN = -(1 << 63)


def _wrap(value: int) -> int:
    """Reduce an integer to the signed 64-bit range, wrapping like two's complement."""
    return ((int(value) - _I64_MIN) % _MOD) + _I64_MIN


def fixed_mul(op1, op2, dec):
    """Multiply two raw fixed-point values and drop ``dec`` fractional bits.

    The product is formed from 32-bit halves as a 128-bit value; the result is
    the 64 bits starting at bit ``dec``, read as a signed integer.
    """
    a = _wrap(op1)
    b = _wrap(op2)
    dec = int(dec)
    if not 0 <= dec < 64:
        raise ValueError("the number of fractional bits must be in [0, 64)")

    u1 = a & _MASK32
    v1 = b & _MASK32
    t = u1 * v1
    w3 = t & _MASK32
    k = t >> 32

    a_hi = a >> 32
    t = (a_hi * v1 + k) % _MOD
    k = t & _MASK32
    w1 = t >> 32

    b_hi = b >> 32
    t = (u1 * b_hi + k) % _MOD
    k = t >> 32

    hi = (a_hi * b_hi + w1 + k) % _MOD
    lo = ((t << 32) + w3) % _MOD

    return _wrap((lo >> dec) + (hi << (64 - dec)))


class Coef:
    """A threshold or coefficient: either an exact integer or a real number."""

    __slots__ = ("is_integer", "value")

    def __init__(self, value):
        if isinstance(value, Coef):
            self.is_integer = value.is_integer
            self.value = value.value
        elif isinstance(value, (int, np.integer)):
            self.is_integer = True
            self.value = _wrap(int(value))
        else:
            self.is_integer = False
            self.value = float(value)

    def as_float(self):
        """The coefficient as a float."""
        return float(self.value)

    def fixed_point(self, decimal):
        """The coefficient scaled by ``2**decimal`` and truncated to a 64-bit integer."""
        scale = 1 << int(decimal)
        if self.is_integer:
            return _wrap(self.value * scale)
        return _wrap(int(self.value * float(scale)))

    def integer(self):
        """The integer value; raises ValueError for a real-valued coefficient."""
        if not self.is_integer:
            raise ValueError("coefficient is not an integer")
        return self.value

    def __eq__(self, other):
        if not isinstance(other, Coef):
            return NotImplemented
        return self.is_integer == other.is_integer and self.value == other.value

    def __hash__(self):
        return hash((self.is_integer, self.value))

    def __repr__(self):
        return f"Coef({self.value!r})"


def _column(inputs) -> np.ndarray:
    arr = np.asarray(inputs)
    if arr.ndim == 1:
        return arr
    if arr.ndim == 2:
        return arr[:, 0]
    raise ValueError("expected a vector or a matrix of inputs")


@dataclass
class Piecewise:
    """A function made of one polynomial per region between ascending thresholds.

    ``coefficients[t]`` lists the polynomial's coefficients from the constant
    term upwards; region ``t`` holds the inputs at or above threshold ``t - 1``
    and below threshold ``t``.
    """

    thresholds: list
    coefficients: list

    def __init__(self, thresholds, coefficients):
        self.thresholds = [Coef(t) for t in thresholds]
        self.coefficients = [[Coef(c) for c in poly] for poly in coefficients]

    def _check(self):
        if not self.thresholds:
            raise ValueError("at least one threshold is required")
        if len(self.coefficients) != len(self.thresholds) + 1:
            raise ValueError("there must be one polynomial more than there are thresholds")

    def input_regions(self, inputs, decimal):
        """One-hot region indicators, one row per input and one column per region."""
        if not self.thresholds:
            raise ValueError("at least one threshold is required")
        values = [int(v) for v in _column(np.asarray(inputs, dtype=np.int64))]
        limits = [t.fixed_point(decimal) for t in self.thresholds]
        regions = np.zeros((len(values), len(limits) + 1), dtype=np.uint8)
        for row, value in zip(regions, values):
            below = [1 if value < limit else 0 for limit in limits]
            row[0] = below[0]
            for t, (prev, cur) in enumerate(zip(below, below[1:]), start=1):
                row[t] = (1 ^ prev) * cur
            row[len(limits)] = 1 ^ below[-1]
        return regions

    def _polynomial(self, poly, value, decimal):
        total = 0
        power = 1 << int(decimal)
        for coef in poly:
            total = _wrap(total + fixed_mul(coef.fixed_point(decimal), power, decimal))
            power = fixed_mul(value, power, decimal)
        return total

    def eval_fixed(self, inputs, decimal):
        """Evaluate on raw fixed-point inputs given as a column; returns raw int64 outputs."""
        arr = np.asarray(inputs, dtype=np.int64)
        if arr.ndim == 2 and arr.shape[1] != 1:
            raise ValueError("inputs must form a single column")
        if arr.ndim not in (1, 2):
            raise ValueError("expected a vector or a column of inputs")
        self._check()

        regions = self.input_regions(arr, decimal)
        results = []
        for value, row in zip((int(v) for v in _column(arr)), regions):
            out = 0
            for indicator, poly in zip(row, self.coefficients):
                out = _wrap(out + int(indicator) * self._polynomial(poly, value, decimal))
            results.append(out)
        return np.array(results, dtype=np.int64).reshape(arr.shape)

    def eval_float(self, inputs, decimal):
        """Evaluate on real inputs, computing internally with ``decimal`` fractional bits."""
        arr = np.asarray(inputs, dtype=float)
        scale = float(1 << int(decimal))
        raw = np.trunc(arr * scale).astype(np.int64)
        return self.eval_fixed(raw, decimal).astype(float) / scale