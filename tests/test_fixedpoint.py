import numpy as np
import pytest

from repshare.fixedpoint import (
    Decimal,
    Fixed,
    FixedMatrix,
    SharedFixed,
    SharedFixedMatrix,
    format_fixed,
)
from repshare.sharing import SharedInt, SharedIntMatrix

DYADIC = [0.0, 1.5, -1.5, 2.25, -0.125, 100.75, 3.0]


@pytest.mark.parametrize("x", DYADIC)
@pytest.mark.parametrize("d", [Decimal.D8, Decimal.D16, Decimal.D32])
def test_float_round_trip(x, d):
    assert float(Fixed.from_float(x, d)) == x


def test_from_float_truncates_toward_zero():
    assert Fixed.from_float(-1.0 / 2**17, Decimal.D16).value == 0


def test_add_sub_inverse():
    a = Fixed.from_float(3.25, Decimal.D16)
    b = Fixed.from_float(-7.5, Decimal.D16)
    assert (a + b) - b == a


def test_multiplication_of_exact_values():
    a = Fixed.from_float(1.5, Decimal.D16)
    b = Fixed.from_float(2.0, Decimal.D16)
    assert a * b == Fixed.from_float(3.0, Decimal.D16)
    assert Fixed.from_float(-1.5, Decimal.D16) * b == Fixed.from_float(-3.0, Decimal.D16)


def test_multiplication_truncates_toward_zero():
    assert Fixed(-1, Decimal.D8) * Fixed(1, Decimal.D8) == Fixed(0, Decimal.D8)


def test_shift_round_trip():
    x = Fixed.from_float(1.25, Decimal.D8)
    assert (x << 3) >> 3 == x


def test_decimal_mismatch_raises():
    with pytest.raises(ValueError):
        Fixed(1, Decimal.D8) + Fixed(1, Decimal.D16)


def test_invalid_decimal_raises():
    with pytest.raises(ValueError):
        Fixed(1, 5)


def test_addition_wraps():
    x = Fixed((1 << 63) - 1, Decimal.D8) + Fixed(1, Decimal.D8)
    assert x.value == -(1 << 63)


@pytest.mark.parametrize("x", DYADIC)
def test_string_parses_back(x):
    f = Fixed.from_float(x, Decimal.D16)
    assert float(str(f)) == x
    assert float(format_fixed(f.value, Decimal.D16)) == x


def test_whole_number_string_has_zero_fraction():
    s = str(Fixed(5, Decimal.D0))
    assert s.endswith(".0")
    assert float(s) == 5.0


def test_matrix_element_access():
    vals = [[1.5, -0.25], [2.0, 4.75]]
    m = FixedMatrix.from_floats(vals, Decimal.D16)
    assert float(m[0, 1]) == -0.25
    assert float(m[3]) == 4.75


def test_matrix_setitem():
    m = FixedMatrix(2, 2, Decimal.D8)
    m[1, 0] = Fixed.from_float(2.5, Decimal.D8)
    assert float(m[1, 0]) == 2.5
    with pytest.raises(ValueError):
        m[0, 0] = Fixed(1, Decimal.D16)


def test_matrix_add_sub_round_trip():
    a = FixedMatrix.from_floats([[1.5, 2.0], [-3.0, 0.5]], Decimal.D16)
    b = FixedMatrix.from_floats([[0.25, -1.0], [4.0, 8.0]], Decimal.D16)
    assert (a + b) - b == a


def test_matrix_identity_product():
    a = FixedMatrix.from_floats([[1.5, 2.0], [-3.0, 0.5]], Decimal.D16)
    eye = FixedMatrix.from_floats(np.eye(2), Decimal.D16)
    assert a * eye == a


def test_matrix_product_matches_float_product():
    af = np.array([[1.5, 2.0], [-3.0, 0.5]])
    bf = np.array([[0.25, -1.0], [4.0, 8.0]])
    a = FixedMatrix.from_floats(af, Decimal.D16)
    b = FixedMatrix.from_floats(bf, Decimal.D16)
    assert a * b == FixedMatrix.from_floats(af @ bf, Decimal.D16)


def test_matrix_product_shape_check():
    a = FixedMatrix(2, 3, Decimal.D8)
    with pytest.raises(ValueError):
        a * FixedMatrix(2, 3, Decimal.D8)


def test_matrix_str_layout():
    m = FixedMatrix.from_floats([[1.5, 2.0], [-3.0, 0.5]], Decimal.D8)
    s = str(m)
    assert s.startswith("[(") and s.endswith(")\n]")
    assert s.count("\n") == m.rows


def test_shared_fixed_add_sub():
    x = SharedFixed(Decimal.D16, SharedInt([10, 20]))
    y = SharedFixed(Decimal.D16, SharedInt([-5, 7]))
    assert (x + y) - y == x


def test_shared_fixed_mismatch():
    with pytest.raises(ValueError):
        SharedFixed(Decimal.D8) + SharedFixed(Decimal.D16)


def test_shared_fixed_matrix_transpose():
    m = SharedFixedMatrix(2, 3, Decimal.D16)
    m.share = SharedIntMatrix((np.arange(6).reshape(2, 3), np.arange(6, 12).reshape(2, 3)))
    t = m.transpose()
    assert (t.rows, t.cols) == (3, 2)
    assert np.array_equal(t[0], m[0].T)
    assert t.transpose() == m


def test_shared_fixed_matrix_add_sub_and_eq():
    a = SharedFixedMatrix(2, 2, Decimal.D8)
    b = SharedFixedMatrix(2, 2, Decimal.D8)
    b.share = SharedIntMatrix((np.ones((2, 2)), np.full((2, 2), 3)))
    assert (a + b) - b == a
    assert a != SharedFixedMatrix(2, 3, Decimal.D8)