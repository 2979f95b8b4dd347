import numpy as np
import pytest

from repshare.piecewise import Coef, Piecewise, fixed_mul


@pytest.mark.parametrize("x,y", [(2, 3), (-2, 3), (2, -3), (-4, -5), (0, 7), (1, 1)])
@pytest.mark.parametrize("dec", [8, 16, 32])
def test_fixed_mul_integers(x, y, dec):
    assert fixed_mul(x << dec, y << dec, dec) == (x * y) << dec


def test_fixed_mul_one_is_identity():
    dec = 16
    one = 1 << dec
    for v in (12345, -98765, 1 << 40, -(1 << 40)):
        assert fixed_mul(v, one, dec) == v
        assert fixed_mul(one, v, dec) == v


def test_fixed_mul_commutes():
    dec = 16
    for a, b in [(123456, -789), (-(1 << 30), 1 << 20), (5, 7)]:
        assert fixed_mul(a, b, dec) == fixed_mul(b, a, dec)


def test_fixed_mul_rejects_bad_shift():
    with pytest.raises(ValueError):
        fixed_mul(1, 1, 64)


def test_coef_integer():
    c = Coef(3)
    assert c.is_integer
    assert c.integer() == 3
    assert c.fixed_point(16) == 3 << 16
    assert c.as_float() == 3.0


def test_coef_real():
    c = Coef(0.5)
    assert not c.is_integer
    assert c.fixed_point(8) == 128
    assert c.as_float() == 0.5


def test_coef_real_integer_raises():
    with pytest.raises(ValueError):
        Coef(1.5).integer()


def test_coef_real_truncates_toward_zero():
    assert Coef(-0.5).fixed_point(0) == 0
    assert Coef(2.75).fixed_point(0) == 2


def test_input_regions_one_hot():
    pw = Piecewise([-2, 0, 2], [[0], [1], [2], [3]])
    inputs = np.array([[v << 16] for v in (-5, -2, -1, 0, 1, 2, 9)], dtype=np.int64)
    regions = pw.input_regions(inputs, 16)
    assert regions.shape == (7, 4)
    assert np.all(regions.sum(axis=1) == 1)


def test_input_regions_boundaries():
    pw = Piecewise([0], [[0], [0, 1]])
    inputs = np.array([[-(1 << 16)], [0], [1 << 16]], dtype=np.int64)
    regions = pw.input_regions(inputs, 16)
    assert regions.tolist() == [[1, 0], [0, 1], [0, 1]]


def test_input_regions_requires_thresholds():
    with pytest.raises(ValueError):
        Piecewise([], [[1]]).input_regions(np.zeros((1, 1), dtype=np.int64), 16)


def test_relu():
    pw = Piecewise([0], [[0], [0, 1]])
    out = pw.eval_float(np.array([[-2.5], [3.25], [0.0]]), 16)
    assert out.shape == (3, 1)
    assert out[:, 0].tolist() == [0.0, 3.25, 0.0]


def test_piecewise_sigmoid_approximation():
    pw = Piecewise([-2, 2], [[0], [0.5, 0.25], [1]])
    out = pw.eval_float(np.array([[-3.0], [0.0], [1.0], [3.0]]), 16)
    assert out[:, 0].tolist() == [0.0, 0.5, 0.75, 1.0]


def test_eval_fixed_matches_eval_float():
    pw = Piecewise([-1, 1], [[-1], [0, 1], [1]])
    xs = np.array([[-4.0], [-0.5], [0.25], [6.0]])
    dec = 16
    raw = pw.eval_fixed((xs * (1 << dec)).astype(np.int64), dec)
    assert raw.dtype == np.int64
    assert np.array_equal(raw.astype(float) / (1 << dec), pw.eval_float(xs, dec))


def test_eval_accepts_vector():
    pw = Piecewise([0], [[0], [0, 2]])
    out = pw.eval_float(np.array([1.5, -1.0]), 16)
    assert out.shape == (2,)
    assert out.tolist() == [3.0, 0.0]


def test_eval_rejects_multiple_columns():
    pw = Piecewise([0], [[0], [1]])
    with pytest.raises(ValueError):
        pw.eval_fixed(np.zeros((2, 2), dtype=np.int64), 16)


def test_eval_rejects_wrong_coefficient_count():
    pw = Piecewise([0, 1], [[0], [1]])
    with pytest.raises(ValueError):
        pw.eval_fixed(np.zeros((2, 1), dtype=np.int64), 16)


def test_eval_rejects_empty_thresholds():
    pw = Piecewise([], [[0]])
    with pytest.raises(ValueError):
        pw.eval_fixed(np.zeros((2, 1), dtype=np.int64), 16)


def test_empty_polynomial_gives_zero():
    pw = Piecewise([0], [[], [5]])
    out = pw.eval_float(np.array([[-1.0], [1.0]]), 8)
    assert out[:, 0].tolist() == [0.0, 5.0]