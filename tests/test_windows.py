import math

import numpy as np
import pytest

from beattrack.windows import (
    PI,
    WindowType,
    blackman_window,
    hamming_window,
    hanning_window,
    make_window,
    princarg,
    rectangular_window,
    tukey_window,
)


def test_rectangular_is_all_ones():
    assert np.array_equal(rectangular_window(8), np.ones(8))


def test_hanning_endpoints_and_symmetry():
    w = hanning_window(16)
    assert w[0] == pytest.approx(0.0, abs=1e-12)
    assert w[-1] == pytest.approx(0.0, abs=1e-12)
    assert np.allclose(w, w[::-1])
    assert np.all((w >= 0) & (w <= 1))


def test_hamming_endpoints():
    w = hamming_window(16)
    assert w[0] == pytest.approx(0.54 - 0.46)
    assert np.allclose(w, w[::-1])


def test_blackman_endpoints():
    w = blackman_window(32)
    assert w[0] == pytest.approx(0.42 - 0.5 + 0.08, abs=1e-12)
    assert np.allclose(w, w[::-1])


def test_tukey_flat_centre_and_bounds():
    w = tukey_window(64)
    assert w[32] == 1.0
    assert np.all((w >= 0) & (w <= 1.0 + 1e-12))
    assert w[0] < 1.0


@pytest.mark.parametrize(
    "kind, func",
    [
        (WindowType.RECTANGULAR, rectangular_window),
        (WindowType.HANNING, hanning_window),
        (WindowType.HAMMING, hamming_window),
        (WindowType.BLACKMAN, blackman_window),
        (WindowType.TUKEY, tukey_window),
    ],
)
def test_make_window_dispatch(kind, func):
    assert np.array_equal(make_window(kind, 20), func(20))
    assert np.array_equal(make_window(int(kind), 20), func(20))


def test_make_window_unknown_defaults_to_hanning():
    assert np.array_equal(make_window(99, 10), hanning_window(10))


def test_window_size_too_small():
    with pytest.raises(ValueError):
        hanning_window(1)
    with pytest.raises(ValueError):
        rectangular_window(0)


def test_princarg_boundaries():
    assert princarg(PI) == PI
    assert princarg(-PI) == pytest.approx(PI)
    assert princarg(0.0) == 0.0


@pytest.mark.parametrize("phase", [-20.0, -3.5, 3.5, 7.0, 100.0])
def test_princarg_range_and_equivalence(phase):
    wrapped = princarg(phase)
    assert -PI < wrapped <= PI
    turns = (phase - wrapped) / (2 * PI)
    assert math.isclose(turns, round(turns), abs_tol=1e-9)