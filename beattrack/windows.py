"""Analysis windows and phase wrapping used by onset detection."""

from __future__ import annotations

from enum import IntEnum

import numpy as np

PI = 3.14159265358979

_TUKEY_ALPHA = 0.5


class WindowType(IntEnum):
    """The kind of window applied to an audio frame before the FFT."""

    RECTANGULAR = 0
    HANNING = 1
    HAMMING = 2
    BLACKMAN = 3
    TUKEY = 4


def _check_size(size: int, minimum: int) -> None:
    if size < minimum:
        raise ValueError(f"window size must be at least {minimum}, got {size}")


def rectangular_window(size: int) -> np.ndarray:
    """Return a window of ones."""
    _check_size(size, 1)
    return np.ones(size, dtype=float)


def hanning_window(size: int) -> np.ndarray:
    """Return a Hann window that is zero at both ends."""
    _check_size(size, 2)
    n = np.arange(size, dtype=float) / (size - 1)
    return 0.5 * (1.0 - np.cos(2.0 * PI * n))


def hamming_window(size: int) -> np.ndarray:
    """Return a Hamming window."""
    _check_size(size, 2)
    n = np.arange(size, dtype=float) / (size - 1)
    return 0.54 - 0.46 * np.cos(2.0 * PI * n)


def blackman_window(size: int) -> np.ndarray:
    """Return a Blackman window."""
    _check_size(size, 2)
    n = np.arange(size, dtype=float) / (size - 1)
    return 0.42 - 0.5 * np.cos(2.0 * PI * n) + 0.08 * np.cos(4.0 * PI * n)


def tukey_window(size: int) -> np.ndarray:
    """Return a Tukey (tapered cosine) window with a flat centre, alpha 0.5."""
    _check_size(size, 2)
    alpha = _TUKEY_ALPHA
    big_n = float(size - 1)
    n_val = np.arange(size, dtype=float) - (size // 2) + 1
    flat = np.abs(n_val) <= alpha * (big_n / 2.0)
    taper = 0.5 * (1.0 + np.cos(PI * ((2.0 * n_val) / (alpha * big_n) - 1.0)))
    return np.where(flat, 1.0, taper)


_WINDOWS = {
    WindowType.RECTANGULAR: rectangular_window,
    WindowType.HANNING: hanning_window,
    WindowType.HAMMING: hamming_window,
    WindowType.BLACKMAN: blackman_window,
    WindowType.TUKEY: tukey_window,
}


def make_window(window_type: WindowType | int, size: int) -> np.ndarray:
    """Build a window of the given type; unknown types give a Hann window."""
    try:
        kind = WindowType(window_type)
    except ValueError:
        kind = WindowType.HANNING
    return _WINDOWS[kind](size)


def princarg(phase: float) -> float:
    """Wrap a phase value into the interval (-pi, pi]."""
    while phase <= -PI:
        phase += 2.0 * PI
    while phase > PI:
        phase -= 2.0 * PI
    return phase