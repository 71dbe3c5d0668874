"""Signal helpers used by the beat tracker to estimate tempo."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from scipy import signal

RAYLEIGH_PARAMETER = 43.0
WEIGHTING_LENGTH = 128
TEMPO_BINS = 41
THRESHOLD_PRE = 8
THRESHOLD_POST = 7
COMB_ELEMENTS = 4

_PI = 3.14159265

ArrayLike = Sequence[float] | np.ndarray


def rayleigh_weighting(
    length: int = WEIGHTING_LENGTH, rayparam: float = RAYLEIGH_PARAMETER
) -> np.ndarray:
    """Return a Rayleigh weighting over beat-period lags, peaking at ``rayparam``."""
    if length < 0:
        raise ValueError("length must not be negative")
    if rayparam <= 0:
        raise ValueError("rayparam must be positive")
    n = np.arange(length, dtype=float)
    return (n / rayparam**2) * np.exp(-(n**2) / (2.0 * rayparam**2))


def tempo_transition_matrix(size: int = TEMPO_BINS) -> np.ndarray:
    """Return the Gaussian transition matrix between tempo bins."""
    if size < 8:
        raise ValueError("size must be at least 8")
    sigma = float(size // 8)
    idx = np.arange(1, size + 1, dtype=float)
    diff = idx[np.newaxis, :] - idx[:, np.newaxis]
    scale = 1.0 / (sigma * np.sqrt(2.0 * _PI))
    return scale * np.exp(-(diff**2) / (2.0 * sigma**2))


def mean_of_range(values: ArrayLike, start: int, end: int) -> float:
    """Mean of ``values[start:end]``; an empty range gives 0."""
    length = end - start
    if length <= 0:
        return 0.0
    data = np.asarray(values, dtype=float)
    return float(np.sum(data[start:end]) / length)


def normalise(values: ArrayLike) -> np.ndarray:
    """Divide by the sum of the positive entries, if that sum is positive."""
    data = np.array(values, dtype=float)
    total = float(np.sum(data[data > 0]))
    if total > 0:
        data /= total
    return data


def adaptive_threshold(values: ArrayLike) -> np.ndarray:
    """Subtract a moving-average threshold and clip the result at zero."""
    data = np.asarray(values, dtype=float)
    n = data.size
    if n <= THRESHOLD_POST:
        raise ValueError(f"need more than {THRESHOLD_POST} values, got {n}")

    threshold = np.zeros(n)
    t = min(n, THRESHOLD_POST)
    for i in range(t + 1):
        threshold[i] = mean_of_range(data, 1, min(i + THRESHOLD_PRE, n))
    for i in range(t + 1, n - THRESHOLD_POST):
        threshold[i] = mean_of_range(data, i - THRESHOLD_PRE, i + THRESHOLD_POST)
    for i in range(n - THRESHOLD_POST, n):
        threshold[i] = mean_of_range(data, max(i - THRESHOLD_POST, 1), n)

    return np.maximum(data - threshold, 0.0)


def balanced_acf(onset_df: ArrayLike) -> np.ndarray:
    """Autocorrelation divided by the number of overlapping samples at each lag."""
    data = np.asarray(onset_df, dtype=float).ravel()
    n = data.size
    if n == 0:
        raise ValueError("onset detection function must not be empty")
    spectrum = np.fft.fft(data, 2 * n)
    power = spectrum.real**2 + spectrum.imag**2
    correlation = np.abs(np.fft.ifft(power))[:n]
    overlap = np.arange(n, 0, -1, dtype=float)
    return correlation / overlap


def comb_filter_bank_output(acf: ArrayLike, weighting: ArrayLike) -> np.ndarray:
    """Weighted comb filter bank over the autocorrelation, one value per lag."""
    acf_data = np.asarray(acf, dtype=float)
    weights = np.asarray(weighting, dtype=float)
    length = weights.size
    needed = COMB_ELEMENTS * (length - 1) + COMB_ELEMENTS - 1
    if length >= 2 and acf_data.size < needed:
        raise ValueError(
            f"autocorrelation needs at least {needed} values, got {acf_data.size}"
        )

    output = np.zeros(length)
    for lag in range(2, length):
        total = 0.0
        for a in range(1, COMB_ELEMENTS + 1):
            segment = acf_data[a * lag - a: a * lag + a - 1]
            total += float(np.sum(segment)) / (2 * a - 1)
        output[lag - 1] = total * weights[lag - 1]
    return output


def resample(values: ArrayLike, length: int = 512) -> np.ndarray:
    """Band-limited resampling of ``values`` to exactly ``length`` samples."""
    data = np.asarray(values, dtype=float).ravel()
    if length < 1:
        raise ValueError("length must be positive")
    if data.size == 0:
        raise ValueError("values must not be empty")
    if data.size == length:
        return data.copy()
    return np.asarray(signal.resample(data, length), dtype=float)