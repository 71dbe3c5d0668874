"""A real-time beat tracker driven by onset detection function samples."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from beattrack.circular_buffer import CircularBuffer
from beattrack.onset_detection import OnsetDetectionFunction, OnsetDetectionFunctionType
from beattrack.tempo import (
    TEMPO_BINS,
    WEIGHTING_LENGTH,
    adaptive_threshold,
    balanced_acf,
    comb_filter_bank_output,
    normalise,
    rayleigh_weighting,
    resample,
    tempo_transition_matrix,
)
from beattrack.windows import WindowType

SAMPLE_RATE = 48000.0
RESAMPLED_LENGTH = 512
DEFAULT_HOP_SIZE = 512
MIN_TEMPO = 80.0
MAX_TEMPO = 160.0


def _round(value: float) -> int:
    """Round half away from zero."""
    if value >= 0:
        return math.floor(value + 0.5)
    return math.ceil(value - 0.5)


def _fold_tempo(tempo: float) -> float:
    if not (tempo > 0 and math.isfinite(tempo)):
        raise ValueError(f"tempo must be a positive finite number, got {tempo}")
    while tempo > MAX_TEMPO:
        tempo /= 2
    while tempo < MIN_TEMPO:
        tempo *= 2
    return tempo


def _tempo_index(tempo: float) -> int:
    return _round((_fold_tempo(tempo) - MIN_TEMPO) / 2)


def _fill(buffer: CircularBuffer, values: np.ndarray) -> None:
    for index, value in enumerate(values):
        buffer[index] = value


def beat_time_in_seconds(frame_number: int, hop_size: int, sample_rate: int) -> float:
    """Time in seconds at which the given frame starts."""
    return (float(hop_size) / float(sample_rate)) * float(frame_number)


class BTrack:
    """Tracks beats from audio frames or onset detection function samples.

    After each processed frame, :attr:`beat_due_in_current_frame` tells
    whether a beat falls in that frame.
    """

    def __init__(self, hop_size: int = DEFAULT_HOP_SIZE, frame_size: int | None = None) -> None:
        if frame_size is None:
            frame_size = 2 * hop_size
        self.odf = OnsetDetectionFunction(
            hop_size,
            frame_size,
            OnsetDetectionFunctionType.COMPLEX_SPECTRAL_DIFFERENCE_HWR,
            WindowType.HANNING,
        )

        self._tightness = 5.0
        self._alpha = 0.9
        self._tempo = 120.0
        self._estimated_tempo = 120.0
        self._tempo_to_lag_factor = 60.0 * SAMPLE_RATE / 512.0
        self._m0 = 10
        self._beat_counter = -1
        self._beat_due = False
        self._tempo_fixed = False
        self._latest_cumulative_score = 0.0

        self._weighting = rayleigh_weighting(WEIGHTING_LENGTH)
        self._transition = tempo_transition_matrix(TEMPO_BINS)
        self._prev_delta = np.ones(TEMPO_BINS)
        self._prev_delta_fixed = np.zeros(TEMPO_BINS)

        bins = range(TEMPO_BINS)
        self._lag_index = np.array(
            [_round(self._tempo_to_lag_factor / (2 * i + 80)) - 1 for i in bins]
        )
        self._half_lag_index = np.array(
            [_round(self._tempo_to_lag_factor / (4 * i + 160)) - 1 for i in bins]
        )

        self._onset_df = CircularBuffer()
        self._cumulative_score = CircularBuffer()
        self._resampled = np.zeros(RESAMPLED_LENGTH)
        self._set_hop_size(hop_size)

    # ------------------------------------------------------------------
    @property
    def hop_size(self) -> int:
        """Hop size in audio samples."""
        return self._hop_size

    @property
    def beat_due_in_current_frame(self) -> bool:
        """Whether a beat falls in the most recently processed frame."""
        return self._beat_due

    @property
    def current_tempo_estimate(self) -> float:
        """Current tempo estimate in beats per minute."""
        return self._estimated_tempo

    @property
    def latest_cumulative_score_value(self) -> float:
        """Most recent value of the cumulative score function."""
        return self._latest_cumulative_score

    # ------------------------------------------------------------------
    def _set_hop_size(self, hop_size: int) -> None:
        if hop_size < 1:
            raise ValueError("hop size must be positive")
        self._hop_size = hop_size
        self._buffer_size = (512 * 512) // hop_size
        self._beat_period = float(_round(60 / ((hop_size / SAMPLE_RATE) * self._tempo)))

        size = self._buffer_size
        period = max(_round(self._beat_period), 1)
        initial = np.where(np.arange(size) % period == 0, 1.0, 0.0)
        self._onset_df.resize(size)
        self._cumulative_score.resize(size)
        _fill(self._onset_df, initial)
        _fill(self._cumulative_score, np.zeros(size))

    def update_hop_and_frame_size(self, hop_size: int, frame_size: int) -> None:
        """Change the hop and frame sizes, resetting the detection buffers."""
        self.odf.initialise(hop_size, frame_size)
        self._set_hop_size(hop_size)

    def process_audio_frame(self, frame: Sequence[float] | np.ndarray) -> None:
        """Process one hop of audio samples."""
        self.process_onset_detection_function_sample(self.odf.process_frame(frame))

    def process_onset_detection_function_sample(self, sample: float) -> None:
        """Feed one onset detection function sample to the tracker."""
        sample = abs(float(sample)) + 0.0001

        self._m0 -= 1
        self._beat_counter -= 1
        self._beat_due = False

        self._onset_df.append(sample)
        self._update_cumulative_score(sample)

        if self._m0 == 0:
            self._predict_beat()

        if self._beat_counter == 0:
            self._beat_due = True
            self._resampled = resample(list(self._onset_df), RESAMPLED_LENGTH)
            self._calculate_tempo()

    # ------------------------------------------------------------------
    def set_tempo(self, tempo: float) -> None:
        """Force the tracker to the given tempo, with a beat due now."""
        folded = _fold_tempo(tempo)
        self._prev_delta = np.zeros(TEMPO_BINS)
        self._prev_delta[_tempo_index(folded)] = 1.0

        new_period = _round(60 / ((self._hop_size / SAMPLE_RATE) * folded))
        period = max(new_period, 1)
        size = self._buffer_size
        distance_from_end = (size - 1 - np.arange(size)) % period
        values = np.where(distance_from_end == 0, 150.0, 10.0)
        _fill(self._cumulative_score, values)
        _fill(self._onset_df, values)

        self._beat_counter = 0
        self._m0 = _round(new_period / 2)

    def fix_tempo(self, tempo: float) -> None:
        """Restrict tracking to tempi around the given tempo."""
        self._prev_delta_fixed = np.zeros(TEMPO_BINS)
        self._prev_delta_fixed[_tempo_index(tempo)] = 1.0
        self._tempo_fixed = True

    def do_not_fix_tempo(self) -> None:
        """Let the tracker follow any tempo again."""
        self._tempo_fixed = False

    # ------------------------------------------------------------------
    def _past_window(self) -> np.ndarray:
        period = self._beat_period
        size = _round(2 * period) - _round(period / 2) + 1
        v = -2 * period + np.arange(size, dtype=float)
        return np.exp(-((self._tightness * np.log(-v / period)) ** 2) / 2)

    def _update_cumulative_score(self, sample: float) -> None:
        size = self._buffer_size
        scores = np.fromiter(self._cumulative_score, dtype=float, count=size)
        start = size - _round(2 * self._beat_period)
        end = size - _round(self._beat_period / 2)
        weighted = scores[start:end + 1] * self._past_window()
        best = max(0.0, float(weighted.max())) if weighted.size else 0.0

        self._latest_cumulative_score = (1 - self._alpha) * sample + self._alpha * best
        self._cumulative_score.append(self._latest_cumulative_score)

    def _predict_beat(self) -> None:
        period = self._beat_period
        window_size = int(period)
        size = self._buffer_size
        scores = np.fromiter(self._cumulative_score, dtype=float, count=size)
        future = np.concatenate((scores, np.zeros(window_size)))

        half = period / 2
        v = np.arange(1, window_size + 1, dtype=float)
        future_window = np.exp(-((v - half) ** 2) / (2 * half**2))
        past_window = self._past_window()

        back = _round(2 * period)
        ahead = _round(period / 2)
        for i in range(size, size + window_size):
            weighted = future[i - back:i - ahead + 1] * past_window
            future[i] = max(0.0, float(weighted.max())) if weighted.size else 0.0

        weighted = future[size:] * future_window
        if weighted.size and float(weighted.max()) > 0:
            self._beat_counter = int(np.argmax(weighted))

        self._m0 = self._beat_counter + ahead

    def _calculate_tempo(self) -> None:
        onset = adaptive_threshold(self._resampled)
        acf = balanced_acf(onset)
        comb = adaptive_threshold(comb_filter_bank_output(acf, self._weighting))
        observation = comb[self._lag_index] + comb[self._half_lag_index]

        if self._tempo_fixed:
            self._prev_delta = self._prev_delta_fixed.copy()

        carried = np.max(self._prev_delta[:, np.newaxis] * self._transition, axis=0)
        delta = normalise(np.maximum(carried, -1.0) * observation)

        best = int(np.argmax(delta)) if float(delta.max()) > -1 else -1
        self._prev_delta = delta

        self._beat_period = float(
            _round((60.0 * SAMPLE_RATE) / ((2 * best + 80) * float(self._hop_size)))
        )
        if self._beat_period > 0:
            self._estimated_tempo = 60.0 / ((self._hop_size / SAMPLE_RATE) * self._beat_period)