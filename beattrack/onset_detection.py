"""Onset detection functions computed frame by frame from audio."""

from __future__ import annotations

from collections.abc import Sequence
from enum import IntEnum

import numpy as np

from beattrack.windows import WindowType, make_window, princarg


class OnsetDetectionFunctionType(IntEnum):
    """The kind of onset detection function to compute."""

    ENERGY_ENVELOPE = 0
    ENERGY_DIFFERENCE = 1
    SPECTRAL_DIFFERENCE = 2
    SPECTRAL_DIFFERENCE_HWR = 3
    PHASE_DEVIATION = 4
    COMPLEX_SPECTRAL_DIFFERENCE = 5
    COMPLEX_SPECTRAL_DIFFERENCE_HWR = 6
    HIGH_FREQUENCY_CONTENT = 7
    HIGH_FREQUENCY_SPECTRAL_DIFFERENCE = 8
    HIGH_FREQUENCY_SPECTRAL_DIFFERENCE_HWR = 9


def _coerce_type(function_type: OnsetDetectionFunctionType | int) -> OnsetDetectionFunctionType | int:
    try:
        return OnsetDetectionFunctionType(function_type)
    except ValueError:
        return int(function_type)


class OnsetDetectionFunction:
    """Turns successive hops of audio into onset detection function samples.

    Each call to :meth:`process_frame` shifts ``hop_size`` new samples into an
    internal frame of ``frame_size`` samples and returns one detection value.
    A function type outside :class:`OnsetDetectionFunctionType` yields 1.0.
    """

    def __init__(
        self,
        hop_size: int = 512,
        frame_size: int = 1024,
        function_type: OnsetDetectionFunctionType | int = (
            OnsetDetectionFunctionType.COMPLEX_SPECTRAL_DIFFERENCE_HWR
        ),
        window_type: WindowType | int = WindowType.HANNING,
    ) -> None:
        self.function_type: OnsetDetectionFunctionType | int = _coerce_type(function_type)
        self.window_type: WindowType | int = window_type
        self.initialise(hop_size, frame_size, function_type, window_type)

    def initialise(
        self,
        hop_size: int,
        frame_size: int,
        function_type: OnsetDetectionFunctionType | int | None = None,
        window_type: WindowType | int | None = None,
    ) -> None:
        """Reset all state for new sizes; omitted types keep their current value."""
        if hop_size < 1:
            raise ValueError("hop size must be positive")
        if frame_size < 2 or frame_size % 2:
            raise ValueError("frame size must be an even number of at least 2")
        if hop_size > frame_size:
            raise ValueError("hop size must not exceed frame size")

        if function_type is not None:
            self.function_type = _coerce_type(function_type)
        if window_type is not None:
            self.window_type = window_type

        self.hop_size = hop_size
        self.frame_size = frame_size
        self._window = make_window(self.window_type, frame_size)
        self._frame = np.zeros(frame_size)
        self._mag_spec = np.zeros(frame_size)
        self._prev_mag_spec = np.zeros(frame_size)
        self._phase = np.zeros(frame_size)
        self._prev_phase = np.zeros(frame_size)
        self._prev_phase2 = np.zeros(frame_size)
        self._prev_energy_sum = 0.0
        self._bin_weights = np.arange(1, frame_size + 1, dtype=float)

    def set_function_type(self, function_type: OnsetDetectionFunctionType | int) -> None:
        """Switch the detection function without resetting any state."""
        self.function_type = _coerce_type(function_type)

    def process_frame(self, buffer: Sequence[float] | np.ndarray) -> float:
        """Add one hop of audio and return the detection function sample."""
        samples = np.asarray(buffer, dtype=float).ravel()
        if samples.size < self.hop_size:
            raise ValueError(
                f"expected at least {self.hop_size} samples, got {samples.size}"
            )
        self._frame = np.concatenate(
            (self._frame[self.hop_size:], samples[: self.hop_size])
        )

        handler = self._HANDLERS.get(self.function_type)
        if handler is None:
            return 1.0
        return float(handler(self))

    def _spectrum(self) -> np.ndarray:
        half = self.frame_size // 2
        windowed = self._frame * self._window
        return np.fft.fft(np.concatenate((windowed[half:], windowed[:half])))

    def _symmetric_magnitude(self, spectrum: np.ndarray) -> np.ndarray:
        half = self.frame_size // 2
        mag = np.empty(self.frame_size)
        mag[: half + 1] = np.abs(spectrum[: half + 1])
        mag[half + 1:] = mag[1:half][::-1]
        return mag

    def _energy_envelope(self) -> float:
        return float(np.sum(self._frame * self._frame))

    def _energy_difference(self) -> float:
        total = float(np.sum(self._frame * self._frame))
        sample = total - self._prev_energy_sum
        self._prev_energy_sum = total
        return sample if sample > 0 else 0.0

    def _spectral_difference(self) -> float:
        self._mag_spec = self._symmetric_magnitude(self._spectrum())
        total = float(np.sum(np.abs(self._mag_spec - self._prev_mag_spec)))
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    def _spectral_difference_hwr(self) -> float:
        self._mag_spec = self._symmetric_magnitude(self._spectrum())
        diff = self._mag_spec - self._prev_mag_spec
        total = float(np.sum(diff[diff > 0]))
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    def _shift_phase(self) -> None:
        self._prev_phase2 = self._prev_phase
        self._prev_phase = self._phase.copy()

    def _phase_deviation(self) -> float:
        spectrum = self._spectrum()
        self._phase = np.angle(spectrum)
        self._mag_spec = np.abs(spectrum)
        deviation = self._phase - 2.0 * self._prev_phase + self._prev_phase2
        total = sum(abs(princarg(float(d))) for d in deviation[self._mag_spec > 0.1])
        self._shift_phase()
        return total

    def _complex_terms(self) -> np.ndarray:
        spectrum = self._spectrum()
        self._phase = np.angle(spectrum)
        self._mag_spec = np.abs(spectrum)
        deviation = self._phase - 2.0 * self._prev_phase + self._prev_phase2
        squared = (
            self._mag_spec**2
            + self._prev_mag_spec**2
            - 2.0 * self._mag_spec * self._prev_mag_spec * np.cos(deviation)
        )
        return np.sqrt(np.maximum(squared, 0.0))

    def _complex_spectral_difference(self) -> float:
        csd = self._complex_terms()
        total = float(np.sum(csd))
        self._shift_phase()
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    def _complex_spectral_difference_hwr(self) -> float:
        csd = self._complex_terms()
        rising = (self._mag_spec - self._prev_mag_spec) > 0
        total = float(np.sum(csd[rising]))
        self._shift_phase()
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    def _high_frequency_content(self) -> float:
        self._mag_spec = np.abs(self._spectrum())
        total = float(np.sum(self._mag_spec * self._bin_weights))
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    def _high_frequency_spectral_difference(self) -> float:
        self._mag_spec = np.abs(self._spectrum())
        diff = np.abs(self._mag_spec - self._prev_mag_spec)
        total = float(np.sum(diff * self._bin_weights))
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    def _high_frequency_spectral_difference_hwr(self) -> float:
        self._mag_spec = np.abs(self._spectrum())
        diff = self._mag_spec - self._prev_mag_spec
        rising = diff > 0
        total = float(np.sum(diff[rising] * self._bin_weights[rising]))
        self._prev_mag_spec = self._mag_spec.copy()
        return total

    _HANDLERS = {
        OnsetDetectionFunctionType.ENERGY_ENVELOPE: _energy_envelope,
        OnsetDetectionFunctionType.ENERGY_DIFFERENCE: _energy_difference,
        OnsetDetectionFunctionType.SPECTRAL_DIFFERENCE: _spectral_difference,
        OnsetDetectionFunctionType.SPECTRAL_DIFFERENCE_HWR: _spectral_difference_hwr,
        OnsetDetectionFunctionType.PHASE_DEVIATION: _phase_deviation,
        OnsetDetectionFunctionType.COMPLEX_SPECTRAL_DIFFERENCE: _complex_spectral_difference,
        OnsetDetectionFunctionType.COMPLEX_SPECTRAL_DIFFERENCE_HWR: _complex_spectral_difference_hwr,
        OnsetDetectionFunctionType.HIGH_FREQUENCY_CONTENT: _high_frequency_content,
        OnsetDetectionFunctionType.HIGH_FREQUENCY_SPECTRAL_DIFFERENCE: _high_frequency_spectral_difference,
        OnsetDetectionFunctionType.HIGH_FREQUENCY_SPECTRAL_DIFFERENCE_HWR: _high_frequency_spectral_difference_hwr,
    }