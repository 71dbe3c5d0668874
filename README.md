# beattrack

A real-time beat tracker for audio streams. Feed it audio one hop at a
time, or feed it onset detection function samples you computed yourself,
and it tells you whether a beat falls in the current frame and what the
current tempo estimate is.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Tracking beats in audio

`beattrack.btrack.BTrack(hop_size=512, frame_size=None)` takes a hop size
and a frame size in samples; the frame size defaults to twice the hop
size. Each call to `process_audio_frame` receives at least `hop_size` new
samples (the first `hop_size` are used); the tracker keeps the last
`frame_size` samples internally. The tracker assumes a 48 kHz sample rate.

```python
import numpy as np
from beattrack.btrack import BTrack, beat_time_in_seconds

hop_size, frame_size = 512, 1024
tracker = BTrack(hop_size, frame_size)

audio = np.zeros(48000 * 10)  # your mono signal here
for frame_number, start in enumerate(range(0, len(audio) - hop_size, hop_size)):
    tracker.process_audio_frame(audio[start:start + hop_size])
    if tracker.beat_due_in_current_frame:
        print("beat at", beat_time_in_seconds(frame_number, hop_size, 48000))

print("tempo estimate:", tracker.current_tempo_estimate)
```

If you already have an onset detection function, skip the audio stage and
call `process_onset_detection_function_sample` with one value per hop.

Read-only properties of a tracker:

- `hop_size` — the hop size in samples.
- `beat_due_in_current_frame` — whether a beat falls in the last processed frame.
- `current_tempo_estimate` — the tempo estimate in beats per minute (starts at 120).
- `latest_cumulative_score_value` — the most recent cumulative score value.

`beat_time_in_seconds(frame_number, hop_size, sample_rate)` converts a
frame number into seconds.

### Steering the tempo

- `set_tempo(bpm)` resets the tracker to the given tempo and marks a beat now.
- `fix_tempo(bpm)` keeps the tracker near the given tempo until
  `do_not_fix_tempo()` is called.

Tempi are folded into the 80–160 BPM range by halving or doubling; a tempo
that is not a positive finite number raises `ValueError`.

`update_hop_and_frame_size(hop_size, frame_size)` changes the hop and frame
size of a running tracker and resets its buffers.

## Onset detection functions

`beattrack.onset_detection.OnsetDetectionFunction` computes one detection
function sample per hop of audio. Choose the function with
`OnsetDetectionFunctionType` and the analysis window with
`beattrack.windows.WindowType`:

```python
import numpy as np
from beattrack.onset_detection import OnsetDetectionFunction, OnsetDetectionFunctionType
from beattrack.windows import WindowType

odf = OnsetDetectionFunction(
    512, 1024,
    OnsetDetectionFunctionType.SPECTRAL_DIFFERENCE_HWR,
    WindowType.HAMMING,
)
value = odf.process_frame(np.zeros(512))
```

The frame size must be even and at least 2, and the hop size must be
between 1 and the frame size. `set_function_type` switches the function
without resetting state; `initialise(hop_size, frame_size)` resets all
state for new sizes, keeping the current function and window type unless
new ones are given.

Available functions: energy envelope, energy difference, spectral
difference (plain and half-wave rectified), phase deviation, complex
spectral difference (plain and half-wave rectified), high frequency
content, and high frequency spectral difference (plain and half-wave
rectified).

## Building blocks

- `beattrack.windows` — `rectangular_window`, `hanning_window`,
  `hamming_window`, `blackman_window` and `tukey_window`, `make_window`
  (unknown types give a Hann window), and `princarg` for wrapping phases
  into (-π, π].
- `beattrack.circular_buffer.CircularBuffer` — a fixed-size ring buffer
  indexed from its oldest element, with `append` pushing out the oldest
  value and `resize` changing its size.
- `beattrack.tempo` — the numerical steps of tempo estimation:
  `rayleigh_weighting`, `tempo_transition_matrix`, `mean_of_range`,
  `normalise`, `adaptive_threshold`, `balanced_acf`,
  `comb_filter_bank_output` and `resample`.

## What it does not do

beattrack is a library only. It has no command-line program, does not
read or decode audio files, and does not capture or play audio; you supply
the samples as numbers and act on the beats it reports.