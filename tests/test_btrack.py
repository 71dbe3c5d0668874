import numpy as np
import pytest

from beattrack.btrack import BTrack, beat_time_in_seconds


def _impulse_train(length, period):
    return [1.0 if n % period == 0 else 0.0 for n in range(length)]


def _run(tracker, samples):
    beats = []
    scores = []
    for index, sample in enumerate(samples):
        tracker.process_onset_detection_function_sample(sample)
        scores.append(tracker.latest_cumulative_score_value)
        if tracker.beat_due_in_current_frame:
            beats.append(index)
    return beats, scores


def test_defaults():
    tracker = BTrack()
    assert tracker.hop_size == 512
    assert tracker.current_tempo_estimate == 120.0
    assert tracker.latest_cumulative_score_value == 0.0
    assert tracker.beat_due_in_current_frame is False


def test_default_frame_size_is_twice_hop():
    tracker = BTrack(256)
    assert tracker.hop_size == 256
    assert tracker.odf.frame_size == 512


def test_explicit_frame_size():
    tracker = BTrack(256, 1024)
    assert tracker.odf.frame_size == 1024
    assert tracker.odf.hop_size == 256


def test_invalid_hop_size_raises():
    with pytest.raises(ValueError):
        BTrack(0)


def test_beat_time_in_seconds_zero_frame():
    assert beat_time_in_seconds(0, 512, 44100) == 0.0


def test_beat_time_in_seconds_scales_linearly():
    one = beat_time_in_seconds(100, 512, 44100)
    two = beat_time_in_seconds(200, 512, 44100)
    assert two == pytest.approx(2 * one)
    assert beat_time_in_seconds(48000, 1, 48000) == pytest.approx(1.0)


def test_negative_sample_equals_positive_sample():
    first, second = BTrack(), BTrack()
    first.process_onset_detection_function_sample(-0.5)
    second.process_onset_detection_function_sample(0.5)
    assert first.latest_cumulative_score_value == pytest.approx(
        second.latest_cumulative_score_value
    )


def test_larger_sample_gives_larger_score():
    small, large = BTrack(), BTrack()
    small.process_onset_detection_function_sample(0.1)
    large.process_onset_detection_function_sample(2.0)
    assert large.latest_cumulative_score_value > small.latest_cumulative_score_value > 0


def test_silent_audio_frame_matches_zero_sample():
    audio, direct = BTrack(), BTrack()
    audio.process_audio_frame(np.zeros(512))
    direct.process_onset_detection_function_sample(0.0)
    assert audio.latest_cumulative_score_value == pytest.approx(
        direct.latest_cumulative_score_value
    )


def test_audio_frame_too_short_raises():
    tracker = BTrack()
    with pytest.raises(ValueError):
        tracker.process_audio_frame(np.zeros(10))


def test_impulse_train_produces_regular_beats():
    tracker = BTrack()
    beats, _ = _run(tracker, _impulse_train(1500, 47))
    assert len(beats) > 10
    intervals = np.diff(beats[-10:])
    assert 40 <= float(np.median(intervals)) <= 55


def test_tempo_estimate_tracks_impulse_train():
    tracker = BTrack()
    _run(tracker, _impulse_train(1500, 47))
    assert abs(tracker.current_tempo_estimate - 120.0) < 10


def test_tempo_estimate_stays_in_range():
    rng = np.random.default_rng(1)
    tracker = BTrack()
    _run(tracker, rng.random(1200))
    assert 80.0 <= tracker.current_tempo_estimate <= 161.0


def test_set_tempo_folds_into_range():
    first, second = BTrack(), BTrack()
    first.set_tempo(240.0)
    second.set_tempo(120.0)
    samples = _impulse_train(400, 47)
    beats_a, scores_a = _run(first, samples)
    beats_b, scores_b = _run(second, samples)
    assert beats_a == beats_b
    assert scores_a == pytest.approx(scores_b)


def test_set_tempo_rejects_non_positive():
    tracker = BTrack()
    with pytest.raises(ValueError):
        tracker.set_tempo(0.0)
    with pytest.raises(ValueError):
        tracker.set_tempo(-10.0)


def test_fix_tempo_folds_into_range():
    first, second = BTrack(), BTrack()
    first.fix_tempo(50.0)
    second.fix_tempo(100.0)
    samples = _impulse_train(800, 47)
    beats_a, scores_a = _run(first, samples)
    beats_b, scores_b = _run(second, samples)
    assert beats_a == beats_b
    assert first.current_tempo_estimate == second.current_tempo_estimate


def test_fix_tempo_rejects_non_positive():
    tracker = BTrack()
    with pytest.raises(ValueError):
        tracker.fix_tempo(0.0)


def test_do_not_fix_tempo_restores_free_tracking():
    unfixed, fresh = BTrack(), BTrack()
    unfixed.fix_tempo(90.0)
    unfixed.do_not_fix_tempo()
    samples = _impulse_train(800, 47)
    beats_a, scores_a = _run(unfixed, samples)
    beats_b, scores_b = _run(fresh, samples)
    assert beats_a == beats_b
    assert scores_a == pytest.approx(scores_b)
    assert unfixed.current_tempo_estimate == fresh.current_tempo_estimate


def test_update_hop_and_frame_size():
    tracker = BTrack()
    tracker.update_hop_and_frame_size(1024, 2048)
    assert tracker.hop_size == 1024
    assert tracker.odf.frame_size == 2048
    tracker.process_audio_frame(np.zeros(1024))
    assert tracker.latest_cumulative_score_value > 0


def test_update_hop_matches_fresh_tracker():
    updated, fresh = BTrack(), BTrack(256, 512)
    updated.update_hop_and_frame_size(256, 512)
    samples = _impulse_train(600, 94)
    beats_a, scores_a = _run(updated, samples)
    beats_b, scores_b = _run(fresh, samples)
    assert beats_a == beats_b
    assert scores_a == pytest.approx(scores_b)