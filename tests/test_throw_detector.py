import numpy as np
import pytest
from src.handpose.config import ThrowConfig
from src.handpose.throw_detector import ThrowDetector


@pytest.fixture
def detector():
    return ThrowDetector(ThrowConfig())


def feed_linear(detector, total_offset, count=5, spacing=0.02, start=(0.0, 0.0, 0.0), t0=0.0):
    """Add ``count`` evenly spaced samples covering ``total_offset`` metres along x."""
    start = np.asarray(start, dtype=float)
    step = np.array([total_offset / (count - 1), 0.0, 0.0])
    for i in range(count):
        detector.add_sample(start + step * i, t0 + spacing * i)
    return t0 + spacing * (count - 1)


def test_slow_motion_is_not_a_throw(detector):
    now = feed_linear(detector, 0.1)

    velocity = detector.estimate_velocity()
    np.testing.assert_allclose(velocity, [1.25, 0.0, 0.0])

    result = detector.detect_throw(now)
    assert result.is_throw is False
    np.testing.assert_array_equal(result.velocity, np.zeros(3))


def test_fast_flick_is_a_throw(detector):
    now = feed_linear(detector, 0.15)

    result = detector.detect_throw(now)
    assert result.is_throw is True
    np.testing.assert_allclose(result.velocity, [1.875, 0.0, 0.0])
    assert result.speed == pytest.approx(1.875)
    assert detector.last_throw_time == now


def test_cooldown_blocks_repeat(detector):
    now = feed_linear(detector, 0.15)
    assert detector.detect_throw(now).is_throw

    # Still moving fast, but within the cooldown window
    detector.add_sample((0.25, 0.0, 0.0), now + 0.02)
    result = detector.detect_throw(now + 0.1)
    assert result.is_throw is False
    np.testing.assert_array_equal(result.velocity, np.zeros(3))

    # Exactly at the cooldown boundary still blocked
    assert detector.in_cooldown(now + 0.5)
    assert not detector.in_cooldown(now + 0.51)


def test_throw_again_after_cooldown(detector):
    now = feed_linear(detector, 0.15)
    assert detector.detect_throw(now).is_throw

    later = feed_linear(detector, 0.15, start=(1.0, 0.0, 0.0), t0=now + 1.0)
    assert detector.detect_throw(later).is_throw


def test_cooldown_is_idempotent(detector):
    now = feed_linear(detector, 0.15)
    assert detector.detect_throw(now).is_throw
    for _ in range(5):
        assert detector.detect_throw(now + 0.2).is_throw is False
    assert detector.last_throw_time == now


def test_too_few_samples(detector):
    for i in range(4):
        detector.add_sample((i * 1.0, 0.0, 0.0), i * 0.02)
    assert detector.estimate_velocity() is None
    assert detector.detect_throw(0.06).is_throw is False


def test_zero_time_span(detector):
    # Samples all stamped with the same time: no measurable interval
    for i in range(5):
        detector.add_sample((i * 1.0, 0.0, 0.0), 1.0)
    assert detector.estimate_velocity() is None
    assert detector.detect_throw(1.0).is_throw is False


def test_buffer_capacity_evicts_oldest(detector):
    for i in range(20):
        detector.add_sample((float(i), 0.0, 0.0), i * 0.01)

    assert len(detector) == 15
    samples = detector.samples
    assert samples[0].position[0] == 5.0
    assert samples[-1].position[0] == 19.0
    times = [s.timestamp for s in samples]
    assert times == sorted(times)


def test_velocity_uses_most_recent_window(detector):
    # Slow start, then a fast tail: only the last five samples count
    for i in range(10):
        detector.add_sample((0.001 * i, 0.0, 0.0), i * 0.02)
    for i in range(5):
        detector.add_sample((0.01 + 0.05 * i, 0.0, 0.0), 0.2 + i * 0.02)

    velocity = detector.estimate_velocity()
    assert velocity[0] == pytest.approx(2.5)


def test_reset_clears_samples_but_keeps_cooldown(detector):
    now = feed_linear(detector, 0.15)
    assert detector.detect_throw(now).is_throw

    detector.reset()
    assert len(detector) == 0
    assert detector.in_cooldown(now + 0.1)


def test_no_cooldown_before_first_throw(detector):
    assert detector.last_throw_time is None
    assert not detector.in_cooldown(0.0)


def test_custom_config():
    detector = ThrowDetector(ThrowConfig(buffer_size=4, min_samples=3, speed_threshold=0.5))
    detector.add_sample((0.0, 0.0, 0.0), 0.0)
    detector.add_sample((0.01, 0.0, 0.0), 0.01)
    detector.add_sample((0.02, 0.0, 0.0), 0.02)
    assert detector.detect_throw(0.02).is_throw
