import math
import random

import pytest

from config import DEFAULT_CONSTANTS, RoundConstants
from models import AxisBounds
from services.axis_bounds import default_bounds, update_bounds, force_floor, contains
from services.path_animator import step_progress, oscillation, interpolate
from services.random_walk import random_walk_step, target_range
from services.signal_service import detect_moonshot, classify_trend, TREND_UP, TREND_FLAT, TREND_RUGGED

from conftest import FixedRandom


# ==================== random walk ====================

def test_random_walk_stays_within_five_of_previous_target():
    rng = random.Random(1234)
    for _ in range(10_000):
        step = random_walk_step(50.0, False, rng)
        assert step.base == 50.0
        assert 45.0 <= step.target <= 55.0


def test_first_step_starts_from_initial_value():
    step = random_walk_step(42.0, True, random.Random(1))
    assert step.base == DEFAULT_CONSTANTS.initial_value
    assert 0.0 <= step.target <= 6.0


def test_target_range_is_clamped_at_floor_and_ceiling():
    assert target_range(2.0) == (0.0, 7.0)
    assert target_range(98.0) == (93.0, 100.0)
    assert target_range(50.0) == (45.0, 55.0)


def test_random_walk_uses_low_and_high_ends_of_range():
    assert random_walk_step(3.0, False, FixedRandom(0.0)).target == 0.0
    assert random_walk_step(97.0, False, FixedRandom(0.999999)).target == pytest.approx(100.0, abs=1e-4)


def test_random_walk_never_leaves_hard_limits_near_extremes():
    rng = random.Random(99)
    for prev in (0.0, 0.5, 99.5, 100.0):
        for _ in range(1_000):
            target = random_walk_step(prev, False, rng).target
            assert 0.0 <= target <= 100.0


# ==================== path animator ====================

def test_progress_is_elapsed_over_duration():
    assert step_progress(1.5, 3.0) == pytest.approx(0.5)
    assert step_progress(-1.0, 3.0) == 0.0


@pytest.mark.parametrize("duration", [0.0, -2.0])
def test_degenerate_duration_finishes_immediately(duration):
    assert step_progress(0.0, duration) == 1.0
    assert step_progress(5.0, duration) == 1.0


def test_oscillation_peaks_at_one_sixteenth():
    assert oscillation(0.0) == pytest.approx(0.0)
    assert oscillation(1 / 16) == pytest.approx(0.05)
    assert oscillation(3 / 16) == pytest.approx(-0.05)


def test_interpolate_adds_noise_to_linear_path():
    linear = 1.0 + (10.0 - 1.0) * (1 / 16)
    assert interpolate(1 / 16, 1.0, 10.0) == pytest.approx(linear + 0.05)
    assert interpolate(1 / 16, 1.0, 10.0, noisy=False) == pytest.approx(linear)
    assert interpolate(0.0, 4.0, 8.0) == pytest.approx(4.0)


def test_interpolate_matches_sine_formula():
    progress = 0.37
    expected = 2.0 + (5.0 - 2.0) * progress + math.sin(progress * math.pi * 8) * 0.05
    assert interpolate(progress, 2.0, 5.0) == pytest.approx(expected)


# ==================== axis bounds ====================

def test_default_bounds():
    bounds = default_bounds()
    assert (bounds.min, bounds.max) == (0.5, 1.5)


def test_bounds_snap_to_half_grid():
    bounds = default_bounds()
    update_bounds(bounds, 10.0)
    assert (bounds.min, bounds.max) == (0.5, 10.0)

    update_bounds(bounds, 10.01)
    assert bounds.max == 10.5

    update_bounds(bounds, 0.26)
    assert bounds.min == 0.0


def test_bounds_never_shrink():
    bounds = AxisBounds(min=-0.5, max=12.0)
    for value in (1.0, 5.0, 0.0, 11.9):
        update_bounds(bounds, value)
    assert (bounds.min, bounds.max) == (-0.5, 12.0)


def test_force_floor_only_lowers_minimum():
    bounds = default_bounds()
    force_floor(bounds, 0.0)
    assert bounds.min == 0.0

    lower = AxisBounds(min=-0.5, max=3.0)
    force_floor(lower, 0.0)
    assert lower.min == -0.5


def test_contains():
    bounds = AxisBounds(min=0.5, max=1.5)
    assert contains(bounds, 0.5)
    assert contains(bounds, 1.5)
    assert not contains(bounds, 1.51)


def test_bounds_use_configured_grid():
    constants = RoundConstants(bounds_grid=1.0)
    bounds = default_bounds(constants)
    update_bounds(bounds, 3.2, constants)
    assert bounds.max == 4.0


# ==================== signals ====================

def test_moonshot_requires_more_than_five_percent():
    assert detect_moonshot(10.0, 10.6)
    assert not detect_moonshot(10.0, 10.5)
    assert not detect_moonshot(10.0, 9.0)
    assert detect_moonshot(0.0, 3.0)


def test_trend_classification():
    assert classify_trend(1.0, 1.2, False) == TREND_UP
    assert classify_trend(1.0, 0.9, False) == TREND_FLAT
    assert classify_trend(1.0, 1.2, True) == TREND_RUGGED
