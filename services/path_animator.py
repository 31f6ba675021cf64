"""
Path animator.

Maps the elapsed time of the live candle to the value currently shown,
a linear move from start to target with a small deterministic wobble.
"""
import math

from config import RoundConstants, DEFAULT_CONSTANTS


def step_progress(elapsed: float, duration: float) -> float:
    """
    Fraction of the step that has elapsed.

    A zero or negative duration is a misconfiguration; it reports 1.0 so the
    caller finalizes the step at once instead of dividing by zero. The caller
    stops animating once the result reaches 1.0.
    """
    if duration <= 0:
        return 1.0
    return max(elapsed / duration, 0.0)


def oscillation(progress: float, constants: RoundConstants = DEFAULT_CONSTANTS) -> float:
    return math.sin(progress * math.pi * 2 * constants.noise_cycles) * constants.noise_amplitude


def interpolate(
    progress: float,
    start_value: float,
    target_value: float,
    noisy: bool = True,
    constants: RoundConstants = DEFAULT_CONSTANTS
) -> float:
    noise = oscillation(progress, constants) if noisy else 0.0
    return start_value + (target_value - start_value) * progress + noise
