import heapq

import pytest

from config import RoundConstants
from services.random_walk import WalkStep


class FakeHandle:
    def __init__(self, when, seq, callback, args):
        self.when = when
        self.seq = seq
        self.callback = callback
        self.args = args
        self.cancelled = False
        self.ran = False

    def cancel(self):
        self.cancelled = True

    def run(self):
        self.ran = True
        self.callback(*self.args)


class FakeLoop:
    """Virtual-time stand-in for the asyncio loop: time() and call_later()."""

    def __init__(self):
        self.now = 0.0
        self.handles = []
        self._queue = []
        self._seq = 0

    def time(self):
        return self.now

    def call_later(self, delay, callback, *args):
        handle = FakeHandle(self.now + delay, self._seq, callback, args)
        self._seq += 1
        self.handles.append(handle)
        heapq.heappush(self._queue, (handle.when, handle.seq, handle))
        return handle

    def advance(self, seconds):
        deadline = self.now + seconds
        while self._queue and self._queue[0][0] <= deadline:
            when, _, handle = heapq.heappop(self._queue)
            self.now = max(self.now, when)
            if not handle.cancelled:
                handle.run()
        self.now = deadline

    def run_until(self, predicate, timeout=200.0, step=0.01):
        waited = 0.0
        while not predicate():
            if waited >= timeout:
                raise AssertionError(f"condition not reached within {timeout}s of virtual time")
            self.advance(step)
            waited += step

    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.ran]


class FixedRandom:
    """rng stub: random() always returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def scripted_generator(targets):
    """Step generator returning the given targets in order, then repeating the base."""
    remaining = list(targets)

    def generate(prev_target, is_first_step, rng, constants):
        base = constants.initial_value if is_first_step else prev_target
        target = remaining.pop(0) if remaining else base
        return WalkStep(base=base, target=target)

    return generate


@pytest.fixture
def loop():
    return FakeLoop()


@pytest.fixture
def short_constants():
    # 5 steps of 1s finish well before the 100s ceiling
    return RoundConstants(step_count=5, step_duration=1.0, max_round_duration=100.0)
