"""Shared fixtures for metricsbench tests."""

import numpy as np
import pytest

FIXED_TS = 1_700_000_123_456


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_TS


@pytest.fixture
def ticking_clock():
    """Clock that moves forward one minute on every call."""
    state = {"now": FIXED_TS}

    def clock() -> int:
        state["now"] += 60_000
        return state["now"]

    return clock
