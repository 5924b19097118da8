"""Pytest configuration and shared fixtures for mvopt tests.

This module provides:
- A deterministic numpy RNG fixture
- Evaluation-counting wrappers for objective and gradient callables
"""

import os
from typing import Callable

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


class CallCounter:
    """Wrap a callable and count how often it is invoked."""

    def __init__(self, fn: Callable) -> None:
        self.fn = fn
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        return self.fn(*args, **kwargs)


@pytest.fixture
def counted() -> Callable[[Callable], CallCounter]:
    """Factory fixture returning evaluation-counting wrappers."""
    return CallCounter
