"""Shared fixtures for SpectraMix tests."""

import numpy as np
import pytest

from spectramix.core.boundary import ComputationBoundary
from spectramix.core.models import AnalyzedSample, ComplexSignal
from spectramix.core.transform import TransformCache, TransformEngine


@pytest.fixture
def rng():
    """Seeded random generator so failures are reproducible."""
    return np.random.default_rng(1234)


@pytest.fixture
def engine():
    """TransformEngine with its own cache."""
    return TransformEngine(cache=TransformCache())


@pytest.fixture
def boundary(engine):
    """Thread-backed ComputationBoundary, shut down after the test."""
    b = ComputationBoundary(engine=engine, max_workers=2)
    yield b
    b.shutdown()


@pytest.fixture
def make_sample():
    """Factory building an AnalyzedSample directly from spectrum bins."""

    def _make(name="sample", real=(1.0, 0.0), imag=(0.0, 0.0), sample_rate=8):
        return AnalyzedSample(
            name=name,
            time_data=np.zeros(len(real)),
            frequency_data=ComplexSignal(real=list(real), imag=list(imag)),
            sample_rate=sample_rate,
        )

    return _make
