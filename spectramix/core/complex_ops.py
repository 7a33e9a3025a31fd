"""
Scalar complex arithmetic on (real, imag) pairs.

These are the building blocks of the FFT butterfly. They operate on plain
Python floats so results follow IEEE-754 double semantics exactly.
"""

import math
from typing import NamedTuple


class ComplexSample(NamedTuple):
    """One complex value as a (real, imag) pair."""

    real: float
    imag: float


def add(a: ComplexSample, b: ComplexSample) -> ComplexSample:
    """Return a + b."""
    return ComplexSample(a.real + b.real, a.imag + b.imag)


def subtract(a: ComplexSample, b: ComplexSample) -> ComplexSample:
    """Return a - b."""
    return ComplexSample(a.real - b.real, a.imag - b.imag)


def multiply(a: ComplexSample, b: ComplexSample) -> ComplexSample:
    """Return the complex product a * b."""
    return ComplexSample(
        a.real * b.real - a.imag * b.imag,
        a.real * b.imag + a.imag * b.real,
    )


def conjugate(a: ComplexSample) -> ComplexSample:
    """Return the complex conjugate of a."""
    return ComplexSample(a.real, -a.imag)


def twiddle(k: int, n: int) -> ComplexSample:
    """
    Return the twiddle factor e^(-2πik/n).

    Args:
        k: Index within the current butterfly stage
        n: Size of the current butterfly stage

    Returns:
        ComplexSample: (cos(-2πk/n), sin(-2πk/n))
    """
    x = -2.0 * math.pi * k / n
    return ComplexSample(math.cos(x), math.sin(x))
