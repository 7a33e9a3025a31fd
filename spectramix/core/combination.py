"""
Bin-wise spectral combination.

Spectra are merged with a magnitude-preserving multiply rather than a
true complex product: for each bin pair (a, b) of one channel,

    combined = sign(a * b) * sqrt(a² + b²)

applied independently to the real and to the imaginary channel. Magnitude
contributions accumulate across samples; the sign follows the product.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from spectramix.core.models import ComplexSignal
from spectramix.utils.config import LENGTH_POLICIES
from spectramix.utils.errors import ConfigurationError, EmptySessionError

ZERO_EXTEND = "zero_extend"
TRUNCATE = "truncate"

logger = logging.getLogger("combination")


def _align(
    a: np.ndarray, b: np.ndarray, length_policy: str
) -> Tuple[np.ndarray, np.ndarray]:
    """Bring two channels to a common length under *length_policy*."""
    if length_policy not in LENGTH_POLICIES:
        raise ConfigurationError(
            f"Unknown length policy: {length_policy}",
            config_key="combination.length_policy",
        )
    if len(a) == len(b):
        return a, b
    if length_policy == TRUNCATE:
        n = min(len(a), len(b))
        return a[:n], b[:n]
    n = max(len(a), len(b))
    return (
        np.pad(a, (0, n - len(a))),
        np.pad(b, (0, n - len(b))),
    )


def magnitude_preserving_multiply(
    a: Sequence[float], b: Sequence[float], length_policy: str = ZERO_EXTEND
) -> np.ndarray:
    """
    Combine two channels bin by bin: sign(a*b) * sqrt(a² + b²).

    Args:
        a: First channel (real or imaginary bins)
        b: Second channel
        length_policy: "zero_extend" pads the shorter channel with zeros,
            "truncate" cuts both to the shorter length

    Returns:
        np.ndarray: Combined channel
    """
    x, y = _align(
        np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64), length_policy
    )
    return np.sign(x * y) * np.sqrt(x * x + y * y)


def combine_pair(
    base: ComplexSignal, other: ComplexSignal, length_policy: str = ZERO_EXTEND
) -> ComplexSignal:
    """Fold *other* into *base*, real and imaginary channels independently."""
    if len(base) != len(other):
        logger.debug(
            f"Combining spectra of different lengths ({len(base)} vs {len(other)}) "
            f"with policy {length_policy}"
        )
    return ComplexSignal(
        real=magnitude_preserving_multiply(base.real, other.real, length_policy),
        imag=magnitude_preserving_multiply(base.imag, other.imag, length_policy),
    )


def combine_spectra(
    spectra: Sequence[ComplexSignal], length_policy: str = ZERO_EXTEND
) -> ComplexSignal:
    """
    Sequentially fold every spectrum into the first one.

    A single spectrum is returned unchanged (as a new signal).

    Raises:
        EmptySessionError: If *spectra* is empty
    """
    if not spectra:
        raise EmptySessionError("No spectra to combine")

    combined = ComplexSignal(real=spectra[0].real, imag=spectra[0].imag)
    for spectrum in spectra[1:]:
        combined = combine_pair(combined, spectrum, length_policy)
    return combined
