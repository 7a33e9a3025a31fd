"""
Signal preparation for the transform engine.

Coerces arbitrary-length real signals into the power-of-two domain,
maps amplitudes onto [0, 1] and back, and clips output to the playable
audio range.
"""

from typing import Any

import numpy as np

from spectramix.core.models import NormalizedData, validate_finite
from spectramix.utils.errors import DegenerateRangeError, InvalidLengthError


def next_power_of_two(n: int) -> int:
    """Return the smallest power of two >= *n* (n >= 1)."""
    return 1 << (n - 1).bit_length()


def pad_to_power_of_two(samples: Any) -> np.ndarray:
    """
    Zero-pad *samples* up to the next power-of-two length.

    The original values occupy the low indices. Input that is already a
    power of two comes back as an equal-length copy. Never truncates.

    Raises:
        InvalidLengthError: If *samples* is empty
    """
    data = np.asarray(samples, dtype=np.float64).reshape(-1)
    if data.size == 0:
        raise InvalidLengthError("Cannot pad an empty signal", length=0)

    padded = np.zeros(next_power_of_two(data.size), dtype=np.float64)
    padded[: data.size] = data
    return padded


def normalize(samples: Any) -> NormalizedData:
    """
    Map *samples* linearly onto [0, 1].

    Returns:
        NormalizedData: (samples - min) * factor with factor = 1 / (max - min)
        and bias = min

    Raises:
        InvalidLengthError: If *samples* is empty
        NonFiniteSampleError: If any sample is NaN or infinite
        DegenerateRangeError: If every sample has the same value, or the
            range is too narrow or too wide for a finite nonzero factor
    """
    data = np.asarray(samples, dtype=np.float64).reshape(-1)
    if data.size == 0:
        raise InvalidLengthError("Cannot normalize an empty signal", length=0)

    validate_finite(data)

    low = float(np.min(data))
    high = float(np.max(data))
    if high == low:
        raise DegenerateRangeError(
            "Cannot normalize a constant signal (max == min)", value=low
        )

    with np.errstate(over='ignore', divide='ignore'):
        factor = float(np.float64(1.0) / np.float64(high - low))
    if not np.isfinite(factor) or factor == 0.0:
        raise DegenerateRangeError(
            f"Signal range {high - low!r} has no finite nonzero scale factor",
            value=high - low,
        )
    return NormalizedData(data=(data - low) * factor, factor=factor, bias=low)


def denormalize(normalized: NormalizedData) -> np.ndarray:
    """Invert normalize(): data / factor + bias."""
    return np.asarray(normalized.data, dtype=np.float64) / normalized.factor + normalized.bias


def clip(value: float) -> float:
    """Clamp one amplitude to [-1, 1]."""
    if value > 1:
        return 1.0
    if value < -1:
        return -1.0
    return value


def clip_signal(samples: Any) -> np.ndarray:
    """Clamp every amplitude of *samples* to [-1, 1]."""
    return np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
