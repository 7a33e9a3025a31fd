"""
Core data models for SpectraMix.

Immutable domain models for signals, analyzed samples, the analysis
session and the transform request/response pair.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from spectramix.utils.errors import (
    LengthMismatchError,
    NonFiniteSampleError,
    ProtocolViolationError,
    SpectraMixError,
    UnsupportedOperationError,
    rebuild_error,
)


def _frozen_array(values: Any) -> np.ndarray:
    """Copy *values* into a read-only 1-D float64 array."""
    array = np.array(values, dtype=np.float64, copy=True).reshape(-1)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class RealSignal:
    """
    Real-valued time-domain signal of arbitrary length.

    The "real only" arm of a transform input; the forward transform
    treats every imaginary part as 0.0.
    """

    samples: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, 'samples', _frozen_array(self.samples))

    def __len__(self) -> int:
        return len(self.samples)


@dataclass(frozen=True)
class ComplexSignal:
    """
    Complex signal stored as two equal-length float64 arrays.

    Holds either a time-domain or a frequency-domain representation.
    """

    real: np.ndarray
    imag: np.ndarray

    def __post_init__(self) -> None:
        real = _frozen_array(self.real)
        imag = _frozen_array(self.imag)
        if len(real) != len(imag):
            raise LengthMismatchError(
                "Real and imaginary components must have the same length.",
                real_length=len(real),
                imag_length=len(imag),
            )
        object.__setattr__(self, 'real', real)
        object.__setattr__(self, 'imag', imag)

    def __len__(self) -> int:
        return len(self.real)

    def magnitude(self) -> np.ndarray:
        """Return |x| for every bin."""
        return np.hypot(self.real, self.imag)


TransformInput = Union[RealSignal, ComplexSignal]


@dataclass(frozen=True)
class NormalizedData:
    """Signal mapped onto [0, 1] plus what is needed to map it back."""

    data: np.ndarray
    factor: float
    bias: float


@dataclass(frozen=True)
class AnalyzedSample:
    """
    One analyzed recording.

    time_data is the original, unpadded signal (for display and playback);
    frequency_data is the spectrum of the power-of-two padded signal.
    """

    name: str
    time_data: np.ndarray
    frequency_data: ComplexSignal
    sample_rate: int
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    def __post_init__(self) -> None:
        """Validate fields."""
        validate_sample_rate(self.sample_rate)
        object.__setattr__(self, 'time_data', _frozen_array(self.time_data))

    @property
    def duration(self) -> float:
        """Duration of the time data in seconds."""
        return len(self.time_data) / self.sample_rate

    @property
    def spectrum_length(self) -> int:
        """Number of frequency bins."""
        return len(self.frequency_data)

    def bin_frequency(self, index: int) -> float:
        """Frequency in Hz of bin *index*."""
        return index * self.sample_rate / self.spectrum_length

    def peak_frequency(self) -> Optional[float]:
        """
        Frequency of the strongest bin below Nyquist.

        The DC bin is skipped unless the spectrum has no other bins.
        Returns None for an all-zero spectrum.
        """
        magnitude = self.frequency_data.magnitude()
        half = magnitude[: len(magnitude) // 2 + 1]
        if half.size == 0 or not np.any(half):
            return None
        search = half[1:] if half.size > 1 and np.any(half[1:]) else half
        offset = half.size - search.size
        return self.bin_frequency(int(np.argmax(search)) + offset)

    def to_dict(self, include_data: bool = False) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            'name': self.name,
            'sample_rate': self.sample_rate,
            'length': len(self.time_data),
            'duration': self.duration,
            'spectrum_length': self.spectrum_length,
            'peak_frequency': self.peak_frequency(),
            'peak_amplitude': (
                float(np.max(np.abs(self.time_data))) if len(self.time_data) else 0.0
            ),
            'created_at': self.created_at.isoformat(),
        }
        if include_data:
            result['time_data'] = self.time_data.tolist()
            result['frequency_data'] = signal_to_wire(self.frequency_data)
        return result


class AnalysisSession:
    """
    Ordered, append-only collection of analyzed samples.

    Insertion order is the combination order; sample 0 is the base.
    Appends are thread-safe so concurrent analyses can commit safely.
    """

    def __init__(self, samples: Optional[Sequence[AnalyzedSample]] = None):
        self._samples: List[AnalyzedSample] = list(samples or [])
        self._lock = threading.Lock()

    def append(self, sample: AnalyzedSample) -> None:
        """Append one sample at the end of the session."""
        with self._lock:
            self._samples.append(sample)

    def extend(self, samples: Sequence[AnalyzedSample]) -> None:
        """Append several samples atomically, preserving their order."""
        with self._lock:
            self._samples.extend(samples)

    @property
    def samples(self) -> Tuple[AnalyzedSample, ...]:
        """Snapshot of the samples in insertion order."""
        with self._lock:
            return tuple(self._samples)

    def names(self) -> List[str]:
        """Names of all samples in insertion order."""
        return [sample.name for sample in self.samples]

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def __iter__(self) -> Iterator[AnalyzedSample]:
        return iter(self.samples)

    def __getitem__(self, index: int) -> AnalyzedSample:
        with self._lock:
            return self._samples[index]


# ---------------------------------------------------------------------------
# Transform request / response
# ---------------------------------------------------------------------------


class Operation(str, Enum):
    """Operations served across the computation boundary."""

    FORWARD = "forward"
    INVERSE = "inverse"

    @classmethod
    def parse(cls, value: Any) -> "Operation":
        """
        Resolve an operation name.

        Accepts the canonical names plus the short "ft"/"ifft" aliases.

        Raises:
            UnsupportedOperationError: If the name is unknown
        """
        if isinstance(value, cls):
            return value
        aliases = {"ft": cls.FORWARD, "fft": cls.FORWARD, "ifft": cls.INVERSE}
        if isinstance(value, str):
            if value in aliases:
                return aliases[value]
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnsupportedOperationError(
            f"Unknown operation: {value}", operation=str(value)
        )


@dataclass(frozen=True)
class ErrorDescriptor:
    """Transportable description of a failure raised inside a worker."""

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(cls, error: BaseException) -> "ErrorDescriptor":
        """Describe *error* so it can cross the boundary."""
        if isinstance(error, SpectraMixError):
            details = error.details if isinstance(error.details, dict) else {}
            return cls(type(error).__name__, error.message, dict(details))
        return cls(type(error).__name__, str(error))

    def to_exception(self) -> SpectraMixError:
        """Rebuild the exception on the caller side."""
        return rebuild_error(self.type, self.message, self.details)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'message': self.message, 'details': self.details}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "ErrorDescriptor":
        return cls(
            type=str(payload.get('type', 'Error')),
            message=str(payload.get('message', '')),
            details=dict(payload.get('details') or {}),
        )


@dataclass(frozen=True)
class TransformRequest:
    """A single transform job sent across the computation boundary."""

    id: str
    operation: Operation
    data: TransformInput

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible wire form."""
        return {
            'id': self.id,
            'operation': self.operation.value,
            'data': signal_to_wire(self.data),
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "TransformRequest":
        """
        Parse the wire form of a request.

        Raises:
            ProtocolViolationError: If a required field is missing or malformed
            UnsupportedOperationError: If the operation is unknown
        """
        if not isinstance(payload, dict):
            raise ProtocolViolationError("Request must be a mapping")
        request_id = payload.get('id')
        for key in ('id', 'operation', 'data'):
            if key not in payload:
                raise ProtocolViolationError(
                    f"Missing property: {key}",
                    request_id=None if request_id is None else str(request_id),
                )
        return cls(
            id=str(request_id),
            operation=Operation.parse(payload['operation']),
            data=signal_from_wire(payload['data']),
        )


@dataclass(frozen=True)
class TransformResponse:
    """
    Answer to exactly one TransformRequest.

    A well-formed response carries either a result or an error, never
    both and never neither.
    """

    id: str
    operation: Operation
    result: Optional[ComplexSignal] = None
    error: Optional[ErrorDescriptor] = None

    @property
    def ok(self) -> bool:
        return self.result is not None and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible wire form."""
        return {
            'id': self.id,
            'operation': self.operation.value,
            'result': signal_to_wire(self.result) if self.result is not None else None,
            'error': self.error.to_dict() if self.error is not None else None,
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "TransformResponse":
        """
        Parse the wire form of a response.

        Raises:
            ProtocolViolationError: If the id or operation is missing
        """
        if not isinstance(payload, dict) or 'id' not in payload:
            raise ProtocolViolationError("Response is missing its id")
        if 'operation' not in payload:
            raise ProtocolViolationError(
                "Response is missing its operation", request_id=str(payload['id'])
            )
        result = payload.get('result')
        error = payload.get('error')
        complex_result = None
        if result is not None:
            parsed = signal_from_wire(result)
            if not isinstance(parsed, ComplexSignal):
                raise ProtocolViolationError(
                    "Response result must be a complex signal",
                    request_id=str(payload['id']),
                )
            complex_result = parsed
        return cls(
            id=str(payload['id']),
            operation=Operation.parse(payload['operation']),
            result=complex_result,
            error=ErrorDescriptor.from_dict(error) if error is not None else None,
        )


def signal_to_wire(signal: TransformInput) -> Dict[str, Any]:
    """Encode a tagged transform input as a JSON-compatible dict."""
    if isinstance(signal, ComplexSignal):
        return {
            'kind': 'complex',
            'real': signal.real.tolist(),
            'imag': signal.imag.tolist(),
        }
    if isinstance(signal, RealSignal):
        return {'kind': 'real', 'samples': signal.samples.tolist()}
    raise TypeError(f"Not a transform input: {type(signal).__name__}")


def signal_from_wire(payload: Any) -> TransformInput:
    """
    Decode a tagged transform input.

    Raises:
        ProtocolViolationError: If the kind tag or its fields are missing
        LengthMismatchError: If a complex payload has unequal components
        NonFiniteSampleError: If a value is null, NaN or infinite
    """
    if not isinstance(payload, dict):
        raise ProtocolViolationError("Signal payload must be a mapping")
    kind = payload.get('kind')
    if kind == 'real' and 'samples' in payload:
        signal: TransformInput = RealSignal(samples=payload['samples'])
        validate_finite(signal.samples)
        return signal
    if kind == 'complex' and 'real' in payload and 'imag' in payload:
        signal = ComplexSignal(real=payload['real'], imag=payload['imag'])
        validate_finite(signal.real)
        validate_finite(signal.imag)
        return signal
    raise ProtocolViolationError(f"Malformed signal payload (kind={kind!r})")


# Validation helpers

def validate_finite(values: np.ndarray) -> None:
    """Validate every value is a finite number (null decodes to NaN)."""
    non_finite = np.flatnonzero(~np.isfinite(values))
    if non_finite.size:
        index = int(non_finite[0])
        raise NonFiniteSampleError(
            f"Non-finite sample {values[index]} at index {index}", index=index
        )


def validate_sample_rate(sample_rate: Any) -> None:
    """Validate sample rate is a positive integer."""
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, np.integer)):
        raise ValueError(f"Sample rate must be an integer, got {sample_rate!r}")
    if sample_rate <= 0:
        raise ValueError(f"Sample rate must be positive, got {sample_rate}")
