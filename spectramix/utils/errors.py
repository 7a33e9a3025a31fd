"""
Custom exceptions for SpectraMix.

This module defines a hierarchy of exceptions for handling the error
conditions of the transform engine, signal preparation, the combination
pipeline and the computation boundary.
"""

from typing import Any, Dict, Optional, Type


class SpectraMixError(Exception):
    """Base exception for all SpectraMix errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message


# ---------------------------------------------------------------------------
# Transform engine
# ---------------------------------------------------------------------------


class TransformError(SpectraMixError):
    """Raised when a forward or inverse transform cannot run."""


class InvalidLengthError(TransformError):
    """Raised when a signal length is not a power of two."""

    def __init__(self, message: str, length: Optional[int] = None):
        super().__init__(message, details={"length": length})
        self.length = length


class LengthMismatchError(TransformError):
    """Raised when real and imaginary components differ in length."""

    def __init__(
        self,
        message: str,
        real_length: Optional[int] = None,
        imag_length: Optional[int] = None,
    ):
        super().__init__(message)
        self.real_length = real_length
        self.imag_length = imag_length
        self.details = {"real_length": real_length, "imag_length": imag_length}


class RealOnlyInputError(TransformError):
    """Raised when the inverse transform is given a real-only signal."""


# ---------------------------------------------------------------------------
# Signal preparation
# ---------------------------------------------------------------------------


class SignalPreparationError(SpectraMixError):
    """Raised when a signal cannot be prepared for the transform engine."""


class DegenerateRangeError(SignalPreparationError):
    """Raised when normalizing a constant signal (max == min)."""

    def __init__(self, message: str, value: Optional[float] = None):
        super().__init__(message, details={"value": value})
        self.value = value


class NonFiniteSampleError(SignalPreparationError):
    """Raised when a signal contains NaN or infinite samples."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message, details={"index": index})
        self.index = index


# ---------------------------------------------------------------------------
# Combination pipeline
# ---------------------------------------------------------------------------


class CombinationError(SpectraMixError):
    """Raised when spectra cannot be combined."""


class EmptySessionError(CombinationError):
    """Raised when combining a session that holds no analyzed samples."""


# ---------------------------------------------------------------------------
# Computation boundary
# ---------------------------------------------------------------------------


class BoundaryError(SpectraMixError):
    """Raised when a request fails at the computation boundary."""


class ProtocolViolationError(BoundaryError):
    """Raised when a response breaks the request/response contract."""

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message, details={"request_id": request_id})
        self.request_id = request_id


class TransformTimeoutError(BoundaryError):
    """Raised when a response does not arrive within the timeout."""

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(message)
        self.request_id = request_id
        self.timeout = timeout
        self.details = {"request_id": request_id, "timeout": timeout}


class UnsupportedOperationError(BoundaryError):
    """Raised when a request names an operation the worker does not know."""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message, details={"operation": operation})
        self.operation = operation


class RemoteTransformError(BoundaryError):
    """Raised for worker failures whose type is not a SpectraMix error."""

    def __init__(self, message: str, error_type: Optional[str] = None):
        super().__init__(message, details={"error_type": error_type})
        self.error_type = error_type


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class AudioLoadError(SpectraMixError):
    """Raised when an audio file cannot be loaded."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(message, details={"file_path": file_path})
        self.file_path = file_path


class ConfigurationError(SpectraMixError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key
        self.details = {"config_key": config_key}


# Errors that may cross the computation boundary as an ErrorDescriptor.
_TRANSPORTABLE: Dict[str, Type[SpectraMixError]] = {
    cls.__name__: cls
    for cls in (
        TransformError,
        InvalidLengthError,
        LengthMismatchError,
        RealOnlyInputError,
        SignalPreparationError,
        DegenerateRangeError,
        NonFiniteSampleError,
        ProtocolViolationError,
        UnsupportedOperationError,
    )
}


def rebuild_error(
    error_type: str, message: str, details: Optional[Dict[str, Any]] = None
) -> SpectraMixError:
    """
    Rebuild an exception from its transported form.

    Known SpectraMix errors come back as their own class with the
    original message and details; anything else becomes a
    RemoteTransformError.

    Args:
        error_type: Class name recorded by the worker
        message: Original error message
        details: Original structured details

    Returns:
        SpectraMixError: Exception ready to raise on the caller side
    """
    cls = _TRANSPORTABLE.get(error_type)
    if cls is None:
        error: SpectraMixError = RemoteTransformError(message, error_type=error_type)
    else:
        # Bypass the subclass signatures; message and details are restored as-is
        error = cls.__new__(cls)
        SpectraMixError.__init__(error, message)
    if details:
        error.details = dict(details)
        for key, value in details.items():
            if not hasattr(error, key):
                setattr(error, key, value)
    return error
