"""
Utility modules for configuration, logging, and error handling.
"""

from spectramix.utils.errors import (
    SpectraMixError,
    TransformError,
    InvalidLengthError,
    LengthMismatchError,
    RealOnlyInputError,
    SignalPreparationError,
    DegenerateRangeError,
    NonFiniteSampleError,
    CombinationError,
    EmptySessionError,
    BoundaryError,
    ProtocolViolationError,
    TransformTimeoutError,
    UnsupportedOperationError,
    RemoteTransformError,
    AudioLoadError,
    ConfigurationError,
)
from spectramix.utils.logging import get_logger, setup_logging, JSONFormatter
from spectramix.utils.config import ConfigManager, load_config

__all__ = [
    "SpectraMixError",
    "TransformError",
    "InvalidLengthError",
    "LengthMismatchError",
    "RealOnlyInputError",
    "SignalPreparationError",
    "DegenerateRangeError",
    "NonFiniteSampleError",
    "CombinationError",
    "EmptySessionError",
    "BoundaryError",
    "ProtocolViolationError",
    "TransformTimeoutError",
    "UnsupportedOperationError",
    "RemoteTransformError",
    "AudioLoadError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
    "JSONFormatter",
    "ConfigManager",
    "load_config",
]
