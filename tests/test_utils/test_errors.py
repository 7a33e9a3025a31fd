"""Tests for the exception hierarchy and error transport."""

import pytest

from spectramix.utils.errors import (
    BoundaryError,
    DegenerateRangeError,
    EmptySessionError,
    InvalidLengthError,
    LengthMismatchError,
    NonFiniteSampleError,
    ProtocolViolationError,
    RealOnlyInputError,
    RemoteTransformError,
    SpectraMixError,
    TransformError,
    TransformTimeoutError,
    rebuild_error,
)


class TestHierarchy:
    @pytest.mark.parametrize("error", [
        InvalidLengthError("bad", length=3),
        LengthMismatchError("bad", real_length=2, imag_length=1),
        RealOnlyInputError("bad"),
    ])
    def test_transform_errors(self, error):
        assert isinstance(error, TransformError)
        assert isinstance(error, SpectraMixError)

    def test_boundary_errors(self):
        assert issubclass(ProtocolViolationError, BoundaryError)
        assert issubclass(TransformTimeoutError, BoundaryError)
        assert issubclass(RemoteTransformError, BoundaryError)

    def test_str_includes_details(self):
        error = InvalidLengthError("Length must be a power of two", length=6)
        assert str(error) == "Length must be a power of two (Details: {'length': 6})"

    def test_str_without_details(self):
        assert str(EmptySessionError("No samples to combine")) == "No samples to combine"

    def test_structured_fields(self):
        error = DegenerateRangeError("constant", value=0.5)
        assert error.value == 0.5
        assert error.details == {"value": 0.5}


class TestRebuildError:
    def test_known_type(self):
        error = rebuild_error(
            "LengthMismatchError", "mismatch", {"real_length": 4, "imag_length": 2}
        )
        assert type(error) is LengthMismatchError
        assert error.message == "mismatch"
        assert error.real_length == 4
        assert error.imag_length == 2

    def test_known_type_without_details(self):
        error = rebuild_error("RealOnlyInputError", "real input")
        assert type(error) is RealOnlyInputError
        assert str(error) == "real input"

    def test_unknown_type(self):
        error = rebuild_error("KeyError", "'x'")
        assert isinstance(error, RemoteTransformError)
        assert error.error_type == "KeyError"
        assert error.message == "'x'"

    def test_non_finite_sample_error_is_transportable(self):
        error = rebuild_error("NonFiniteSampleError", "nan", {"index": 2})
        assert type(error) is NonFiniteSampleError
        assert error.index == 2

    def test_rebuilt_error_is_raisable(self):
        with pytest.raises(InvalidLengthError) as excinfo:
            raise rebuild_error("InvalidLengthError", "bad", {"length": 5})
        assert excinfo.value.length == 5
