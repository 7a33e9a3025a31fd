"""Tests for signals, analyzed samples, the session and the wire models."""

import json
import threading

import numpy as np
import pytest

from spectramix.core.models import (
    AnalysisSession,
    AnalyzedSample,
    ComplexSignal,
    ErrorDescriptor,
    Operation,
    RealSignal,
    TransformRequest,
    TransformResponse,
    signal_from_wire,
    signal_to_wire,
)
from spectramix.utils.errors import (
    InvalidLengthError,
    LengthMismatchError,
    NonFiniteSampleError,
    ProtocolViolationError,
    RemoteTransformError,
    UnsupportedOperationError,
)


class TestSignals:
    def test_complex_requires_equal_lengths(self):
        with pytest.raises(LengthMismatchError) as excinfo:
            ComplexSignal(real=[1, 2, 3], imag=[0, 0])
        assert excinfo.value.real_length == 3
        assert excinfo.value.imag_length == 2

    def test_arrays_are_read_only(self):
        signal = ComplexSignal(real=[1, 2], imag=[0, 0])
        with pytest.raises(ValueError):
            signal.real[0] = 5.0

    def test_construction_copies_input(self):
        source = np.array([1.0, 2.0])
        signal = RealSignal(samples=source)
        source[0] = 9.0
        assert signal.samples[0] == 1.0

    def test_magnitude(self):
        signal = ComplexSignal(real=[3.0], imag=[4.0])
        assert signal.magnitude().tolist() == [5.0]


class TestAnalyzedSample:
    def test_rejects_non_positive_sample_rate(self, make_sample):
        with pytest.raises(ValueError):
            make_sample(sample_rate=0)

    def test_rejects_float_sample_rate(self, make_sample):
        with pytest.raises(ValueError):
            make_sample(sample_rate=44100.0)

    def test_peak_frequency(self):
        n, rate = 64, 64
        t = np.arange(n)
        tone = np.sin(2 * np.pi * 8 * t / n)
        spectrum = np.fft.fft(tone)
        sample = AnalyzedSample(
            name="tone",
            time_data=tone,
            frequency_data=ComplexSignal(real=spectrum.real, imag=spectrum.imag),
            sample_rate=rate,
        )
        assert sample.peak_frequency() == pytest.approx(8.0)

    def test_peak_frequency_of_silence(self, make_sample):
        assert make_sample(real=(0.0, 0.0)).peak_frequency() is None

    def test_to_dict(self, make_sample):
        summary = make_sample(name="kick", real=(1.0, 0.0, 0.0, 0.0), imag=(0.0,) * 4).to_dict()
        assert summary['name'] == "kick"
        assert summary['spectrum_length'] == 4
        assert 'time_data' not in summary
        json.dumps(summary)

    def test_to_dict_with_data(self, make_sample):
        summary = make_sample().to_dict(include_data=True)
        assert summary['frequency_data']['kind'] == 'complex'
        assert summary['time_data'] == [0.0, 0.0]


class TestAnalysisSession:
    def test_preserves_insertion_order(self, make_sample):
        session = AnalysisSession()
        for name in ("a", "b", "c"):
            session.append(make_sample(name=name))
        assert session.names() == ["a", "b", "c"]
        assert session[0].name == "a"
        assert len(session) == 3

    def test_samples_is_a_snapshot(self, make_sample):
        session = AnalysisSession([make_sample(name="a")])
        snapshot = session.samples
        session.append(make_sample(name="b"))
        assert len(snapshot) == 1

    def test_concurrent_appends(self, make_sample):
        session = AnalysisSession()
        sample = make_sample()
        threads = [
            threading.Thread(target=lambda: [session.append(sample) for _ in range(50)])
            for _ in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(session) == 400


class TestOperation:
    @pytest.mark.parametrize("value,expected", [
        ("forward", Operation.FORWARD),
        ("inverse", Operation.INVERSE),
        ("ft", Operation.FORWARD),
        ("ifft", Operation.INVERSE),
        (Operation.INVERSE, Operation.INVERSE),
    ])
    def test_parse(self, value, expected):
        assert Operation.parse(value) is expected

    def test_unknown(self):
        with pytest.raises(UnsupportedOperationError):
            Operation.parse("convolve")


class TestWireFormat:
    def test_signal_tags(self):
        assert signal_to_wire(RealSignal(samples=[1, 2]))['kind'] == 'real'
        assert signal_to_wire(ComplexSignal(real=[1], imag=[2]))['kind'] == 'complex'

    def test_signal_from_wire(self):
        signal = signal_from_wire({'kind': 'complex', 'real': [1, 2], 'imag': [3, 4]})
        assert isinstance(signal, ComplexSignal)
        assert signal.imag.tolist() == [3.0, 4.0]

    def test_untagged_payload_is_rejected(self):
        with pytest.raises(ProtocolViolationError):
            signal_from_wire({'real': [1], 'imag': [0]})

    @pytest.mark.parametrize("payload,index", [
        ({'kind': 'real', 'samples': [1.0, None, 0.0, 0.0]}, 1),
        ({'kind': 'real', 'samples': [float('nan'), 0.0]}, 0),
        ({'kind': 'complex', 'real': [1.0, 2.0], 'imag': [0.0, float('inf')]}, 1),
    ])
    def test_non_finite_values_are_rejected(self, payload, index):
        with pytest.raises(NonFiniteSampleError) as excinfo:
            signal_from_wire(payload)
        assert excinfo.value.index == index

    def test_request_round_trip(self):
        request = TransformRequest(id="r1", operation=Operation.FORWARD, data=RealSignal(samples=[1, 0]))
        parsed = TransformRequest.from_dict(json.loads(json.dumps(request.to_dict())))
        assert parsed.id == "r1"
        assert parsed.operation is Operation.FORWARD
        assert parsed.data.samples.tolist() == [1.0, 0.0]

    def test_request_missing_field(self):
        with pytest.raises(ProtocolViolationError) as excinfo:
            TransformRequest.from_dict({'id': 'r1', 'operation': 'forward'})
        assert excinfo.value.request_id == 'r1'

    def test_response_round_trip(self):
        response = TransformResponse(
            id="r1", operation=Operation.INVERSE,
            result=ComplexSignal(real=[1.0], imag=[0.0]),
        )
        parsed = TransformResponse.from_dict(response.to_dict())
        assert parsed.ok
        assert parsed.result.real.tolist() == [1.0]

    def test_response_missing_id(self):
        with pytest.raises(ProtocolViolationError):
            TransformResponse.from_dict({'operation': 'forward'})


class TestErrorDescriptor:
    def test_round_trip_known_error(self):
        descriptor = ErrorDescriptor.from_exception(InvalidLengthError("bad length", length=3))
        error = ErrorDescriptor.from_dict(descriptor.to_dict()).to_exception()
        assert isinstance(error, InvalidLengthError)
        assert error.length == 3
        assert error.message == "bad length"

    def test_foreign_error(self):
        error = ErrorDescriptor.from_exception(ZeroDivisionError("oops")).to_exception()
        assert isinstance(error, RemoteTransformError)
        assert error.error_type == "ZeroDivisionError"
        assert "oops" in str(error)
