"""Tests for SpectralPipeline."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from spectramix.core.combination import TRUNCATE
from spectramix.core.models import AnalysisSession, ComplexSignal
from spectramix.core.pipeline import SpectralPipeline, create_pipeline
from spectramix.utils.errors import EmptySessionError, InvalidLengthError


@pytest.fixture
def pipeline(boundary):
    return SpectralPipeline(boundary=boundary)


class TestAnalyze:
    def test_analyze_pads_and_stores(self, pipeline):
        sample = asyncio.run(pipeline.analyze([1.0, 0.0, 0.0], "kick", 8))

        assert sample.name == "kick"
        assert len(sample.time_data) == 3
        assert len(sample.frequency_data) == 4
        np.testing.assert_allclose(sample.frequency_data.real, [1, 1, 1, 1], atol=1e-12)
        assert pipeline.session.names() == ["kick"]

    def test_analyze_power_of_two_not_padded(self, pipeline, rng):
        samples = rng.standard_normal(16)
        sample = asyncio.run(pipeline.analyze(samples, "noise", 16))
        expected = np.fft.fft(samples)
        np.testing.assert_allclose(sample.frequency_data.real, expected.real, atol=1e-9)
        np.testing.assert_allclose(sample.frequency_data.imag, expected.imag, atol=1e-9)

    def test_analyze_empty_input_appends_nothing(self, pipeline):
        with pytest.raises(InvalidLengthError):
            asyncio.run(pipeline.analyze([], "empty", 8))
        assert len(pipeline.session) == 0

    def test_analyze_many_keeps_input_order(self, pipeline, rng):
        inputs = [(rng.standard_normal(2 ** k + 1), f"s{k}", 8) for k in range(6)]
        analyzed = asyncio.run(pipeline.analyze_many(inputs))

        assert [s.name for s in analyzed] == [f"s{k}" for k in range(6)]
        assert pipeline.session.names() == [f"s{k}" for k in range(6)]

    def test_analyze_many_failure_commits_nothing(self, pipeline):
        inputs = [([1.0, 2.0], "ok", 8), ([], "bad", 8)]
        with pytest.raises(InvalidLengthError):
            asyncio.run(pipeline.analyze_many(inputs))
        assert len(pipeline.session) == 0

    @pytest.mark.parametrize("sample_rate", [0, -8000, 44100.0])
    def test_bad_sample_rate_rejected_before_transform(self, sample_rate):
        boundary = MagicMock()
        boundary.forward = AsyncMock()
        pipeline = SpectralPipeline(boundary=boundary)

        with pytest.raises(ValueError):
            asyncio.run(pipeline.analyze([1.0, 0.0, 0.0], "bad", sample_rate))
        boundary.forward.assert_not_called()
        assert len(pipeline.session) == 0

    def test_uses_injected_session(self, boundary, make_sample):
        session = AnalysisSession([make_sample("existing")])
        pipeline = SpectralPipeline(boundary=boundary, session=session)
        asyncio.run(pipeline.analyze([1.0, 0.0], "new", 8))
        assert session.names() == ["existing", "new"]


class TestCombine:
    def test_empty_session(self, pipeline):
        with pytest.raises(EmptySessionError):
            asyncio.run(pipeline.combine())
        assert len(pipeline.session) == 0

    def test_single_sample_round_trip(self, pipeline):
        samples = [0.5, -0.25, 0.125, 0.0]
        asyncio.run(pipeline.analyze(samples, "only", 4))
        combined = asyncio.run(pipeline.combine())

        assert combined.name == "combined"
        assert combined.sample_rate == 4
        np.testing.assert_allclose(combined.time_data, samples, atol=1e-12)
        assert pipeline.session.names() == ["only", "combined"]

    def test_combined_output_is_clipped(self, pipeline):
        asyncio.run(pipeline.analyze([4.0, 0.0, 0.0, 0.0], "loud", 4))
        asyncio.run(pipeline.analyze([4.0, 0.0, 0.0, 0.0], "louder", 4))
        combined = asyncio.run(pipeline.combine())

        assert np.all(combined.time_data <= 1.0)
        assert np.all(combined.time_data >= -1.0)

    def test_combine_mixed_lengths_zero_extends(self, pipeline):
        asyncio.run(pipeline.analyze([0.1] * 8, "long", 8))
        asyncio.run(pipeline.analyze([0.1, 0.1], "short", 8))
        combined = asyncio.run(pipeline.combine())
        assert len(combined.frequency_data) == 8
        assert len(combined.time_data) == 8

    def test_combine_truncate_policy(self, boundary):
        pipeline = SpectralPipeline(boundary=boundary, length_policy=TRUNCATE)
        asyncio.run(pipeline.analyze([0.1] * 8, "long", 8))
        asyncio.run(pipeline.analyze([0.1, 0.1], "short", 8))
        combined = asyncio.run(pipeline.combine())
        assert len(combined.frequency_data) == 2

    def test_combine_uses_base_sample_rate(self, pipeline):
        asyncio.run(pipeline.analyze([0.1, 0.2], "base", 22050))
        asyncio.run(pipeline.analyze([0.1, 0.2], "other", 44100))
        combined = asyncio.run(pipeline.combine())
        assert combined.sample_rate == 22050

    def test_custom_combined_name(self, boundary):
        pipeline = SpectralPipeline(boundary=boundary, combined_name="mix")
        asyncio.run(pipeline.analyze([0.1, 0.2], "a", 8))
        assert asyncio.run(pipeline.combine()).name == "mix"

    def test_inverse_failure_appends_nothing(self, make_sample):
        boundary = MagicMock()
        boundary.inverse = AsyncMock(side_effect=InvalidLengthError("bad", length=3))
        session = AnalysisSession([make_sample("a")])
        pipeline = SpectralPipeline(boundary=boundary, session=session)

        with pytest.raises(InvalidLengthError):
            asyncio.run(pipeline.combine())
        assert session.names() == ["a"]

    def test_combine_sends_folded_spectrum(self, make_sample):
        boundary = MagicMock()
        boundary.inverse = AsyncMock(
            return_value=ComplexSignal(real=[0.5, 0.5], imag=[0.0, 0.0])
        )
        session = AnalysisSession([
            make_sample("a", real=(2.0, 2.0)),
            make_sample("b", real=(2.0, -2.0)),
        ])
        pipeline = SpectralPipeline(boundary=boundary, session=session)
        asyncio.run(pipeline.combine())

        sent = boundary.inverse.call_args.args[0]
        np.testing.assert_allclose(sent.real, [2 * np.sqrt(2), -2 * np.sqrt(2)])


class TestCreatePipeline:
    def test_from_config(self):
        config = {
            'boundary': {'max_workers': 1},
            'combination': {'length_policy': 'truncate', 'combined_name': 'mix'},
        }
        with create_pipeline(config) as pipeline:
            assert pipeline.length_policy == 'truncate'
            assert pipeline.combined_name == 'mix'
            assert len(pipeline.session) == 0

    def test_defaults(self):
        with create_pipeline() as pipeline:
            assert pipeline.length_policy == 'zero_extend'
            assert pipeline.combined_name == 'combined'
