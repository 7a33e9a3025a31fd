"""Tests for the sample loader."""

import numpy as np
import pytest
import soundfile as sf

from spectramix.io.loader import SampleLoader, create_sample_loader
from spectramix.utils.errors import AudioLoadError


@pytest.fixture
def tone_file(tmp_path):
    """Mono 440 Hz tone at 22050 Hz, 1000 samples."""
    sr = 22050
    t = np.arange(1000) / sr
    path = tmp_path / "tone.wav"
    sf.write(str(path), 0.5 * np.sin(2 * np.pi * 440 * t), sr, subtype="FLOAT")
    return path


class TestSampleLoader:
    def test_load_keeps_rate_without_target(self, tone_file):
        audio = SampleLoader(target_sr=None).load(tone_file)

        assert audio.name == "tone"
        assert audio.sample_rate == 22050
        assert audio.original_sample_rate == 22050
        assert audio.original_channels == 1
        assert len(audio.samples) == 1000
        assert audio.samples.dtype == np.float64

    def test_load_resamples_to_target(self, tone_file):
        audio = SampleLoader(target_sr=44100).load(tone_file)

        assert audio.sample_rate == 44100
        assert audio.original_sample_rate == 22050
        assert len(audio.samples) == 2000

    def test_stereo_keeps_first_channel(self, tmp_path):
        path = tmp_path / "stereo.wav"
        left = np.full(64, 0.25)
        right = np.full(64, -0.75)
        sf.write(str(path), np.column_stack([left, right]), 8000, subtype="FLOAT")

        audio = SampleLoader(target_sr=8000).load(path)

        assert audio.original_channels == 2
        np.testing.assert_allclose(audio.samples, left, atol=1e-6)

    def test_as_pipeline_input(self, tone_file):
        audio = SampleLoader(target_sr=None).load(tone_file)
        samples, name, rate = audio.as_pipeline_input()
        assert name == "tone"
        assert rate == 22050
        assert samples is audio.samples

    def test_missing_file(self, tmp_path):
        with pytest.raises(AudioLoadError, match="not found") as excinfo:
            SampleLoader().load(tmp_path / "missing.wav")
        assert excinfo.value.file_path.endswith("missing.wav")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "song.mp3"
        path.write_bytes(b"ID3")
        with pytest.raises(AudioLoadError, match="not supported"):
            SampleLoader().load(path)

    def test_file_too_large(self, tone_file):
        with pytest.raises(AudioLoadError, match="too large"):
            SampleLoader(max_file_size=16).load(tone_file)

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.wav"
        path.write_bytes(b"this is not audio")
        with pytest.raises(AudioLoadError, match="Failed to load"):
            SampleLoader().load(path)


class TestCreateSampleLoader:
    def test_defaults(self):
        loader = create_sample_loader()
        assert loader.target_sr == 44100
        assert '.wav' in loader.supported_suffixes

    def test_from_config(self):
        loader = create_sample_loader({
            'target_sample_rate': 8000,
            'max_file_size': 1024,
            'supported_formats': ['.WAV'],
        })
        assert loader.target_sr == 8000
        assert loader.max_file_size == 1024
        assert loader.supported_suffixes == {'.wav'}
