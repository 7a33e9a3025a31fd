"""
Sample loader for SpectraMix.

Loads audio files into plain sample arrays for the pipeline. Only the
first channel is kept, and every file is resampled to one session
sample rate so spectra of different recordings line up bin for bin.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Set, Tuple

import librosa
import numpy as np
import soundfile as sf

from spectramix.utils.errors import AudioLoadError


SUPPORTED_FORMATS: Tuple[str, ...] = ('.wav', '.flac', '.aiff', '.aif', '.ogg')
TARGET_SAMPLE_RATE: int = 44100  # Hz
MAX_FILE_SIZE: int = 104857600  # 100 MB

logger = logging.getLogger("loader")


@dataclass(frozen=True)
class LoadedAudio:
    """Raw samples handed to the pipeline, with where they came from."""

    name: str
    samples: np.ndarray
    sample_rate: int
    original_sample_rate: int
    original_channels: int

    def as_pipeline_input(self) -> Tuple[np.ndarray, str, int]:
        """(samples, name, sample_rate) triple for SpectralPipeline.analyze_many."""
        return self.samples, self.name, self.sample_rate


class SampleLoader:
    """
    Loads audio files as mono float64 sample arrays.

    Thread-safe and stateless - can be used concurrently.
    """

    def __init__(
        self,
        target_sr: Optional[int] = TARGET_SAMPLE_RATE,
        max_file_size: int = MAX_FILE_SIZE,
        supported_formats: Iterable[str] = SUPPORTED_FORMATS,
    ):
        """
        Initialize loader with configuration.

        Args:
            target_sr: Session sample rate; None keeps each file's own rate
            max_file_size: Maximum file size in bytes
            supported_formats: Accepted file suffixes
        """
        self.target_sr = target_sr
        self.max_file_size = max_file_size
        self.supported_suffixes: Set[str] = {s.lower() for s in supported_formats}

    def load(self, file_path: Path) -> LoadedAudio:
        """
        Load an audio file.

        Args:
            file_path: Path to audio file

        Returns:
            LoadedAudio: First channel, resampled to the session rate

        Raises:
            AudioLoadError: File missing, unsupported, too large, unreadable or empty
        """
        file_path = Path(file_path)
        self._validate_file(file_path)

        try:
            data, sample_rate = sf.read(str(file_path), dtype='float64', always_2d=True)
        except Exception as e:
            raise AudioLoadError(
                f"Failed to load audio data from {file_path}: {e}",
                file_path=str(file_path),
            ) from e

        if data.size == 0:
            raise AudioLoadError(f"Audio file is empty: {file_path}", file_path=str(file_path))

        channels = data.shape[1]
        samples = np.ascontiguousarray(data[:, 0])
        logger.info(f"Loaded {file_path.name}: {len(samples)} samples @ {sample_rate} Hz, {channels} ch")

        original_rate = int(sample_rate)
        if self.target_sr is not None and original_rate != self.target_sr:
            logger.debug(f"Resampling {file_path.name} from {original_rate} to {self.target_sr} Hz")
            samples = librosa.resample(samples, orig_sr=original_rate, target_sr=self.target_sr)
            sample_rate = self.target_sr

        return LoadedAudio(
            name=file_path.stem,
            samples=np.asarray(samples, dtype=np.float64),
            sample_rate=int(sample_rate),
            original_sample_rate=original_rate,
            original_channels=channels,
        )

    def _validate_file(self, file_path: Path) -> None:
        """Validate file exists, has supported format, and is within size limit."""
        if not file_path.exists():
            raise AudioLoadError(f"Audio file not found: {file_path}", file_path=str(file_path))

        suffix = file_path.suffix.lower()
        if suffix not in self.supported_suffixes:
            raise AudioLoadError(
                f"Format {suffix} not supported. "
                f"Supported formats: {', '.join(sorted(self.supported_suffixes))}",
                file_path=str(file_path),
            )

        file_size = file_path.stat().st_size
        if file_size > self.max_file_size:
            raise AudioLoadError(
                f"File too large: {file_size / 1024 / 1024:.1f} MB. "
                f"Maximum: {self.max_file_size / 1024 / 1024:.1f} MB",
                file_path=str(file_path),
            )


def create_sample_loader(config: Optional[Dict[str, Any]] = None) -> SampleLoader:
    """
    Factory function to create SampleLoader with configuration.

    Args:
        config: Optional "audio" configuration section

    Returns:
        SampleLoader: Configured loader instance
    """
    if config is None:
        config = {}

    return SampleLoader(
        target_sr=config.get('target_sample_rate', TARGET_SAMPLE_RATE),
        max_file_size=config.get('max_file_size', MAX_FILE_SIZE),
        supported_formats=config.get('supported_formats', SUPPORTED_FORMATS),
    )
