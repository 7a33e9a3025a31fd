"""
Writers for analyzed samples and session summaries.

Strategy pattern: every session writer shares one write() interface so
new output formats can be added without touching callers.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path

import soundfile as sf

from spectramix.core.models import AnalysisSession, AnalyzedSample


class WavSampleWriter:
    """Writes the time data of an analyzed sample as an audio file."""

    def __init__(self, subtype: str = "PCM_16"):
        """
        Initialize sample writer.

        Args:
            subtype: soundfile subtype (e.g. "PCM_16", "PCM_24", "FLOAT")
        """
        self.subtype = subtype
        self.logger = logging.getLogger("writer.wav")

    def write(self, sample: AnalyzedSample, output_path: Path) -> Path:
        """
        Write *sample* to *output_path*; the format follows the suffix.

        Returns:
            Path: The written file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(str(output_path), sample.time_data, sample.sample_rate, subtype=self.subtype)
        self.logger.info(f"Sample {sample.name!r} written to: {output_path}")
        return output_path


class SessionWriter(ABC):
    """Abstract base class for session summary writers."""

    @abstractmethod
    def write(self, session: AnalysisSession, output_path: Path) -> None:
        """Write a summary of *session* to the specified path."""


class TextSessionWriter(SessionWriter):
    """Writes a human-readable session summary."""

    def __init__(self, include_timestamp: bool = True):
        self.include_timestamp = include_timestamp
        self.logger = logging.getLogger("writer.text")

    def write(self, session: AnalysisSession, output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("=" * 70 + "\n")
            f.write("SPECTRAMIX SESSION\n")
            f.write("=" * 70 + "\n")
            if self.include_timestamp:
                f.write(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n")
            f.write(f"Total Samples: {len(session)}\n")
            f.write("=" * 70 + "\n\n")

            for index, sample in enumerate(session):
                self._write_sample(f, index, sample)

            f.write("=" * 70 + "\n")
            f.write("END OF REPORT\n")
            f.write("=" * 70 + "\n")

        self.logger.info(f"Session written to: {output_path}")

    def _write_sample(self, f, index: int, sample: AnalyzedSample) -> None:
        summary = sample.to_dict()
        f.write("-" * 70 + "\n")
        f.write(f"[{index}] {sample.name}\n")
        f.write("-" * 70 + "\n")
        f.write(f"Sample Rate: {sample.sample_rate} Hz\n")
        f.write(f"Length: {summary['length']} samples ({summary['duration']:.3f}s)\n")
        f.write(f"Spectrum Bins: {summary['spectrum_length']}\n")
        peak = summary['peak_frequency']
        f.write(f"Peak Frequency: {'n/a' if peak is None else f'{peak:.1f} Hz'}\n")
        f.write(f"Peak Amplitude: {summary['peak_amplitude']:.4f}\n\n")


class JSONSessionWriter(SessionWriter):
    """Writes a session summary as JSON."""

    def __init__(self, indent: int = 2, include_data: bool = False):
        """
        Initialize JSON writer.

        Args:
            indent: JSON indentation level
            include_data: Also dump time and frequency data arrays
        """
        self.indent = indent
        self.include_data = include_data
        self.logger = logging.getLogger("writer.json")

    def write(self, session: AnalysisSession, output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        output_data = {
            "generated": datetime.now().isoformat(),
            "total_samples": len(session),
            "samples": [
                sample.to_dict(include_data=self.include_data) for sample in session
            ],
        }

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(output_data, f, indent=self.indent, default=str)

        self.logger.info(f"Session written to: {output_path}")


def create_session_writer(format: str = "text", **kwargs) -> SessionWriter:
    """
    Factory function to create appropriate session writer.

    Args:
        format: Output format ("text" or "json")
        **kwargs: Additional arguments for the writer

    Returns:
        Appropriate SessionWriter instance
    """
    writers = {
        "text": TextSessionWriter,
        "txt": TextSessionWriter,
        "json": JSONSessionWriter,
    }

    writer_class = writers.get(format.lower())
    if writer_class is None:
        raise ValueError(f"Unknown format: {format}. Supported: {list(writers.keys())}")

    return writer_class(**kwargs)
