"""
Spectral combination pipeline for SpectraMix.

Main orchestration: analyze each input (pad, forward transform, store),
then fold the stored spectra into one, inverse-transform it and clip the
result to playable amplitude.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from spectramix.core.boundary import ComputationBoundary, create_boundary
from spectramix.core.combination import ZERO_EXTEND, combine_spectra
from spectramix.core.models import (
    AnalysisSession,
    AnalyzedSample,
    RealSignal,
    validate_sample_rate,
)
from spectramix.core.preparation import clip_signal, pad_to_power_of_two
from spectramix.utils.errors import EmptySessionError


class SpectralPipeline:
    """
    Orchestrates analysis and combination over one analysis session.

    Design:
    - Dependency Injection: boundary and session are injected (testable)
    - Concurrent analysis: independent inputs are transformed in parallel
    - Sequential combination: a fold over already-analyzed samples
    - No partial commits: a failed step appends nothing to the session
    """

    def __init__(
        self,
        boundary: ComputationBoundary,
        session: Optional[AnalysisSession] = None,
        length_policy: str = ZERO_EXTEND,
        combined_name: str = "combined",
    ):
        """
        Initialize pipeline.

        Args:
            boundary: Computation boundary that runs the transforms
            session: Session to grow (a new empty one if None)
            length_policy: How spectra of different lengths are aligned
            combined_name: Name given to combination results
        """
        self.boundary = boundary
        self.session = session if session is not None else AnalysisSession()
        self.length_policy = length_policy
        self.combined_name = combined_name
        self.logger = logging.getLogger('pipeline')

    async def analyze(
        self, samples: Sequence[float], name: str, sample_rate: int
    ) -> AnalyzedSample:
        """
        Analyze one recording and append it to the session.

        Args:
            samples: Time-domain samples (any length)
            name: Identifier of the recording
            sample_rate: Sample rate in Hz

        Returns:
            AnalyzedSample: The appended sample

        Raises:
            SpectraMixError: Whatever padding or the transform raised
        """
        sample = await self._analyze_one(samples, name, sample_rate)
        self.session.append(sample)
        return sample

    async def analyze_many(
        self, inputs: Sequence[Tuple[Sequence[float], str, int]]
    ) -> List[AnalyzedSample]:
        """
        Analyze several recordings concurrently.

        Samples are appended in input order once all of them succeed; if
        any analysis fails, the error propagates and nothing is appended.

        Args:
            inputs: (samples, name, sample_rate) triples

        Returns:
            List[AnalyzedSample]: The appended samples, in input order
        """
        self.logger.info(f"Analyzing {len(inputs)} samples concurrently")
        analyzed = await asyncio.gather(
            *(self._analyze_one(samples, name, rate) for samples, name, rate in inputs)
        )
        self.session.extend(analyzed)
        return list(analyzed)

    async def _analyze_one(
        self, samples: Sequence[float], name: str, sample_rate: int
    ) -> AnalyzedSample:
        validate_sample_rate(sample_rate)
        start_time = time.time()
        time_data = np.asarray(samples, dtype=np.float64).reshape(-1)
        padded = pad_to_power_of_two(time_data)
        self.logger.info(
            f"Analyzing {name}: {len(time_data)} samples padded to {len(padded)}"
        )

        frequency_data = await self.boundary.forward(RealSignal(samples=padded))

        self.logger.debug(f"{name} analyzed in {time.time() - start_time:.3f}s")
        return AnalyzedSample(
            name=name,
            time_data=time_data,
            frequency_data=frequency_data,
            sample_rate=sample_rate,
        )

    async def combine(self) -> AnalyzedSample:
        """
        Combine every sample in the session into a new one.

        Sample 0 is the base; later samples are folded in order with the
        magnitude-preserving multiply. The folded spectrum is inverse
        transformed and its real channel clipped to [-1, 1].

        Returns:
            AnalyzedSample: The appended combination result

        Raises:
            EmptySessionError: If the session holds no samples
        """
        samples = self.session.samples
        if not samples:
            raise EmptySessionError("No samples to combine")

        start_time = time.time()
        base = samples[0]
        self.logger.info(
            f"Combining {len(samples)} samples onto base {base.name!r}"
        )
        self.logger.debug(f"Combination order: {self.session.names()}")

        spectrum = combine_spectra(
            [sample.frequency_data for sample in samples], self.length_policy
        )
        time_signal = await self.boundary.inverse(spectrum)

        combined = AnalyzedSample(
            name=self.combined_name,
            time_data=clip_signal(time_signal.real),
            frequency_data=spectrum,
            sample_rate=base.sample_rate,
        )
        self.session.append(combined)

        self.logger.info(f"Combination complete in {time.time() - start_time:.3f}s")
        return combined

    def shutdown(self) -> None:
        """Shutdown the computation boundary."""
        self.logger.info("Shutting down pipeline")
        self.boundary.shutdown()

    def __enter__(self) -> "SpectralPipeline":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()


def create_pipeline(
    config: Optional[Dict[str, Any]] = None,
    session: Optional[AnalysisSession] = None,
) -> SpectralPipeline:
    """
    Factory function to create a fully configured pipeline.

    Args:
        config: Configuration dict
        session: Optional existing session to grow

    Returns:
        SpectralPipeline: Configured pipeline
    """
    config = config or {}
    combination = config.get('combination', {})
    return SpectralPipeline(
        boundary=create_boundary(config),
        session=session,
        length_policy=combination.get('length_policy', ZERO_EXTEND),
        combined_name=combination.get('combined_name', 'combined'),
    )
