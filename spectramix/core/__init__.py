"""
Core module containing the data models, the transform engine, signal
preparation, the computation boundary and the combination pipeline.
"""

from spectramix.core.models import (
    AnalysisSession,
    AnalyzedSample,
    ComplexSignal,
    ErrorDescriptor,
    NormalizedData,
    Operation,
    RealSignal,
    TransformRequest,
    TransformResponse,
)
from spectramix.core.transform import TransformCache, TransformEngine, create_transform_engine
from spectramix.core.preparation import (
    clip,
    clip_signal,
    denormalize,
    normalize,
    pad_to_power_of_two,
)
from spectramix.core.combination import combine_spectra, magnitude_preserving_multiply
from spectramix.core.boundary import ComputationBoundary, TransformWorker, create_boundary
from spectramix.core.pipeline import SpectralPipeline, create_pipeline

__all__ = [
    # Models
    "AnalysisSession",
    "AnalyzedSample",
    "ComplexSignal",
    "ErrorDescriptor",
    "NormalizedData",
    "Operation",
    "RealSignal",
    "TransformRequest",
    "TransformResponse",
    # Transform engine
    "TransformCache",
    "TransformEngine",
    "create_transform_engine",
    # Preparation
    "clip",
    "clip_signal",
    "denormalize",
    "normalize",
    "pad_to_power_of_two",
    # Combination
    "combine_spectra",
    "magnitude_preserving_multiply",
    # Boundary and pipeline
    "ComputationBoundary",
    "TransformWorker",
    "create_boundary",
    "SpectralPipeline",
    "create_pipeline",
]
