"""
SpectraMix

Frequency-domain analysis of recorded audio samples and synthesis of new
samples by combining their spectra with a pure radix-2 FFT engine.
"""

__version__ = "1.0.0"
__author__ = "SpectraMix Team"
