"""
Transform engine for SpectraMix.

Iterative radix-2 decimation-in-time FFT and its inverse, built on the
scalar complex primitives in complex_ops.
"""

import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from spectramix.core.complex_ops import (
    ComplexSample,
    add,
    conjugate,
    multiply,
    subtract,
    twiddle,
)
from spectramix.core.models import ComplexSignal, RealSignal, TransformInput
from spectramix.utils.errors import InvalidLengthError, RealOnlyInputError


def is_power_of_two(n: int) -> bool:
    """Return True if *n* is a positive power of two."""
    return n > 0 and n & (n - 1) == 0


def bit_reverse_indices(n: int) -> Tuple[int, ...]:
    """
    Compute the bit-reversal permutation for length *n*.

    Index i maps to the integer whose log2(n)-bit binary representation
    is that of i reversed.
    """
    bits = (n - 1).bit_length()
    reversed_indices = []
    for i in range(n):
        r = 0
        value = i
        for _ in range(bits):
            r = (r << 1) | (value & 1)
            value >>= 1
        reversed_indices.append(r)
    return tuple(reversed_indices)


class TransformCache:
    """
    Thread-safe memo of per-length tables used by the transform engine.

    Holds bit-reversal permutations and zero buffers keyed by signal
    length, with LRU eviction once max_sizes distinct lengths are stored.
    """

    def __init__(self, max_sizes: int = 32):
        """
        Initialize cache.

        Args:
            max_sizes: Maximum number of distinct lengths kept per table
        """
        self.max_sizes = max(1, max_sizes)
        self._reversals: "OrderedDict[int, Tuple[int, ...]]" = OrderedDict()
        self._zeros: "OrderedDict[int, Tuple[float, ...]]" = OrderedDict()
        self._lock = threading.RLock()
        self.logger = logging.getLogger("transform.cache")

        self._hits = 0
        self._misses = 0

    def bit_reversal(self, n: int) -> Tuple[int, ...]:
        """Return the bit-reversal permutation for length *n*."""
        with self._lock:
            table = self._lookup(self._reversals, n)
            if table is None:
                table = bit_reverse_indices(n)
                self._store(self._reversals, n, table)
            return table

    def zero_buffer(self, n: int) -> List[float]:
        """Return a fresh list of *n* zeros."""
        with self._lock:
            zeros = self._lookup(self._zeros, n)
            if zeros is None:
                zeros = (0.0,) * n
                self._store(self._zeros, n, zeros)
        return list(zeros)

    def _lookup(self, table: "OrderedDict[int, Any]", n: int) -> Optional[Any]:
        if n in table:
            table.move_to_end(n)
            self._hits += 1
            return table[n]
        self._misses += 1
        return None

    def _store(self, table: "OrderedDict[int, Any]", n: int, value: Any) -> None:
        while len(table) >= self.max_sizes:
            evicted, _ = table.popitem(last=False)
            self.logger.debug(f"Evicted table for N={evicted}")
        table[n] = value

    def clear(self) -> None:
        """Drop all cached tables."""
        with self._lock:
            self._reversals.clear()
            self._zeros.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with hits, misses, cached lengths and hit ratio
        """
        with self._lock:
            total = self._hits + self._misses
            return {
                'hits': self._hits,
                'misses': self._misses,
                'reversal_sizes': sorted(self._reversals),
                'zero_buffer_sizes': sorted(self._zeros),
                'max_sizes': self.max_sizes,
                'hit_ratio': self._hits / total if total > 0 else 0.0,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._reversals)


class TransformEngine:
    """
    Radix-2 FFT engine.

    The engine owns its cache; with cache=None every call recomputes its
    tables, which is what a caller that wants no shared state asks for.
    """

    def __init__(self, cache: Optional[TransformCache] = None):
        self.cache = cache
        self.logger = logging.getLogger("transform")

    def fft(self, signal: TransformInput) -> ComplexSignal:
        """
        Forward transform.

        Args:
            signal: RealSignal (imaginary parts taken as 0.0) or ComplexSignal

        Returns:
            ComplexSignal: Unnormalized spectrum in natural order

        Raises:
            InvalidLengthError: If the length is not a power of two
        """
        n = len(signal)
        if not is_power_of_two(n):
            raise InvalidLengthError(
                f"Input size must be a power of 2, got {n}", length=n
            )

        if isinstance(signal, RealSignal):
            real = signal.samples.tolist()
            imag = self._zeros(n)
        elif isinstance(signal, ComplexSignal):
            real = signal.real.tolist()
            imag = signal.imag.tolist()
        else:
            raise TypeError(f"Unsupported transform input: {type(signal).__name__}")

        real, imag = self._butterflies(real, imag)
        self.logger.debug(f"Forward transform complete (N={n})")
        return ComplexSignal(real=real, imag=imag)

    def ifft(self, signal: TransformInput) -> ComplexSignal:
        """
        Inverse transform via the conjugate trick: conj, forward FFT, divide by N.

        Raises:
            RealOnlyInputError: If given a RealSignal
            InvalidLengthError: If the length is not a power of two
        """
        if not isinstance(signal, ComplexSignal):
            raise RealOnlyInputError("IFFT only accepts a complex input.")

        n = len(signal)
        conj_real = []
        conj_imag = []
        for r, i in zip(signal.real.tolist(), signal.imag.tolist()):
            c = conjugate(ComplexSample(r, i))
            conj_real.append(c.real)
            conj_imag.append(c.imag)

        spectrum = self.fft(ComplexSignal(real=conj_real, imag=conj_imag))

        return ComplexSignal(real=spectrum.real / n, imag=spectrum.imag / n)

    def _butterflies(
        self, real: List[float], imag: List[float]
    ) -> Tuple[List[float], List[float]]:
        """Reorder by bit reversal, then run the log2(N) butterfly stages in place."""
        n = len(real)
        reversal = self._bit_reversal(n)

        ordered_real = [0.0] * n
        ordered_imag = [0.0] * n
        for i in range(n):
            ordered_real[reversal[i]] = real[i]
            ordered_imag[reversal[i]] = imag[i]
        real, imag = ordered_real, ordered_imag

        curr_n = 2
        while curr_n <= n:
            half = curr_n // 2
            for k in range(half):
                w = twiddle(k, curr_n)
                for m in range(n // curr_n):
                    even = curr_n * m + k
                    odd = even + half

                    even_sample = ComplexSample(real[even], imag[even])
                    odd_term = multiply(w, ComplexSample(real[odd], imag[odd]))

                    difference = subtract(even_sample, odd_term)
                    real[odd], imag[odd] = difference.real, difference.imag

                    total = add(even_sample, odd_term)
                    real[even], imag[even] = total.real, total.imag
            curr_n *= 2

        return real, imag

    def _bit_reversal(self, n: int) -> Tuple[int, ...]:
        if self.cache is None:
            return bit_reverse_indices(n)
        return self.cache.bit_reversal(n)

    def _zeros(self, n: int) -> List[float]:
        if self.cache is None:
            return [0.0] * n
        return self.cache.zero_buffer(n)


def create_transform_engine(config: Optional[Dict[str, Any]] = None) -> TransformEngine:
    """
    Factory function to create a TransformEngine from configuration.

    Args:
        config: Optional full configuration dict (uses the "transform" section)

    Returns:
        TransformEngine: Engine with its own cache (or none when disabled)
    """
    section = (config or {}).get('transform', {})
    cache = None
    if section.get('cache_enabled', True):
        cache = TransformCache(max_sizes=section.get('cache_max_sizes', 32))
    return TransformEngine(cache=cache)
