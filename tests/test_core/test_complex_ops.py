"""Tests for the scalar complex primitives."""

import math

import pytest

from spectramix.core.complex_ops import (
    ComplexSample,
    add,
    conjugate,
    multiply,
    subtract,
    twiddle,
)


class TestArithmetic:
    def test_add(self):
        assert add(ComplexSample(1.5, -2.0), ComplexSample(0.5, 3.0)) == (2.0, 1.0)

    def test_subtract(self):
        assert subtract(ComplexSample(1.5, -2.0), ComplexSample(0.5, 3.0)) == (1.0, -5.0)

    def test_multiply_is_standard_complex_product(self):
        a, b = ComplexSample(1.0, 2.0), ComplexSample(3.0, -4.0)
        expected = complex(1, 2) * complex(3, -4)
        result = multiply(a, b)
        assert result.real == expected.real
        assert result.imag == expected.imag

    def test_multiply_by_i_rotates(self):
        assert multiply(ComplexSample(0.0, 1.0), ComplexSample(0.0, 1.0)) == (-1.0, 0.0)

    def test_conjugate(self):
        assert conjugate(ComplexSample(2.0, 3.0)) == (2.0, -3.0)

    def test_conjugate_does_not_mutate_input(self):
        a = ComplexSample(2.0, 3.0)
        conjugate(a)
        assert a == (2.0, 3.0)


class TestTwiddle:
    def test_k_zero_is_one(self):
        w = twiddle(0, 8)
        assert w.real == 1.0
        assert w.imag == pytest.approx(0.0)

    def test_quarter_turn(self):
        w = twiddle(1, 4)
        assert w.real == pytest.approx(0.0, abs=1e-15)
        assert w.imag == pytest.approx(-1.0)

    def test_matches_euler(self):
        w = twiddle(3, 16)
        x = -2 * math.pi * 3 / 16
        assert w == (math.cos(x), math.sin(x))
