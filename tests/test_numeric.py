import math
import numpy as np
import pytest

from symbolic_engine.numeric import (
    Complex, MatrixComplex, branch_cut_corrected, complex_square_root,
    truncate_real_or_imaginary_part, neglect_relative_parts, round_to_error
)
from symbolic_engine.settings import Precision

EPS = Precision.DOUBLE.epsilon


# -----------------------------
# Kernels
# -----------------------------

def test_truncate_drops_residual_real_part_near_imaginary_axis():
    re, im = truncate_real_or_imaginary_part(1e-17, 1.0, math.pi, EPS)
    assert (re, im) == (0.0, 1.0)


def test_truncate_drops_residual_imaginary_part_near_real_axis():
    re, im = truncate_real_or_imaginary_part(-1.0, 1e-16, math.pi, EPS)
    assert (re, im) == (-1.0, 0.0)


def test_truncate_keeps_genuine_complex_values():
    assert truncate_real_or_imaginary_part(1.0, 1.0, math.pi, EPS) == (1.0, 1.0)


def test_truncate_tolerance_scales_with_input_argument():
    assert truncate_real_or_imaginary_part(1.0, 1e-14, 0.0, EPS) == (1.0, 1e-14)
    assert truncate_real_or_imaginary_part(1.0, 1e-14, 1000.0, EPS) == (1.0, 0.0)


def test_truncate_passes_nan_through():
    re, im = truncate_real_or_imaginary_part(math.nan, 0.0, 1.0, EPS)
    assert math.isnan(re)


def test_neglect_relative_parts():
    assert neglect_relative_parts(1.0, 1e-20, 1.0, EPS) == (1.0, 0.0)
    assert neglect_relative_parts(1e-20, 1.0, 1.0, EPS) == (0.0, 1.0)
    assert neglect_relative_parts(1e-20, 1e-20, 0.0, EPS) == (1e-20, 1e-20)


def test_round_to_error():
    assert round_to_error(6.000000012, 1e-9) == pytest.approx(6.0, abs=1e-12)
    assert round_to_error(0.123456, 1e-4) == pytest.approx(0.12, abs=1e-12)


@pytest.mark.parametrize("answer, error, expected", [
    (2500.0, 10.0, 3000.0),
    (-2500.0, 10.0, -3000.0),
    (250.0, 1.0, 300.0),
    (3500.0, 10.0, 4000.0),
])
def test_round_to_error_rounds_halves_away_from_zero(answer, error, expected):
    assert round_to_error(answer, error) == expected


# -----------------------------
# Complex
# -----------------------------

def test_square_root_of_negative_real():
    result = complex_square_root(Complex.builder(-1.0))
    assert (result.real, result.imag) == (0.0, 1.0)


def test_square_root_of_undefined():
    assert complex_square_root(Complex.undefined()).is_undefined()


def test_branch_cut_corrected_builds_in_precision():
    result = branch_cut_corrected(complex(2.0, 1e-17), math.pi, Precision.FLOAT)
    assert result.value.dtype == np.complex64
    assert result.imag == 0.0


def test_opposite_never_produces_negative_zero():
    result = Complex.builder(4.0).opposite()
    assert result.real == -4.0
    assert math.copysign(1.0, result.imag) == 1.0


def test_to_scalar():
    assert Complex.builder(2.5).to_scalar() == 2.5
    assert math.isnan(Complex.builder(1.0, 1.0).to_scalar())
    assert math.isnan(MatrixComplex([[1.0]]).to_scalar())


def test_undefined_is_nan():
    undefined = Complex.undefined()
    assert undefined.is_undefined()
    assert not undefined.is_matrix()


# -----------------------------
# MatrixComplex
# -----------------------------

def test_matrix_shape_and_entries():
    m = MatrixComplex([[1, 2, 3], [4, 5, 6]])
    assert (m.rows, m.columns) == (2, 3)
    assert m.entry(1, 2).value == 6
    assert m.is_matrix()


def test_matrix_must_be_two_dimensional():
    with pytest.raises(ValueError):
        MatrixComplex([1, 2, 3])


def test_map_applies_entrywise():
    m = MatrixComplex([[1, 4]]).map(complex_square_root)
    assert m.values.tolist() == [[1, 2]]


def test_map_with_nan_entry_is_undefined():
    m = MatrixComplex([[1, 2]])
    result = m.map(lambda c: Complex.undefined() if c.real == 2 else c)
    assert result.is_undefined()
    assert not result.is_matrix()


def test_matrix_opposite():
    result = MatrixComplex([[1, -2]]).opposite()
    assert result.values.tolist() == [[-1, 2]]


def test_matrix_with_nan_is_undefined():
    assert MatrixComplex([[1, math.nan]]).is_undefined()
