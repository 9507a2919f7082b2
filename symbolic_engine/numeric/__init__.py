"""Numeric kernel: complex and matrix evaluations."""

from .evaluation import (
  Evaluation, Complex, MatrixComplex,
  branch_cut_corrected, complex_square_root, format_float
)
from .kernels import truncate_real_or_imaginary_part, neglect_relative_parts, round_to_error

__all__ = [
  'Evaluation', 'Complex', 'MatrixComplex',
  'branch_cut_corrected', 'complex_square_root', 'format_float',
  'truncate_real_or_imaginary_part', 'neglect_relative_parts', 'round_to_error'
]
