import cmath
import math
import numpy as np
from abc import ABC, abstractmethod
from typing import Callable

from ..settings import ComplexFormat, Precision, PrintFloatMode
from .kernels import truncate_real_or_imaginary_part


def format_float(value: float, float_mode: PrintFloatMode = PrintFloatMode.DECIMAL,
                 significant_digits: int = 7) -> str:
  if math.isnan(value):
    return "undef"
  if math.isinf(value):
    return "inf" if value > 0 else "-inf"
  if float_mode == PrintFloatMode.SCIENTIFIC:
    return f"{value:.{max(significant_digits - 1, 0)}e}"
  text = f"{value:.{significant_digits}g}"
  return "0" if text == "-0" else text


class Evaluation(ABC):
  """Numeric result of evaluating an expression: a complex scalar or a matrix"""

  __slots__ = ('precision',)

  def __init__(self, precision: Precision):
    self.precision = precision

  @abstractmethod
  def is_matrix(self) -> bool:
    pass

  @abstractmethod
  def is_undefined(self) -> bool:
    pass

  @abstractmethod
  def to_scalar(self) -> float:
    """Real value of a real scalar, NaN for anything else"""
    pass

  @abstractmethod
  def opposite(self) -> 'Evaluation':
    pass

  @abstractmethod
  def to_string(self, complex_format: ComplexFormat = ComplexFormat.CARTESIAN,
                float_mode: PrintFloatMode = PrintFloatMode.DECIMAL,
                significant_digits: int = 7) -> str:
    pass


class Complex(Evaluation):
  __slots__ = ('value',)

  def __init__(self, value, precision: Precision = Precision.DOUBLE):
    super().__init__(precision)
    self.value = precision.complex_dtype(value)

  @classmethod
  def builder(cls, real, imag=0.0, precision: Precision = Precision.DOUBLE) -> 'Complex':
    return cls(complex(real, imag), precision)

  @classmethod
  def undefined(cls, precision: Precision = Precision.DOUBLE) -> 'Complex':
    return cls(complex(math.nan, math.nan), precision)

  @property
  def real(self) -> float:
    return float(self.value.real)

  @property
  def imag(self) -> float:
    return float(self.value.imag)

  def is_matrix(self) -> bool:
    return False

  def is_undefined(self) -> bool:
    return math.isnan(self.real) or math.isnan(self.imag)

  def to_scalar(self) -> float:
    if self.imag != 0.0:
      return math.nan
    return self.real

  def opposite(self) -> 'Complex':
    # 0 - c keeps zero parts positive so that branch cuts see the same sign
    return Complex.builder(0.0 - self.real, 0.0 - self.imag, self.precision)

  def to_string(self, complex_format=ComplexFormat.CARTESIAN,
                float_mode=PrintFloatMode.DECIMAL, significant_digits=7) -> str:
    if self.is_undefined():
      return "undef"
    re, im = self.real, self.imag
    if complex_format == ComplexFormat.REAL:
      return format_float(re, float_mode, significant_digits) if im == 0.0 else "nonreal"
    if complex_format == ComplexFormat.POLAR:
      r = abs(complex(re, im))
      theta = cmath.phase(complex(re, im))
      modulus = format_float(r, float_mode, significant_digits)
      if theta == 0.0:
        return modulus
      return f"{modulus}*e^({format_float(theta, float_mode, significant_digits)}*i)"
    if im == 0.0:
      return format_float(re, float_mode, significant_digits)
    imag_text = format_float(abs(im), float_mode, significant_digits)
    imag_text = "i" if imag_text == "1" else f"{imag_text}*i"
    if re == 0.0:
      return imag_text if im > 0 else f"-{imag_text}"
    sign = "+" if im > 0 else "-"
    return f"{format_float(re, float_mode, significant_digits)}{sign}{imag_text}"

  def __repr__(self) -> str:
    return f"Complex({self.value!r}, {self.precision.name})"


class MatrixComplex(Evaluation):
  __slots__ = ('values',)

  def __init__(self, values, precision: Precision = Precision.DOUBLE):
    super().__init__(precision)
    array = np.asarray(values, dtype=precision.complex_dtype)
    if array.ndim != 2:
      raise ValueError("matrix evaluations must be two dimensional")
    self.values = array

  @property
  def rows(self) -> int:
    return self.values.shape[0]

  @property
  def columns(self) -> int:
    return self.values.shape[1]

  def is_matrix(self) -> bool:
    return True

  def is_undefined(self) -> bool:
    return bool(np.any(np.isnan(self.values)))

  def to_scalar(self) -> float:
    return math.nan

  def opposite(self) -> 'MatrixComplex':
    return self.map(lambda c: c.opposite())

  def entry(self, row: int, column: int) -> Complex:
    return Complex(self.values[row, column], self.precision)

  def map(self, function: Callable[[Complex], Evaluation]) -> Evaluation:
    """Apply a scalar function to every entry; any NaN entry makes the whole result NaN"""
    out = np.empty_like(self.values)
    for index in np.ndindex(*self.values.shape):
      result = function(Complex(self.values[index], self.precision))
      if result.is_matrix() or result.is_undefined():
        return Complex.undefined(self.precision)
      out[index] = result.value
    return MatrixComplex(out, self.precision)

  def to_string(self, complex_format=ComplexFormat.CARTESIAN,
                float_mode=PrintFloatMode.DECIMAL, significant_digits=7) -> str:
    if self.is_undefined():
      return "undef"
    rows = []
    for r in range(self.rows):
      cells = [self.entry(r, c).to_string(complex_format, float_mode, significant_digits)
               for c in range(self.columns)]
      rows.append("[" + ",".join(cells) + "]")
    return "[" + "".join(rows) + "]"

  def __repr__(self) -> str:
    return f"MatrixComplex({self.values.tolist()!r}, {self.precision.name})"


def branch_cut_corrected(result: complex, input_argument: float, precision: Precision) -> Complex:
  """Build a Complex from a multivalued function result, snapping floating residue"""
  re, im = truncate_real_or_imaginary_part(result.real, result.imag, input_argument, precision.epsilon)
  return Complex.builder(re, im, precision)


def complex_square_root(c: Complex) -> Complex:
  """Principal square root with branch-cut correction"""
  if c.is_undefined():
    return Complex.undefined(c.precision)
  result = np.sqrt(c.value)
  return branch_cut_corrected(complex(result), cmath.phase(complex(c.value)), c.precision)
