"""
Computation settings for the engine.

All settings are plain values passed explicitly through reduction and
evaluation calls; nothing here is mutable global state.
"""

import numpy as np
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
  from .context import Context


class AngleUnit(Enum):
  RADIAN = 0
  DEGREE = 1


class ComplexFormat(Enum):
  """Presentation of complex results; never changes computed values"""
  REAL = 0
  CARTESIAN = 1
  POLAR = 2


class PrintFloatMode(Enum):
  DECIMAL = 0
  SCIENTIFIC = 1


class Precision(Enum):
  """Floating width the numeric kernel operates in"""
  FLOAT = 0
  DOUBLE = 1

  @property
  def real_dtype(self):
    return np.float32 if self is Precision.FLOAT else np.float64

  @property
  def complex_dtype(self):
    return np.complex64 if self is Precision.FLOAT else np.complex128

  @property
  def epsilon(self) -> float:
    return float(np.finfo(self.real_dtype).eps)

  @property
  def tiny(self) -> float:
    return float(np.finfo(self.real_dtype).tiny)

  @property
  def max(self) -> float:
    return float(np.finfo(self.real_dtype).max)


MAX_SIGNIFICANT_DIGITS = 14


@dataclass
class Preferences:
  """User-facing preferences bundled for convenience"""
  angle_unit: AngleUnit = AngleUnit.RADIAN
  complex_format: ComplexFormat = ComplexFormat.CARTESIAN
  precision: Precision = Precision.DOUBLE
  float_display_mode: PrintFloatMode = PrintFloatMode.DECIMAL
  significant_digits: int = 7

  def __post_init__(self):
    if not isinstance(self.angle_unit, AngleUnit):
      raise TypeError("angle_unit must be an AngleUnit")
    if not isinstance(self.complex_format, ComplexFormat):
      raise TypeError("complex_format must be a ComplexFormat")
    if not isinstance(self.precision, Precision):
      raise TypeError("precision must be a Precision")
    if not isinstance(self.float_display_mode, PrintFloatMode):
      raise TypeError("float_display_mode must be a PrintFloatMode")
    if not isinstance(self.significant_digits, int) or not 1 <= self.significant_digits <= MAX_SIGNIFICANT_DIGITS:
      raise ValueError(f"significant_digits must be an integer between 1 and {MAX_SIGNIFICANT_DIGITS}")


@dataclass(frozen=True)
class ReductionContext:
  """Everything a shallow_reduce call needs besides the node itself"""
  context: Optional['Context'] = None
  angle_unit: AngleUnit = AngleUnit.RADIAN
  complex_format: ComplexFormat = ComplexFormat.CARTESIAN
  precision: Precision = Precision.DOUBLE

  def with_context(self, context: 'Context') -> 'ReductionContext':
    return replace(self, context=context)

  @classmethod
  def from_preferences(cls, context: Optional['Context'], preferences: Preferences) -> 'ReductionContext':
    return cls(context=context, angle_unit=preferences.angle_unit,
               complex_format=preferences.complex_format, precision=preferences.precision)
