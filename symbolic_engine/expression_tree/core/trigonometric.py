import math
import numpy as np
import sympy as sp

from ...numeric import Complex, neglect_relative_parts
from ...settings import AngleUnit
from .node import UnaryFunction
from .operators import NodeType


class DirectTrigonometricFunction(UnaryFunction):
  """sin, cos and tan: periodic functions reduced through the special-angle table"""
  __slots__ = ()
  KERNEL = None
  SYMPY_FUNCTION = None

  def compute_on_complex(self, c, angle_unit):
    angle = complex(c.value)
    if angle_unit == AngleUnit.DEGREE:
      angle = angle * math.pi / 180.0
    result = complex(type(self).KERNEL(np.complex128(angle)))
    # Residue such as cos(pi/2) ~ 6e-17 is dropped relative to the input
    re, im = neglect_relative_parts(result.real, result.imag, abs(angle), c.precision.epsilon)
    return Complex.builder(re, im, c.precision)

  def shallow_reduce(self, reduction_context):
    from ..trigonometry import shallow_reduce_direct_function
    return shallow_reduce_direct_function(self, reduction_context)

  def to_sympy(self):
    return type(self).SYMPY_FUNCTION(self.child_at(0).to_sympy())


class InverseTrigonometricFunction(UnaryFunction):
  """asin, acos and atan: principal branches, result expressed in the angle unit"""
  __slots__ = ()
  KERNEL = None
  SYMPY_FUNCTION = None

  def compute_on_complex(self, c, angle_unit):
    result = complex(type(self).KERNEL(np.complex128(c.value)))
    if angle_unit == AngleUnit.DEGREE:
      result = result * 180.0 / math.pi
    return Complex.builder(result.real, result.imag, c.precision)

  def shallow_reduce(self, reduction_context):
    from ..trigonometry import shallow_reduce_inverse_function
    return shallow_reduce_inverse_function(self, reduction_context)

  def to_sympy(self):
    return type(self).SYMPY_FUNCTION(self.child_at(0).to_sympy())


class Sine(DirectTrigonometricFunction):
  __slots__ = ()
  TYPE = NodeType.SINE
  LATEX_NAME = "\\sin"
  KERNEL = np.sin
  SYMPY_FUNCTION = sp.sin


class Cosine(DirectTrigonometricFunction):
  __slots__ = ()
  TYPE = NodeType.COSINE
  LATEX_NAME = "\\cos"
  KERNEL = np.cos
  SYMPY_FUNCTION = sp.cos


class Tangent(DirectTrigonometricFunction):
  __slots__ = ()
  TYPE = NodeType.TANGENT
  LATEX_NAME = "\\tan"
  KERNEL = np.tan
  SYMPY_FUNCTION = sp.tan


class ArcSine(InverseTrigonometricFunction):
  __slots__ = ()
  TYPE = NodeType.ARC_SINE
  LATEX_NAME = "\\arcsin"
  KERNEL = np.arcsin
  SYMPY_FUNCTION = sp.asin


class ArcCosine(InverseTrigonometricFunction):
  __slots__ = ()
  TYPE = NodeType.ARC_COSINE
  LATEX_NAME = "\\arccos"
  KERNEL = np.arccos
  SYMPY_FUNCTION = sp.acos


class ArcTangent(InverseTrigonometricFunction):
  __slots__ = ()
  TYPE = NodeType.ARC_TANGENT
  LATEX_NAME = "\\arctan"
  KERNEL = np.arctan
  SYMPY_FUNCTION = sp.atan


TRIGONOMETRIC_CLASSES = {
  cls.TYPE: cls for cls in (Sine, Cosine, Tangent, ArcSine, ArcCosine, ArcTangent)
}
