import numpy as np
import sympy as sp

from ...context import Context
from ...logging_system import log_debug
from ...numeric import Complex, round_to_error
from ...settings import PrintFloatMode, Precision
from ..utils import serialization
from .node import Node, Symbol, ComplexLiteral, shadowing_context
from .operators import NodeType

DERIVATIVE_FUNCTION = sp.Function('diff')
VARIABLE_NAME = 'x'

# Ridders' extrapolation parameters
MIN_INITIAL_RATE = 0.01
RATE_STEP_SIZE = 2.0
MAX_ERROR_RATE_ON_APPROXIMATION = 0.001
TABLE_SIZE = 10


class Derivative(Node):
  """diff(f, a): derivative of f with respect to x, evaluated at a.

  The derivative is never computed symbolically. Evaluation uses Ridders'
  method: centered differences at a geometric sequence of shrinking steps,
  extrapolated to a zero step with Richardson's scheme (Press et al.,
  Numerical Recipes in C, 2nd ed., section 5.7). The result is rejected as
  NaN when the estimated error is large relative to the answer.
  """

  __slots__ = ()
  TYPE = NodeType.DERIVATIVE
  ARITY = 2

  def function(self) -> Node:
    return self.child_at(0)

  def point(self) -> Node:
    return self.child_at(1)

  def deep_reduce(self, reduction_context):
    # f is kept as written; only the abscissa is simplified
    self.point().deep_reduce(reduction_context)
    return self.shallow_reduce(reduction_context)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    context = reduction_context.context
    variable_context = shadowing_context(context, VARIABLE_NAME, Symbol(VARIABLE_NAME))
    if self.function().deep_is_matrix(variable_context) or self.point().deep_is_matrix(context):
      return self.replace_with_undefined_in_place()
    return self

  # Evaluation

  def _evaluate_at(self, abscissa, context, angle_unit, precision):
    """Real value of f at `abscissa`, computed in a fresh child context"""
    point_context = Context(parent=context)
    point_context.set_expression_for_symbol(VARIABLE_NAME, ComplexLiteral(float(abscissa)))
    value = self.function().evaluate(point_context, angle_unit, precision).to_scalar()
    return precision.real_dtype(value)

  def _growth_rate_around_abscissa(self, x, h, context, angle_unit, precision):
    plus = self._evaluate_at(x + h, context, angle_unit, precision)
    minus = self._evaluate_at(x - h, context, angle_unit, precision)
    return (plus - minus) / (2 * h)

  def _approximate_second_derivative(self, x, h, context, angle_unit, precision):
    plus = self._evaluate_at(x + h, context, angle_unit, precision)
    middle = self._evaluate_at(x, context, angle_unit, precision)
    minus = self._evaluate_at(x - h, context, angle_unit, precision)
    return plus - 2 * middle + minus

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    dtype = precision.real_dtype
    tiny = precision.tiny
    x = dtype(self.point().evaluate(context, angle_unit, precision).to_scalar())
    if np.isnan(x):
      log_debug("derivative rejected: the abscissa is not a real number")
      return Complex.undefined(precision)
    function_value = self._evaluate_at(x, context, angle_unit, precision)
    if np.isnan(function_value):
      log_debug(f"derivative rejected: f is undefined at {float(x)}")
      return Complex.undefined(precision)

    with np.errstate(all='ignore'):
      ans, err = self._ridders(x, function_value, context, angle_unit, precision)
      rejected = np.isnan(err) or abs(err / ans) > MAX_ERROR_RATE_ON_APPROXIMATION
    if rejected:
      log_debug(f"derivative rejected: error {float(err)} too large for {float(ans)}")
      return Complex.undefined(precision)
    if err < tiny:
      return Complex.builder(float(ans), 0.0, precision)
    return Complex.builder(round_to_error(float(ans), float(err)), 0.0, precision)

  def _ridders(self, x, function_value, context, angle_unit, precision):
    dtype = precision.real_dtype
    tiny = precision.tiny

    h = dtype(MIN_INITIAL_RATE) if abs(x) < tiny else x / dtype(1000.0)
    f2 = self._approximate_second_derivative(x, h, context, angle_unit, precision)
    if abs(f2) < tiny:
      f2 = dtype(MIN_INITIAL_RATE)
    hh = np.sqrt(abs(function_value / (f2 / (h * h)))) / dtype(10.0)
    if abs(hh) < tiny:
      hh = dtype(MIN_INITIAL_RATE)
    # Make hh exactly representable
    hh = (x + hh) - x

    a = np.ones((TABLE_SIZE, TABLE_SIZE), dtype=dtype)
    a[0, 0] = self._growth_rate_around_abscissa(x, hh, context, angle_unit, precision)
    err = dtype(precision.max)
    ans = dtype(0.0)
    step_squared = dtype(RATE_STEP_SIZE * RATE_STEP_SIZE)
    for i in range(1, TABLE_SIZE):
      hh = hh / dtype(RATE_STEP_SIZE)
      hh = (x + hh) - x
      a[0, i] = self._growth_rate_around_abscissa(x, hh, context, angle_unit, precision)
      fac = step_squared
      for j in range(1, TABLE_SIZE):
        a[j, i] = (a[j - 1, i] * fac - a[j - 1, i - 1]) / (fac - dtype(1.0))
        fac = step_squared * fac
        errt = max(abs(a[j, i] - a[j - 1, i]), abs(a[j, i] - a[j - 1, i - 1]))
        if errt < err:
          err = errt
          ans = a[j, i]
      # Higher order made things worse
      if abs(a[i, i] - a[i - 1, i - 1]) > 2 * err:
        break
    return ans, err

  # Presentation

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return serialization.prefix(self, 'diff', float_mode, significant_digits)

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    f = self.function().create_layout(float_mode, significant_digits)
    a = self.point().create_layout(float_mode, significant_digits)
    return f"\\frac{{d}}{{dx}}\\left({f}\\right)_{{x={a}}}"

  def to_sympy(self):
    return DERIVATIVE_FUNCTION(self.function().to_sympy(), self.point().to_sympy())
