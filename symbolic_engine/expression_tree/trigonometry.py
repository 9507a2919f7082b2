"""
Exact trigonometry.

Holds the table of special angles used to reduce sin, cos and tan of exact
angles (and their inverses of exact values), the tangent recognizer used by
multiplication and division, and the period helper used to size graph
windows.
"""

import math
import sympy as sp
from typing import Optional

from ..context import Context
from ..logging_system import log_debug
from ..settings import AngleUnit, ReductionContext
from .core.node import Node, Rational, Constant, Symbol
from .core.arithmetic import Multiplication, Opposite, has_unfoldable_power
from .core.operators import NodeType, INVERSE_OF, DIRECT_TRIGONOMETRIC
from .utils.sympy_utils import from_sympy

# degrees, cosine, sine, tangent; '' where the column does not cover the angle
_TABLE_SOURCE = (
  ("-90", "", "-1", "nan"),
  ("-75", "", "-(sqrt(6)+sqrt(2))/4", "-(2+sqrt(3))"),
  ("-72", "", "-sqrt(10+2*sqrt(5))/4", "-sqrt(5+2*sqrt(5))"),
  ("-135/2", "", "-sqrt(2+sqrt(2))/2", "-(1+sqrt(2))"),
  ("-60", "", "-sqrt(3)/2", "-sqrt(3)"),
  ("-54", "", "-(1+sqrt(5))/4", "-sqrt(25+10*sqrt(5))/5"),
  ("-45", "", "-sqrt(2)/2", "-1"),
  ("-36", "", "-sqrt(10-2*sqrt(5))/4", "-sqrt(5-2*sqrt(5))"),
  ("-30", "", "-1/2", "-sqrt(3)/3"),
  ("-45/2", "", "-sqrt(2-sqrt(2))/2", "1-sqrt(2)"),
  ("-18", "", "-(sqrt(5)-1)/4", "-sqrt(25-10*sqrt(5))/5"),
  ("-15", "", "-(sqrt(6)-sqrt(2))/4", "sqrt(3)-2"),
  ("0", "1", "0", "0"),
  ("15", "(sqrt(6)+sqrt(2))/4", "(sqrt(6)-sqrt(2))/4", "2-sqrt(3)"),
  ("18", "sqrt(10+2*sqrt(5))/4", "(sqrt(5)-1)/4", "sqrt(25-10*sqrt(5))/5"),
  ("45/2", "sqrt(2+sqrt(2))/2", "sqrt(2-sqrt(2))/2", "sqrt(2)-1"),
  ("30", "sqrt(3)/2", "1/2", "sqrt(3)/3"),
  ("36", "(1+sqrt(5))/4", "sqrt(10-2*sqrt(5))/4", "sqrt(5-2*sqrt(5))"),
  ("45", "sqrt(2)/2", "sqrt(2)/2", "1"),
  ("54", "sqrt(10-2*sqrt(5))/4", "(1+sqrt(5))/4", "sqrt(25+10*sqrt(5))/5"),
  ("60", "1/2", "sqrt(3)/2", "sqrt(3)"),
  ("135/2", "sqrt(2-sqrt(2))/2", "sqrt(2+sqrt(2))/2", "1+sqrt(2)"),
  ("72", "(sqrt(5)-1)/4", "sqrt(10+2*sqrt(5))/4", "sqrt(5+2*sqrt(5))"),
  ("75", "(sqrt(6)-sqrt(2))/4", "(sqrt(6)+sqrt(2))/4", "2+sqrt(3)"),
  ("90", "0", "1", "nan"),
  ("105", "-(sqrt(6)-sqrt(2))/4", "", ""),
  ("108", "-(sqrt(5)-1)/4", "", ""),
  ("225/2", "-sqrt(2-sqrt(2))/2", "", ""),
  ("120", "-1/2", "", ""),
  ("126", "-sqrt(10-2*sqrt(5))/4", "", ""),
  ("135", "-sqrt(2)/2", "", ""),
  ("144", "-(1+sqrt(5))/4", "", ""),
  ("150", "-sqrt(3)/2", "", ""),
  ("315/2", "-sqrt(2+sqrt(2))/2", "", ""),
  ("162", "-sqrt(10+2*sqrt(5))/4", "", ""),
  ("165", "-(sqrt(6)+sqrt(2))/4", "", ""),
  ("180", "-1", "", ""),
)

COSINE_COLUMN = 1
SINE_COLUMN = 2
TANGENT_COLUMN = 3

COLUMN_OF = {
  NodeType.COSINE: COSINE_COLUMN, NodeType.ARC_COSINE: COSINE_COLUMN,
  NodeType.SINE: SINE_COLUMN, NodeType.ARC_SINE: SINE_COLUMN,
  NodeType.TANGENT: TANGENT_COLUMN, NodeType.ARC_TANGENT: TANGENT_COLUMN,
}


def _build_table():
  rows = []
  for source in _TABLE_SOURCE:
    row = [sp.Rational(source[0])]
    for cell in source[1:]:
      row.append(sp.sympify(cell) if cell else None)
    rows.append(tuple(row))
  return tuple(rows)


SPECIAL_ANGLES = _build_table()
_ROW_BY_ANGLE = {row[0]: row for row in SPECIAL_ANGLES}

# Tolerance of the numeric prefilter run before the exact comparison
_PREFILTER_TOLERANCE = 1e-9


def table_value(node_type: NodeType, degrees) -> Optional[sp.Expr]:
  """Exact value of a direct function at `degrees` after folding into the table domain"""
  angle = sp.Rational(degrees)
  if node_type == NodeType.COSINE:
    angle = angle % 360
    if angle > 180:
      angle = 360 - angle
  elif node_type == NodeType.SINE:
    angle = angle % 360
    if angle > 180:
      angle -= 360
    if angle > 90:
      angle = 180 - angle
    elif angle < -90:
      angle = -180 - angle
  else:
    angle = angle % 180
    if angle > 90:
      angle -= 180
  row = _ROW_BY_ANGLE.get(angle)
  if row is None:
    return None
  return row[COLUMN_OF[node_type]]


def angle_for_value(node_type: NodeType, value) -> Optional[sp.Rational]:
  """Angle in degrees whose table entry equals `value` for an inverse function"""
  column = COLUMN_OF[node_type]
  try:
    approximation = complex(sp.N(value))
  except TypeError:
    return None
  if approximation.imag != 0.0:
    return None
  for row in SPECIAL_ANGLES:
    cell = row[column]
    if cell is None or cell is sp.nan:
      continue
    if abs(float(cell) - approximation.real) > _PREFILTER_TOLERANCE:
      continue
    if abs(sp.N(cell - value, 50)) < sp.Float(10) ** -40:
      return row[0]
  return None


def exact_angle_in_degrees(operand: Node, angle_unit: AngleUnit) -> Optional[sp.Rational]:
  if has_unfoldable_power(operand):
    return None
  value = operand.to_sympy()
  if angle_unit == AngleUnit.RADIAN:
    value = value * 180 / sp.pi
  if value.is_Rational:
    return value
  return None


def exact_value(operand: Node) -> Optional[sp.Expr]:
  if has_unfoldable_power(operand):
    return None
  value = operand.to_sympy()
  if not value.is_number or value.has(sp.Float) or value.has(sp.nan, sp.zoo):
    return None
  return value


def angle_node(degrees: sp.Rational, angle_unit: AngleUnit) -> Node:
  if angle_unit == AngleUnit.DEGREE:
    return Rational(degrees)
  if degrees == 0:
    return Rational(0)
  if degrees == 180:
    return Constant('pi')
  return Multiplication(Rational(degrees / 180), Constant('pi'))


def shallow_reduce_direct_function(node: Node, reduction_context: ReductionContext) -> Node:
  e = node.default_shallow_reduce(reduction_context)
  if e is not node:
    return e
  operand = node.child_at(0)
  if operand.deep_is_matrix(reduction_context.context):
    return node.replace_with_undefined_in_place()
  if operand.TYPE == INVERSE_OF[node.TYPE]:
    return node.replace_with_in_place(operand.child_at(0))

  degrees = exact_angle_in_degrees(operand, reduction_context.angle_unit)
  if degrees is not None:
    value = table_value(node.TYPE, degrees)
    if value is not None:
      log_debug(f"{node.serialize()} found in the special angle table")
      replacement = node.replace_with_in_place(from_sympy(value))
      return replacement.deep_reduce(reduction_context)

  if operand.TYPE == NodeType.OPPOSITE:
    # cos is even, sin and tan are odd
    if node.TYPE == NodeType.COSINE:
      operand.replace_with_in_place(operand.child_at(0))
      return node.shallow_reduce(reduction_context)
    argument, = operand.detach_children()
    inner = type(node)(argument)
    opposite = node.replace_with_in_place(Opposite(inner))
    inner.shallow_reduce(reduction_context)
    return opposite.shallow_reduce(reduction_context)
  return node


def shallow_reduce_inverse_function(node: Node, reduction_context: ReductionContext) -> Node:
  e = node.default_shallow_reduce(reduction_context)
  if e is not node:
    return e
  operand = node.child_at(0)
  if operand.deep_is_matrix(reduction_context.context):
    return node.replace_with_undefined_in_place()
  value = exact_value(operand)
  if value is None:
    return node
  degrees = angle_for_value(node.TYPE, value)
  if degrees is None:
    return node
  replacement = node.replace_with_in_place(angle_node(degrees, reduction_context.angle_unit))
  return replacement.deep_reduce(reduction_context)


def expression_is_equivalent_to_tangent(node: Node) -> bool:
  """Whether `node` is sin(a)/cos(a) or sin(a)*cos(a)^-1"""
  if node.TYPE not in (NodeType.DIVISION, NodeType.MULTIPLICATION):
    return False
  numerator, other = node.children()
  if numerator.TYPE != NodeType.SINE:
    return False
  if node.TYPE == NodeType.MULTIPLICATION:
    if other.TYPE != NodeType.POWER:
      return False
    exponent = other.child_at(1)
    if exponent.TYPE != NodeType.RATIONAL or exponent.value != -1:
      return False
    other = other.child_at(0)
  if other.TYPE != NodeType.COSINE:
    return False
  return numerator.child_at(0).is_identical_to(other.child_at(0))


def characteristic_x_range(node: Node, context: Optional[Context], angle_unit: AngleUnit) -> float:
  """Period in x of a direct trigonometric function whose operand is linear in x; NaN otherwise"""
  if node.TYPE not in DIRECT_TRIGONOMETRIC:
    return math.nan
  shadow = Context(parent=context)
  shadow.set_expression_for_symbol('x', Symbol('x'))
  operand = node.child_at(0).clone()
  operand = operand.deep_reduce(ReductionContext(context=shadow, angle_unit=angle_unit))
  if has_unfoldable_power(operand):
    return math.nan
  x = sp.Symbol('x')
  try:
    polynomial = sp.Poly(operand.to_sympy(), x)
  except sp.PolynomialError:
    return math.nan
  if polynomial.degree() != 1:
    return math.nan
  slope = polynomial.LC()
  if slope.free_symbols:
    return math.nan
  period = 360 if angle_unit == AngleUnit.DEGREE else 2 * sp.pi
  return float(period / sp.Abs(slope))
