import cmath
import math
import numpy as np
import sympy as sp

from ...logging_system import log_debug
from ...numeric import Complex, MatrixComplex, complex_square_root, branch_cut_corrected
from ...settings import PrintFloatMode
from ..utils import serialization
from .node import Node, BinaryOperator, UnaryFunction, Rational, ComplexLiteral, Matrix
from .operators import NodeType

# Exponents beyond this are not folded exactly
MAX_EXACT_EXPONENT = 1000


def is_literal(node: Node) -> bool:
  return node.TYPE in (NodeType.RATIONAL, NodeType.COMPLEX_LITERAL)


def is_zero(node: Node) -> bool:
  return is_literal(node) and node.is_zero()


def is_one(node: Node) -> bool:
  return is_literal(node) and node.is_one()


def fold_literals(node: Node, reduction_context) -> Node:
  """Replace an operator over approximate literals by its value"""
  value = node.evaluate(None, reduction_context.angle_unit, reduction_context.precision)
  if value.is_matrix() or value.is_undefined():
    return node.replace_with_undefined_in_place()
  return node.replace_with_in_place(ComplexLiteral.from_evaluation(value))


def fold_rational(node: Node, value) -> Node:
  return node.replace_with_in_place(Rational(value))


def entrywise(node: Node, a: Matrix, b: Matrix, operator, reduction_context) -> Node:
  """Combine two matrix literals entry by entry with `operator`"""
  if (a.rows, a.columns) != (b.rows, b.columns):
    log_debug(f"{type(node).__name__} on matrices {a.rows}x{a.columns} and {b.rows}x{b.columns}")
    return node.replace_with_undefined_in_place()
  rows, columns = a.rows, a.columns
  entries = [operator(left, right) for left, right in zip(a.detach_children(), b.detach_children())]
  result = node.replace_with_in_place(Matrix(rows, columns, entries))
  return result.deep_reduce(reduction_context)


def distribute(node: Node, matrix: Matrix, scalar: Node, operator, matrix_first: bool, reduction_context) -> Node:
  rows, columns = matrix.rows, matrix.columns
  entries = []
  for entry in matrix.detach_children():
    if matrix_first:
      entries.append(operator(entry, scalar.clone()))
    else:
      entries.append(operator(scalar.clone(), entry))
  result = node.replace_with_in_place(Matrix(rows, columns, entries))
  return result.deep_reduce(reduction_context)


def rewrite_as_tangent(node: Node, sine: Node, reduction_context) -> Node:
  from .trigonometric import Tangent
  argument, = sine.detach_children()
  tangent = node.replace_with_in_place(Tangent(argument))
  return tangent.shallow_reduce(reduction_context)


class Addition(BinaryOperator):
  __slots__ = ()
  TYPE = NodeType.ADDITION
  ACCEPTS_UNITS = True

  def compute_on_complexes(self, c, d):
    return Complex(c.value + d.value, c.precision)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    a, b = self.children()
    if a.TYPE == NodeType.MATRIX and b.TYPE == NodeType.MATRIX:
      return entrywise(self, a, b, Addition, reduction_context)
    if a.TYPE == NodeType.RATIONAL and b.TYPE == NodeType.RATIONAL:
      return fold_rational(self, a.value + b.value)
    if is_literal(a) and is_literal(b):
      return fold_literals(self, reduction_context)
    if is_zero(b):
      return self.replace_with_in_place(a)
    if is_zero(a):
      return self.replace_with_in_place(b)
    return self

  def to_sympy(self):
    a, b = self.children()
    return a.to_sympy() + b.to_sympy()


class Subtraction(BinaryOperator):
  __slots__ = ()
  TYPE = NodeType.SUBTRACTION
  ACCEPTS_UNITS = True

  def compute_on_complexes(self, c, d):
    return Complex.builder(c.real - d.real, c.imag - d.imag, c.precision)

  def compute_on_complex_and_matrix(self, c, m):
    # scalar - matrix is defined as the opposite of matrix - scalar
    return self.compute_on_matrix_and_complex(m, c).opposite()

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    a, b = self.children()
    if a.TYPE == NodeType.MATRIX and b.TYPE == NodeType.MATRIX:
      return entrywise(self, a, b, Subtraction, reduction_context)
    if a.TYPE == NodeType.RATIONAL and b.TYPE == NodeType.RATIONAL:
      return fold_rational(self, a.value - b.value)
    if is_literal(a) and is_literal(b):
      return fold_literals(self, reduction_context)
    if is_zero(b):
      return self.replace_with_in_place(a)
    if a.is_identical_to(b) and not a.deep_is_matrix(reduction_context.context):
      return self.replace_with_in_place(Rational(0))
    return self

  def to_sympy(self):
    a, b = self.children()
    return a.to_sympy() - b.to_sympy()


class Multiplication(BinaryOperator):
  __slots__ = ()
  TYPE = NodeType.MULTIPLICATION
  ACCEPTS_UNITS = True

  def compute_on_complexes(self, c, d):
    return Complex(c.value * d.value, c.precision)

  def compute_on_matrices(self, m, n):
    if m.columns != n.rows:
      log_debug(f"matrix product of {m.rows}x{m.columns} by {n.rows}x{n.columns}")
      return Complex.undefined(m.precision)
    return MatrixComplex(m.values @ n.values, m.precision)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    context = reduction_context.context
    a, b = self.children()
    if a.TYPE == NodeType.MATRIX and b.TYPE == NodeType.MATRIX:
      return self._matrix_product(a, b, reduction_context)
    if a.TYPE == NodeType.RATIONAL and b.TYPE == NodeType.RATIONAL:
      return fold_rational(self, a.value * b.value)
    if is_literal(a) and is_literal(b):
      return fold_literals(self, reduction_context)
    if a.TYPE == NodeType.MATRIX and not b.deep_is_matrix(context):
      return distribute(self, a, b, Multiplication, True, reduction_context)
    if b.TYPE == NodeType.MATRIX and not a.deep_is_matrix(context):
      return distribute(self, b, a, Multiplication, False, reduction_context)
    if is_one(b):
      return self.replace_with_in_place(a)
    if is_one(a):
      return self.replace_with_in_place(b)
    if (is_zero(b) and not a.deep_is_matrix(context)) or (is_zero(a) and not b.deep_is_matrix(context)):
      return self.replace_with_in_place(Rational(0))
    from ..trigonometry import expression_is_equivalent_to_tangent
    if expression_is_equivalent_to_tangent(self):
      return rewrite_as_tangent(self, a, reduction_context)
    return self

  def _matrix_product(self, a: Matrix, b: Matrix, reduction_context) -> Node:
    if a.columns != b.rows:
      log_debug(f"matrix product of {a.rows}x{a.columns} by {b.rows}x{b.columns}")
      return self.replace_with_undefined_in_place()
    rows, inner, columns = a.rows, a.columns, b.columns
    left = a.detach_children()
    right = b.detach_children()
    entries = []
    for i in range(rows):
      for j in range(columns):
        total = Multiplication(left[i * inner].clone(), right[j].clone())
        for k in range(1, inner):
          total = Addition(total, Multiplication(left[i * inner + k].clone(), right[k * columns + j].clone()))
        entries.append(total)
    result = self.replace_with_in_place(Matrix(rows, columns, entries))
    return result.deep_reduce(reduction_context)

  def to_sympy(self):
    a, b = self.children()
    return a.to_sympy() * b.to_sympy()


class Division(BinaryOperator):
  __slots__ = ()
  TYPE = NodeType.DIVISION
  ACCEPTS_UNITS = True

  def compute_on_complexes(self, c, d):
    if d.value == 0:
      return Complex.undefined(c.precision)
    return Complex(c.value / d.value, c.precision)

  def compute_on_complex_and_matrix(self, c, m):
    return Complex.undefined(c.precision)

  def compute_on_matrices(self, m, n):
    return Complex.undefined(m.precision)

  def deep_is_matrix(self, context=None):
    return self.child_at(0).deep_is_matrix(context)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    a, b = self.children()
    if is_zero(b) or b.deep_is_matrix(reduction_context.context):
      return self.replace_with_undefined_in_place()
    if a.TYPE == NodeType.RATIONAL and b.TYPE == NodeType.RATIONAL:
      return fold_rational(self, a.value / b.value)
    if is_literal(a) and is_literal(b):
      return fold_literals(self, reduction_context)
    if is_one(b):
      return self.replace_with_in_place(a)
    from ..trigonometry import expression_is_equivalent_to_tangent
    if expression_is_equivalent_to_tangent(self):
      return rewrite_as_tangent(self, a, reduction_context)
    return self

  def to_sympy(self):
    a, b = self.children()
    return a.to_sympy() / b.to_sympy()


class Power(BinaryOperator):
  __slots__ = ()
  TYPE = NodeType.POWER
  ACCEPTS_UNITS = True

  def compute_on_complexes(self, c, d):
    if d.value == 0.5:
      return complex_square_root(c)
    if c.value == 0:
      if d.real <= 0:
        return Complex.undefined(c.precision)
      return Complex.builder(0.0, 0.0, c.precision)
    with np.errstate(all='ignore'):
      result = np.power(c.value, d.value)
    argument = abs(complex(d.value)) * abs(cmath.phase(complex(c.value)))
    return branch_cut_corrected(complex(result), argument, c.precision)

  def compute_on_matrix_and_complex(self, m, c):
    if m.rows != m.columns or c.imag != 0.0 or not math.isfinite(c.real):
      return Complex.undefined(m.precision)
    if c.real < 0 or c.real != int(c.real):
      return Complex.undefined(m.precision)
    with np.errstate(all='ignore'):
      values = np.linalg.matrix_power(m.values, int(c.real))
    return MatrixComplex(values, m.precision)

  def compute_on_complex_and_matrix(self, c, m):
    return Complex.undefined(c.precision)

  def compute_on_matrices(self, m, n):
    return Complex.undefined(m.precision)

  def deep_is_matrix(self, context=None):
    return self.child_at(0).deep_is_matrix(context)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    context = reduction_context.context
    base, exponent = self.children()
    if exponent.deep_is_matrix(context):
      return self.replace_with_undefined_in_place()
    if base.deep_is_matrix(context):
      return self._reduce_matrix_base(base, exponent)
    if is_zero(base) and exponent.TYPE == NodeType.RATIONAL and exponent.value <= 0:
      return self.replace_with_undefined_in_place()
    if base.TYPE == NodeType.RATIONAL and exponent.TYPE == NodeType.RATIONAL:
      if not self.is_too_large_to_fold():
        value = base.value ** exponent.value
        if value.is_Rational:
          return fold_rational(self, value)
    elif is_literal(base) and is_literal(exponent):
      return fold_literals(self, reduction_context)
    if is_one(exponent):
      return self.replace_with_in_place(base)
    if is_zero(exponent):
      return self.replace_with_in_place(Rational(1))
    if is_one(base):
      return self.replace_with_in_place(Rational(1))
    return self

  def _reduce_matrix_base(self, base: Node, exponent: Node) -> Node:
    if is_literal(exponent):
      if exponent.TYPE != NodeType.RATIONAL or exponent.value.q != 1 or exponent.value < 0:
        return self.replace_with_undefined_in_place()
    if base.TYPE != NodeType.MATRIX:
      return self
    if not base.is_square():
      return self.replace_with_undefined_in_place()
    if is_zero(exponent):
      n = base.rows
      identity = [Rational(1 if i == j else 0) for i in range(n) for j in range(n)]
      return self.replace_with_in_place(Matrix(n, n, identity))
    if is_one(exponent):
      return self.replace_with_in_place(base)
    return self

  def is_too_large_to_fold(self) -> bool:
    exponent = self.child_at(1)
    return exponent.TYPE == NodeType.RATIONAL and abs(exponent.value.p) > MAX_EXACT_EXPONENT

  def to_sympy(self):
    a, b = self.children()
    if self.is_too_large_to_fold():
      return sp.Pow(a.to_sympy(), b.to_sympy(), evaluate=False)
    return a.to_sympy() ** b.to_sympy()


def has_unfoldable_power(node: Node) -> bool:
  """Whether an exact conversion of `node` would expand a power past MAX_EXACT_EXPONENT"""
  stack = [node]
  while stack:
    current = stack.pop()
    if current.TYPE == NodeType.POWER and current.is_too_large_to_fold():
      return True
    stack.extend(current.children())
  return False


class Opposite(UnaryFunction):
  __slots__ = ()
  TYPE = NodeType.OPPOSITE
  ACCEPTS_UNITS = True

  def compute_on_complex(self, c, angle_unit):
    return c.opposite()

  def deep_is_matrix(self, context=None):
    return self.child_at(0).deep_is_matrix(context)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    operand = self.child_at(0)
    if operand.TYPE == NodeType.RATIONAL:
      return fold_rational(self, -operand.value)
    if operand.TYPE == NodeType.COMPLEX_LITERAL:
      return self.replace_with_in_place(ComplexLiteral(0.0 - operand.real, 0.0 - operand.imag))
    if operand.TYPE == NodeType.OPPOSITE:
      return self.replace_with_in_place(operand.child_at(0))
    if operand.TYPE == NodeType.MATRIX:
      rows, columns = operand.rows, operand.columns
      entries = [Opposite(entry) for entry in operand.detach_children()]
      result = self.replace_with_in_place(Matrix(rows, columns, entries))
      return result.deep_reduce(reduction_context)
    return self

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return "-" + serialization.serialize_child(self.child_at(0), self.precedence(), float_mode,
                                               significant_digits, strict=True)

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return "-" + serialization.layout_child(self.child_at(0), self.precedence(), float_mode,
                                            significant_digits, strict=True)

  def to_sympy(self):
    return -self.child_at(0).to_sympy()


class SquareRoot(UnaryFunction):
  __slots__ = ()
  TYPE = NodeType.SQUARE_ROOT
  ACCEPTS_UNITS = True

  def compute_on_complex(self, c, angle_unit):
    return complex_square_root(c)

  def compute_on_matrix(self, m, angle_unit):
    return Complex.undefined(m.precision)

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    if self.child_at(0).deep_is_matrix(reduction_context.context):
      return self.replace_with_undefined_in_place()
    operand, = self.detach_children()
    power = self.replace_with_in_place(Power(operand, Rational(1, 2)))
    return power.shallow_reduce(reduction_context)

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return f"\\sqrt{{{self.child_at(0).create_layout(float_mode, significant_digits)}}}"

  def to_sympy(self):
    return sp.sqrt(self.child_at(0).to_sympy())
