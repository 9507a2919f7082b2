import math
import numpy as np
import sympy as sp
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

from ...context import Context
from ...errors import ArityError, ShapeError
from ...logging_system import log_debug
from ...numeric import Complex, MatrixComplex, Evaluation
from ...settings import AngleUnit, Precision, PrintFloatMode, ReductionContext
from ..utils import serialization
from .operators import NodeType, PRECEDENCE, ATOM_PRECEDENCE, INFIX_OPERATORS, FUNCTION_NAMES


class Node(ABC):
  """Base expression node.

  A node exclusively owns its children. Children are adopted at construction
  and must not already belong to another tree, so a node can never become its
  own descendant. Reduction rewrites trees through replace_with_in_place;
  evaluation never mutates them.
  """

  __slots__ = ('_children', 'parent')

  TYPE: NodeType
  ARITY: Optional[int] = 0
  ACCEPTS_UNITS = False

  def __init__(self, *children: 'Node'):
    self._check_arity(len(children))
    self._children: List[Node] = []
    self.parent: Optional[Node] = None
    for child in children:
      self._adopt(child)

  def _check_arity(self, count: int):
    if self.ARITY is not None and count != self.ARITY:
      raise ArityError(f"{type(self).__name__} takes {self.ARITY} children, got {count}")

  def _adopt(self, child: 'Node'):
    if not isinstance(child, Node):
      raise TypeError(f"children must be nodes, got {type(child).__name__}")
    if child.parent is not None:
      raise ValueError("node already belongs to an expression tree; clone() or detach it first")
    child.parent = self
    self._children.append(child)

  # Tree access

  def children(self) -> Tuple['Node', ...]:
    return tuple(self._children)

  def child_at(self, index: int) -> 'Node':
    return self._children[index]

  def number_of_children(self) -> int:
    return len(self._children)

  def index_of_child(self, child: 'Node') -> int:
    for index, candidate in enumerate(self._children):
      if candidate is child:
        return index
    raise ValueError("node is not a child of this node")

  def _build(self, children: List['Node']) -> 'Node':
    return type(self)(*children)

  def with_replaced_children(self, children: Sequence['Node']) -> 'Node':
    """New node of the same type and payload with `children` substituted"""
    children = list(children)
    self._check_arity(len(children))
    return self._build(children)

  def clone(self) -> 'Node':
    return self._build([child.clone() for child in self._children])

  def detach_children(self) -> List['Node']:
    """Release every child so it can be reused elsewhere; self is left unusable"""
    children = self._children
    self._children = []
    for child in children:
      child.parent = None
    return children

  def has_ancestor(self, node: 'Node') -> bool:
    ancestor = self.parent
    while ancestor is not None:
      if ancestor is node:
        return True
      ancestor = ancestor.parent
    return False

  def replace_with_in_place(self, replacement: 'Node') -> 'Node':
    """Put `replacement` where self sits in its parent and return it.

    `replacement` must be parentless or a descendant of self. The handle on
    self must not be used afterwards.
    """
    if replacement is self:
      return self
    if self.has_ancestor(replacement):
      raise ValueError("a node cannot be replaced by one of its ancestors")
    if replacement.parent is not None:
      if not replacement.has_ancestor(self):
        raise ValueError("replacement already belongs to another expression tree")
      holder = replacement.parent
      placeholder = Undefined()
      placeholder.parent = holder
      holder._children[holder.index_of_child(replacement)] = placeholder
      replacement.parent = None
    parent = self.parent
    if parent is not None:
      parent._children[parent.index_of_child(self)] = replacement
      replacement.parent = parent
      self.parent = None
    return replacement

  def replace_with_undefined_in_place(self) -> 'Node':
    log_debug(f"{type(self).__name__} reduced to undefined")
    return self.replace_with_in_place(Undefined())

  # Structure

  def payload(self) -> tuple:
    return ()

  def is_identical_to(self, other: 'Node') -> bool:
    if type(self) is not type(other) or self.payload() != other.payload():
      return False
    if self.number_of_children() != other.number_of_children():
      return False
    return all(a.is_identical_to(b) for a, b in zip(self._children, other._children))

  def is_undefined(self) -> bool:
    return False

  def deep_is_matrix(self, context: Optional[Context] = None) -> bool:
    return False

  def precedence(self) -> int:
    return PRECEDENCE.get(self.TYPE, ATOM_PRECEDENCE)

  # Reduction

  def deep_reduce(self, reduction_context: ReductionContext) -> 'Node':
    """Reduce children first, then self; returns the node now in self's place"""
    for index in range(self.number_of_children()):
      self._children[index].deep_reduce(reduction_context)
    return self.shallow_reduce(reduction_context)

  def shallow_reduce(self, reduction_context: ReductionContext) -> 'Node':
    return self.default_shallow_reduce(reduction_context)

  def default_shallow_reduce(self, reduction_context: ReductionContext) -> 'Node':
    """Propagate undefined children and reject unit operands"""
    for child in self._children:
      if child.is_undefined():
        return self.replace_with_undefined_in_place()
    if not self.ACCEPTS_UNITS:
      for child in self._children:
        if child.TYPE == NodeType.UNIT:
          return self.replace_with_undefined_in_place()
    return self

  # Evaluation

  @abstractmethod
  def evaluate(self, context: Optional[Context], angle_unit: AngleUnit,
               precision: Precision = Precision.DOUBLE) -> Evaluation:
    pass

  # Presentation

  @abstractmethod
  def serialize(self, float_mode: PrintFloatMode = PrintFloatMode.DECIMAL,
                significant_digits: int = 7) -> str:
    pass

  @abstractmethod
  def create_layout(self, float_mode: PrintFloatMode = PrintFloatMode.DECIMAL,
                    significant_digits: int = 7) -> str:
    pass

  @abstractmethod
  def to_sympy(self) -> sp.Expr:
    pass

  def to_string(self) -> str:
    return self.serialize()

  def __repr__(self) -> str:
    return f"{type(self).__name__}<{self.serialize()}>"


# Leaves

class Rational(Node):
  """Exact rational literal p/q"""
  __slots__ = ('value',)
  TYPE = NodeType.RATIONAL

  def __init__(self, numerator, denominator=1):
    super().__init__()
    if denominator == 0:
      raise ValueError("rational denominator must be non-zero")
    self.value = sp.Rational(numerator, denominator)

  def _build(self, children):
    return Rational(self.value)

  def payload(self):
    return (self.value,)

  def precedence(self) -> int:
    if self.value < 0:
      return PRECEDENCE[NodeType.OPPOSITE]
    if self.value.q != 1:
      return PRECEDENCE[NodeType.DIVISION]
    return ATOM_PRECEDENCE

  def is_zero(self) -> bool:
    return self.value == 0

  def is_one(self) -> bool:
    return self.value == 1

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    return Complex.builder(float(self.value), 0.0, precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    if self.value.q == 1:
      return str(self.value.p)
    return f"{self.value.p}/{self.value.q}"

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    if self.value.q == 1:
      return str(self.value.p)
    sign = "-" if self.value < 0 else ""
    return f"{sign}\\frac{{{abs(self.value.p)}}}{{{self.value.q}}}"

  def to_sympy(self):
    return self.value


class ComplexLiteral(Node):
  """Approximate complex literal a+b*i"""
  __slots__ = ('real', 'imag')
  TYPE = NodeType.COMPLEX_LITERAL

  def __init__(self, real: float, imag: float = 0.0):
    super().__init__()
    self.real = float(real)
    self.imag = float(imag)

  @classmethod
  def from_evaluation(cls, evaluation: Complex) -> 'ComplexLiteral':
    return cls(evaluation.real, evaluation.imag)

  def _build(self, children):
    return ComplexLiteral(self.real, self.imag)

  def payload(self):
    return (self.real, self.imag)

  def is_zero(self) -> bool:
    return self.real == 0.0 and self.imag == 0.0

  def is_one(self) -> bool:
    return self.real == 1.0 and self.imag == 0.0

  def precedence(self) -> int:
    if self.real != 0.0 and self.imag != 0.0:
      return PRECEDENCE[NodeType.ADDITION]
    if self.real < 0 or self.imag < 0:
      return PRECEDENCE[NodeType.OPPOSITE]
    return ATOM_PRECEDENCE

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    return Complex.builder(self.real, self.imag, precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return Complex.builder(self.real, self.imag).to_string(float_mode=float_mode,
                                                           significant_digits=significant_digits)

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return self.serialize(float_mode, significant_digits).replace("*", "")

  def to_sympy(self):
    if self.imag == 0.0:
      return sp.Float(self.real)
    return sp.Float(self.real) + sp.Float(self.imag) * sp.I


CONSTANT_NAMES = ('pi', 'e', 'i')


class Constant(Node):
  """Mathematical constant: pi, e or the imaginary unit i"""
  __slots__ = ('name',)
  TYPE = NodeType.CONSTANT

  def __init__(self, name: str):
    super().__init__()
    if name not in CONSTANT_NAMES:
      raise ValueError(f"unknown constant {name!r}")
    self.name = name

  def _build(self, children):
    return Constant(self.name)

  def payload(self):
    return (self.name,)

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    if self.name == 'pi':
      return Complex.builder(math.pi, 0.0, precision)
    if self.name == 'e':
      return Complex.builder(math.e, 0.0, precision)
    return Complex.builder(0.0, 1.0, precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return self.name

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return "\\pi" if self.name == 'pi' else self.name

  def to_sympy(self):
    return {'pi': sp.pi, 'e': sp.E, 'i': sp.I}[self.name]


def shadowing_context(context: Optional[Context], name: str, value: 'Node') -> Context:
  """Child context in which `name` resolves to `value`"""
  shadow = Context(parent=context)
  shadow.set_expression_for_symbol(name, value)
  return shadow


class Symbol(Node):
  """Free symbol resolved through the Context"""
  __slots__ = ('name',)
  TYPE = NodeType.SYMBOL

  def __init__(self, name: str):
    super().__init__()
    if not name or name.startswith('_'):
      raise ValueError(f"invalid symbol name {name!r}")
    self.name = name

  def _build(self, children):
    return Symbol(self.name)

  def payload(self):
    return (self.name,)

  def _definition(self, context: Optional[Context]) -> Optional[Node]:
    if context is None:
      return None
    value = context.expression_for_symbol(self.name)
    if isinstance(value, Symbol) and value.name == self.name:
      return None
    return value

  def deep_is_matrix(self, context=None):
    value = self._definition(context)
    if value is None:
      return False
    return value.deep_is_matrix(shadowing_context(context, self.name, Undefined()))

  def shallow_reduce(self, reduction_context):
    context = reduction_context.context
    value = self._definition(context)
    if value is None:
      return self
    replacement = self.replace_with_in_place(value.clone())
    # The definition is reduced with the symbol bound to itself so that a
    # self-referencing definition stops after one substitution.
    shadow = shadowing_context(context, self.name, Symbol(self.name))
    return replacement.deep_reduce(reduction_context.with_context(shadow))

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    value = self._definition(context)
    if value is None:
      return Complex.undefined(precision)
    shadow = shadowing_context(context, self.name, Undefined())
    return value.evaluate(shadow, angle_unit, precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return self.name

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return self.name

  def to_sympy(self):
    return sp.Symbol(self.name)


class Undefined(Node):
  """Reduction result for expressions without a value"""
  __slots__ = ()
  TYPE = NodeType.UNDEFINED

  def _build(self, children):
    return Undefined()

  def is_undefined(self) -> bool:
    return True

  def shallow_reduce(self, reduction_context):
    return self

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    return Complex.undefined(precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return serialization.UNDEFINED_TEXT

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return "\\mathrm{undef}"

  def to_sympy(self):
    return sp.nan


class Unit(Node):
  """Physical unit leaf such as _m or _s"""
  __slots__ = ('name',)
  TYPE = NodeType.UNIT

  def __init__(self, name: str):
    super().__init__()
    if not name.startswith('_') or len(name) < 2:
      raise ValueError(f"unit names start with '_', got {name!r}")
    self.name = name

  def _build(self, children):
    return Unit(self.name)

  def payload(self):
    return (self.name,)

  def shallow_reduce(self, reduction_context):
    return self

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    return Complex.undefined(precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return self.name

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return f"\\mathrm{{{self.name[1:]}}}"

  def to_sympy(self):
    return sp.Symbol(self.name)


class Matrix(Node):
  """Rectangular matrix literal whose children are its entries in row-major order"""
  __slots__ = ('rows', 'columns')
  TYPE = NodeType.MATRIX
  ARITY = None

  def __init__(self, rows: int, columns: int, entries: Sequence[Node]):
    if rows < 1 or columns < 1:
      raise ShapeError(f"matrix dimensions must be positive, got {rows}x{columns}")
    self.rows = rows
    self.columns = columns
    super().__init__(*entries)

  @classmethod
  def from_rows(cls, rows: Sequence[Sequence[Node]]) -> 'Matrix':
    rows = [list(row) for row in rows]
    if not rows or any(len(row) != len(rows[0]) for row in rows):
      raise ShapeError("matrix rows must all have the same non-zero length")
    return cls(len(rows), len(rows[0]), [entry for row in rows for entry in row])

  def _check_arity(self, count):
    if count != self.rows * self.columns:
      raise ShapeError(f"a {self.rows}x{self.columns} matrix needs {self.rows * self.columns} entries, got {count}")

  def _build(self, children):
    return Matrix(self.rows, self.columns, children)

  def payload(self):
    return (self.rows, self.columns)

  def entry(self, row: int, column: int) -> Node:
    return self.child_at(row * self.columns + column)

  def is_square(self) -> bool:
    return self.rows == self.columns

  def deep_is_matrix(self, context=None):
    return True

  def shallow_reduce(self, reduction_context):
    e = self.default_shallow_reduce(reduction_context)
    if e is not self:
      return e
    if any(child.deep_is_matrix(reduction_context.context) for child in self._children):
      return self.replace_with_undefined_in_place()
    return self

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    values = np.empty((self.rows, self.columns), dtype=precision.complex_dtype)
    for index, child in enumerate(self._children):
      evaluation = child.evaluate(context, angle_unit, precision)
      if evaluation.is_matrix() or evaluation.is_undefined():
        return Complex.undefined(precision)
      values[divmod(index, self.columns)] = evaluation.value
    return MatrixComplex(values, precision)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    rows = []
    for r in range(self.rows):
      cells = [self.entry(r, c).serialize(float_mode, significant_digits) for c in range(self.columns)]
      rows.append("[" + ",".join(cells) + "]")
    return "[" + "".join(rows) + "]"

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    rows = []
    for r in range(self.rows):
      rows.append("&".join(self.entry(r, c).create_layout(float_mode, significant_digits)
                           for c in range(self.columns)))
    return "\\begin{pmatrix}" + "\\\\".join(rows) + "\\end{pmatrix}"

  def to_sympy(self):
    return sp.Matrix(self.rows, self.columns, [child.to_sympy() for child in self._children])


# Operator bases

class BinaryOperator(Node):
  """Two-operand operator evaluated through a scalar/matrix map-reduce"""
  __slots__ = ()
  ARITY = 2

  @abstractmethod
  def compute_on_complexes(self, c: Complex, d: Complex) -> Evaluation:
    pass

  def compute_on_complex_and_matrix(self, c: Complex, m: MatrixComplex) -> Evaluation:
    return m.map(lambda entry: self.compute_on_complexes(c, entry))

  def compute_on_matrix_and_complex(self, m: MatrixComplex, c: Complex) -> Evaluation:
    return m.map(lambda entry: self.compute_on_complexes(entry, c))

  def compute_on_matrices(self, m: MatrixComplex, n: MatrixComplex) -> Evaluation:
    if m.values.shape != n.values.shape:
      log_debug(f"{type(self).__name__} on matrices of shapes {m.values.shape} and {n.values.shape}")
      return Complex.undefined(m.precision)
    out = np.empty_like(m.values)
    for index in np.ndindex(*m.values.shape):
      result = self.compute_on_complexes(Complex(m.values[index], m.precision),
                                         Complex(n.values[index], n.precision))
      if result.is_matrix() or result.is_undefined():
        return Complex.undefined(m.precision)
      out[index] = result.value
    return MatrixComplex(out, m.precision)

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    left = self.child_at(0).evaluate(context, angle_unit, precision)
    right = self.child_at(1).evaluate(context, angle_unit, precision)
    if left.is_undefined() or right.is_undefined():
      return Complex.undefined(precision)
    if not left.is_matrix() and not right.is_matrix():
      result = self.compute_on_complexes(left, right)
    elif not left.is_matrix():
      result = self.compute_on_complex_and_matrix(left, right)
    elif not right.is_matrix():
      result = self.compute_on_matrix_and_complex(left, right)
    else:
      result = self.compute_on_matrices(left, right)
    if result.is_undefined():
      return Complex.undefined(precision)
    return result

  def deep_is_matrix(self, context=None):
    return any(child.deep_is_matrix(context) for child in self._children)

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return serialization.infix(self, INFIX_OPERATORS[self.TYPE], float_mode, significant_digits)

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return serialization.layout_infix(self, INFIX_OPERATORS[self.TYPE], float_mode, significant_digits)


class UnaryFunction(Node):
  """One-operand function mapped entry-wise over matrices"""
  __slots__ = ()
  ARITY = 1
  LATEX_NAME = ""

  @abstractmethod
  def compute_on_complex(self, c: Complex, angle_unit: AngleUnit) -> Complex:
    pass

  def compute_on_matrix(self, m: MatrixComplex, angle_unit: AngleUnit) -> Evaluation:
    return m.map(lambda entry: self.compute_on_complex(entry, angle_unit))

  def evaluate(self, context, angle_unit, precision=Precision.DOUBLE):
    operand = self.child_at(0).evaluate(context, angle_unit, precision)
    if operand.is_undefined():
      return Complex.undefined(precision)
    if operand.is_matrix():
      result = self.compute_on_matrix(operand, angle_unit)
    else:
      result = self.compute_on_complex(operand, angle_unit)
    if result.is_undefined():
      return Complex.undefined(precision)
    return result

  def serialize(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return serialization.prefix(self, FUNCTION_NAMES[self.TYPE], float_mode, significant_digits)

  def create_layout(self, float_mode=PrintFloatMode.DECIMAL, significant_digits=7):
    return serialization.layout_prefix(self, self.LATEX_NAME, float_mode, significant_digits)
