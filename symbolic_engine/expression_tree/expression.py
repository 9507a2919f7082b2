import sympy as sp
from tokenize import TokenError
from typing import Optional

from ..context import Context
from ..logging_system import log_debug
from ..numeric import Evaluation
from ..settings import AngleUnit, Precision, Preferences, PrintFloatMode, ReductionContext
from .core.node import Node


class Expression:
  """Owner of an expression tree: reduction, approximation and rendering entry points"""

  __slots__ = ('root', '_string_cache')

  def __init__(self, root: Node):
    if root.parent is not None:
      raise ValueError("an expression root must not have a parent")
    self.root = root
    self._string_cache: Optional[str] = None

  def reduce(self, reduction_context: Optional[ReductionContext] = None) -> 'Expression':
    """Reduced copy of the expression; self is left untouched"""
    if reduction_context is None:
      reduction_context = ReductionContext()
    root = self.root.clone().deep_reduce(reduction_context)
    reduced = Expression(root)
    log_debug(f"reduced {self.to_string()} to {reduced.to_string()}")
    return reduced

  def evaluate(self, context: Optional[Context] = None, angle_unit: AngleUnit = AngleUnit.RADIAN,
               precision: Precision = Precision.DOUBLE) -> Evaluation:
    return self.root.evaluate(context, angle_unit, precision)

  def approximate(self, context: Optional[Context] = None,
                  preferences: Optional[Preferences] = None) -> Evaluation:
    preferences = preferences or Preferences()
    return self.root.evaluate(context, preferences.angle_unit, preferences.precision)

  def approximate_to_string(self, context: Optional[Context] = None,
                            preferences: Optional[Preferences] = None) -> str:
    preferences = preferences or Preferences()
    evaluation = self.approximate(context, preferences)
    return evaluation.to_string(preferences.complex_format, preferences.float_display_mode,
                                preferences.significant_digits)

  def to_string(self) -> str:
    if self._string_cache is None:
      self._string_cache = self.root.serialize()
    return self._string_cache

  def serialize(self, float_mode: PrintFloatMode = PrintFloatMode.DECIMAL, significant_digits: int = 7) -> str:
    return self.root.serialize(float_mode, significant_digits)

  def create_layout(self, float_mode: PrintFloatMode = PrintFloatMode.DECIMAL, significant_digits: int = 7) -> str:
    return self.root.create_layout(float_mode, significant_digits)

  def copy(self) -> 'Expression':
    return Expression(self.root.clone())

  def size(self) -> int:
    """Node count"""
    from .utils.tree_utils import tree_size
    return tree_size(self.root)

  def depth(self) -> int:
    from .utils.tree_utils import calculate_tree_depth
    return calculate_tree_depth(self.root)

  def symbols(self) -> set:
    from .utils.tree_utils import get_symbols
    return get_symbols(self.root)

  def characteristic_x_range(self, context: Optional[Context] = None,
                             angle_unit: AngleUnit = AngleUnit.RADIAN) -> float:
    from .trigonometry import characteristic_x_range
    return characteristic_x_range(self.root, context, angle_unit)

  def to_sympy(self) -> sp.Expr:
    return self.root.to_sympy()

  def is_identical_to(self, other: 'Expression') -> bool:
    return self.root.is_identical_to(other.root)

  def __hash__(self) -> int:
    return hash(self.to_string())

  def __eq__(self, other) -> bool:
    if not isinstance(other, Expression):
      return False
    return self.is_identical_to(other)

  def __repr__(self) -> str:
    return f"Expression({self.to_string()})"

  @classmethod
  def from_sympy(cls, sympy_expr) -> 'Expression':
    from .utils.sympy_utils import from_sympy
    return cls(from_sympy(sympy_expr))

  @classmethod
  def from_string(cls, expr_str: str) -> 'Expression':
    """Build an unreduced expression from linear text such as "sqrt(x)-2^3".

    Raises ValueError when the text cannot be represented by the engine's nodes.
    """
    from .utils.sympy_utils import parse_to_sympy, from_sympy
    try:
      sympy_expr = parse_to_sympy(expr_str)
    except (SyntaxError, TypeError, TokenError, sp.SympifyError) as e:
      raise ValueError(f"Cannot parse {expr_str!r}: {e}") from e
    return cls(from_sympy(sympy_expr))
