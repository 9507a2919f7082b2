"""Expression Tree Module

Expression nodes, their reduction rules and their numeric evaluation.
"""

from .expression import Expression
from .core import (
  Node, BinaryOperator, UnaryFunction,
  Rational, ComplexLiteral, Constant, Symbol, Undefined, Unit, Matrix,
  Addition, Subtraction, Multiplication, Division, Power, Opposite, SquareRoot,
  Sine, Cosine, Tangent, ArcSine, ArcCosine, ArcTangent,
  Derivative, NodeType
)
from .trigonometry import expression_is_equivalent_to_tangent, characteristic_x_range
from .utils.sympy_utils import from_sympy, are_equivalent

__all__ = [
  "Expression",
  "Node", "BinaryOperator", "UnaryFunction",
  "Rational", "ComplexLiteral", "Constant", "Symbol", "Undefined", "Unit", "Matrix",
  "Addition", "Subtraction", "Multiplication", "Division", "Power", "Opposite", "SquareRoot",
  "Sine", "Cosine", "Tangent", "ArcSine", "ArcCosine", "ArcTangent",
  "Derivative", "NodeType",
  "expression_is_equivalent_to_tangent", "characteristic_x_range",
  "from_sympy", "are_equivalent"
]
