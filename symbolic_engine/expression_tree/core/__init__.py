"""Core expression tree components."""

from .node import (
  Node, BinaryOperator, UnaryFunction,
  Rational, ComplexLiteral, Constant, Symbol, Undefined, Unit, Matrix
)
from .arithmetic import Addition, Subtraction, Multiplication, Division, Power, Opposite, SquareRoot
from .trigonometric import Sine, Cosine, Tangent, ArcSine, ArcCosine, ArcTangent
from .derivative import Derivative
from .operators import NodeType, INFIX_OPERATORS, FUNCTION_NAMES, PRECEDENCE

__all__ = [
  'Node', 'BinaryOperator', 'UnaryFunction',
  'Rational', 'ComplexLiteral', 'Constant', 'Symbol', 'Undefined', 'Unit', 'Matrix',
  'Addition', 'Subtraction', 'Multiplication', 'Division', 'Power', 'Opposite', 'SquareRoot',
  'Sine', 'Cosine', 'Tangent', 'ArcSine', 'ArcCosine', 'ArcTangent',
  'Derivative',
  'NodeType', 'INFIX_OPERATORS', 'FUNCTION_NAMES', 'PRECEDENCE'
]
