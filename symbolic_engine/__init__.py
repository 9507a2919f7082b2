"""
Symbolic Engine

Expression trees with exact symbolic reduction, complex and matrix numeric
evaluation, and adaptive numeric differentiation.
"""

from .context import Context
from .errors import EngineError, ArityError, ShapeError
from .settings import (
  AngleUnit, ComplexFormat, Precision, PrintFloatMode, Preferences, ReductionContext
)
from .numeric import Evaluation, Complex, MatrixComplex
from .expression_tree import (
  Expression, Node,
  Rational, ComplexLiteral, Constant, Symbol, Undefined, Unit, Matrix,
  Addition, Subtraction, Multiplication, Division, Power, Opposite, SquareRoot,
  Sine, Cosine, Tangent, ArcSine, ArcCosine, ArcTangent,
  Derivative, NodeType
)
from .logging_system import LogLevel, configure_logging, set_log_level, get_logger

__version__ = "0.1.0"

__all__ = [
  "Context",
  "EngineError", "ArityError", "ShapeError",
  "AngleUnit", "ComplexFormat", "Precision", "PrintFloatMode", "Preferences", "ReductionContext",
  "Evaluation", "Complex", "MatrixComplex",
  "Expression", "Node",
  "Rational", "ComplexLiteral", "Constant", "Symbol", "Undefined", "Unit", "Matrix",
  "Addition", "Subtraction", "Multiplication", "Division", "Power", "Opposite", "SquareRoot",
  "Sine", "Cosine", "Tangent", "ArcSine", "ArcCosine", "ArcTangent",
  "Derivative", "NodeType",
  "LogLevel", "configure_logging", "set_log_level", "get_logger"
]
