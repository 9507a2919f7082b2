import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.parsing.sympy_parser import parse_expr, standard_transformations, convert_xor

from ..core.node import Node, Rational, ComplexLiteral, Constant, Symbol, Undefined, Unit, Matrix
from ..core.arithmetic import Addition, Subtraction, Multiplication, Division, Power, Opposite, SquareRoot
from ..core.trigonometric import Sine, Cosine, Tangent, ArcSine, ArcCosine, ArcTangent
from ..core.derivative import Derivative, DERIVATIVE_FUNCTION


SYMPY_FUNCTIONS = {
  sp.sin: Sine, sp.cos: Cosine, sp.tan: Tangent,
  sp.asin: ArcSine, sp.acos: ArcCosine, sp.atan: ArcTangent
}

PARSER_NAMESPACE = {
  'pi': sp.pi, 'e': sp.E, 'i': sp.I, 'undef': sp.nan,
  'diff': DERIVATIVE_FUNCTION, 'Matrix': sp.Matrix
}


def parse_to_sympy(text: str) -> sp.Basic:
  """Parse linear text into an unevaluated SymPy expression ('^' is power)"""
  return parse_expr(text, local_dict=dict(PARSER_NAMESPACE), evaluate=False,
                    transformations=standard_transformations + (convert_xor,))


def _chain(nodes, operator) -> Node:
  result = nodes[0]
  for node in nodes[1:]:
    result = operator(result, node)
  return result


def from_sympy(expr) -> Node:
  """Convert a SymPy expression into a new parentless node tree"""
  if isinstance(expr, sp.MatrixBase):
    entries = [from_sympy(entry) for entry in expr]
    return Matrix(expr.rows, expr.cols, entries)

  if expr is sp.nan or expr is sp.zoo or expr in (sp.oo, -sp.oo):
    return Undefined()
  if expr.is_Rational:
    return Rational(int(expr.p), int(expr.q))
  if expr.is_Float:
    return ComplexLiteral(float(expr))
  if expr is sp.pi:
    return Constant('pi')
  if expr is sp.E:
    return Constant('e')
  if expr is sp.I:
    return Constant('i')
  if expr.is_Symbol:
    name = str(expr)
    return Unit(name) if name.startswith('_') else Symbol(name)

  if isinstance(expr, AppliedUndef) and expr.func.__name__ == 'diff':
    if len(expr.args) != 2:
      raise ValueError(f"diff takes a function and a point, got {len(expr.args)} arguments")
    return Derivative(from_sympy(expr.args[0]), from_sympy(expr.args[1]))

  for function, node_class in SYMPY_FUNCTIONS.items():
    if isinstance(expr, function):
      return node_class(from_sympy(expr.args[0]))

  if expr.is_Pow:
    base, exponent = expr.args
    if exponent == sp.Rational(1, 2):
      return SquareRoot(from_sympy(base))
    if exponent == -1:
      return Division(Rational(1), from_sympy(base))
    return Power(from_sympy(base), from_sympy(exponent))

  if expr.is_Add:
    terms = list(expr.args)
    result = from_sympy(terms[0])
    for term in terms[1:]:
      if term.is_Mul and term.args[0] == -1:
        result = Subtraction(result, from_sympy(sp.Mul(*term.args[1:], evaluate=False)))
      elif term.is_Number and term.is_negative:
        result = Subtraction(result, from_sympy(-term))
      else:
        result = Addition(result, from_sympy(term))
    return result

  if expr.is_Mul:
    factors = list(expr.args)
    if factors[0] == -1 and len(factors) > 1:
      return Opposite(from_sympy(sp.Mul(*factors[1:], evaluate=False)))
    numerators = [f for f in factors if not (f.is_Pow and f.args[1] == -1)]
    denominators = [f.args[0] for f in factors if f.is_Pow and f.args[1] == -1]
    numerator = _chain([from_sympy(f) for f in numerators], Multiplication) if numerators else Rational(1)
    if not denominators:
      return numerator
    return Division(numerator, _chain([from_sympy(f) for f in denominators], Multiplication))

  raise ValueError(f"Unsupported expression: {expr!r}")


def are_equivalent(a: Node, b: Node) -> bool:
  """Whether two trees denote the same value symbolically"""
  return sp.simplify(a.to_sympy() - b.to_sympy()) == 0
