from enum import IntEnum


class NodeType(IntEnum):
  # Leaves
  RATIONAL = 0
  COMPLEX_LITERAL = 1
  CONSTANT = 2
  SYMBOL = 3
  UNDEFINED = 4
  UNIT = 5
  MATRIX = 6
  # Arithmetic
  ADDITION = 7
  SUBTRACTION = 8
  MULTIPLICATION = 9
  DIVISION = 10
  POWER = 11
  OPPOSITE = 12
  SQUARE_ROOT = 13
  # Trigonometry
  SINE = 14
  COSINE = 15
  TANGENT = 16
  ARC_SINE = 17
  ARC_COSINE = 18
  ARC_TANGENT = 19
  # Calculus
  DERIVATIVE = 20


# Mapping dictionaries
INFIX_OPERATORS = {
  NodeType.ADDITION: '+', NodeType.SUBTRACTION: '-',
  NodeType.MULTIPLICATION: '*', NodeType.DIVISION: '/', NodeType.POWER: '^'
}

FUNCTION_NAMES = {
  NodeType.SQUARE_ROOT: 'sqrt',
  NodeType.SINE: 'sin', NodeType.COSINE: 'cos', NodeType.TANGENT: 'tan',
  NodeType.ARC_SINE: 'asin', NodeType.ARC_COSINE: 'acos', NodeType.ARC_TANGENT: 'atan',
  NodeType.DERIVATIVE: 'diff'
}

DIRECT_TRIGONOMETRIC = (NodeType.SINE, NodeType.COSINE, NodeType.TANGENT)
INVERSE_TRIGONOMETRIC = (NodeType.ARC_SINE, NodeType.ARC_COSINE, NodeType.ARC_TANGENT)

INVERSE_OF = {
  NodeType.SINE: NodeType.ARC_SINE,
  NodeType.COSINE: NodeType.ARC_COSINE,
  NodeType.TANGENT: NodeType.ARC_TANGENT,
  NodeType.ARC_SINE: NodeType.SINE,
  NodeType.ARC_COSINE: NodeType.COSINE,
  NodeType.ARC_TANGENT: NodeType.TANGENT
}

# Binding strength used to parenthesize serialized children
PRECEDENCE = {
  NodeType.ADDITION: 1,
  NodeType.SUBTRACTION: 1,
  NodeType.MULTIPLICATION: 2,
  NodeType.DIVISION: 2,
  NodeType.OPPOSITE: 3,
  NodeType.POWER: 4,
}
ATOM_PRECEDENCE = 10
