"""
Text and layout rendering helpers.

`serialize` produces the linear text form of a node ("sqrt(x)", "a-b").
`create_layout` produces a LaTeX layout description assembled from the
layouts of already-rendered children. Both are parameterized by a float
display mode and a number of significant digits.
"""

from typing import TYPE_CHECKING

from ...settings import PrintFloatMode
from ..core.operators import NodeType

if TYPE_CHECKING:
  from ..core.node import Node

UNDEFINED_TEXT = "undef"


def _needs_parentheses(child: 'Node', parent_precedence: int, strict: bool) -> bool:
  p = child.precedence()
  return p < parent_precedence or (strict and p == parent_precedence)


def serialize_child(child: 'Node', parent_precedence: int, float_mode: PrintFloatMode,
                    significant_digits: int, strict: bool = False) -> str:
  text = child.serialize(float_mode, significant_digits)
  if _needs_parentheses(child, parent_precedence, strict):
    return f"({text})"
  return text


def infix(node: 'Node', symbol: str, float_mode: PrintFloatMode, significant_digits: int) -> str:
  precedence = node.precedence()
  left_child, right_child = node.children()
  left = serialize_child(left_child, precedence, float_mode, significant_digits,
                         strict=node.TYPE == NodeType.POWER)
  right_strict = node.TYPE in (NodeType.SUBTRACTION, NodeType.DIVISION, NodeType.POWER)
  right = serialize_child(right_child, precedence, float_mode, significant_digits, strict=right_strict)
  if node.TYPE == NodeType.SUBTRACTION and right_child.TYPE == NodeType.OPPOSITE and not right.startswith("("):
    right = f"({right})"
  return f"{left}{symbol}{right}"


def prefix(node: 'Node', name: str, float_mode: PrintFloatMode, significant_digits: int) -> str:
  arguments = ",".join(child.serialize(float_mode, significant_digits) for child in node.children())
  return f"{name}({arguments})"


def layout_child(child: 'Node', parent_precedence: int, float_mode: PrintFloatMode,
                 significant_digits: int, strict: bool = False) -> str:
  layout = child.create_layout(float_mode, significant_digits)
  if _needs_parentheses(child, parent_precedence, strict):
    return f"\\left({layout}\\right)"
  return layout


def layout_infix(node: 'Node', symbol: str, float_mode: PrintFloatMode, significant_digits: int) -> str:
  precedence = node.precedence()
  left_child, right_child = node.children()
  left = layout_child(left_child, precedence, float_mode, significant_digits)
  right_strict = node.TYPE == NodeType.SUBTRACTION
  right = layout_child(right_child, precedence, float_mode, significant_digits, strict=right_strict)
  if node.TYPE == NodeType.SUBTRACTION and right_child.TYPE == NodeType.OPPOSITE and not right.startswith("\\left("):
    right = f"\\left({right}\\right)"
  return f"{left}{symbol}{right}"


def layout_prefix(node: 'Node', name: str, float_mode: PrintFloatMode, significant_digits: int) -> str:
  arguments = ",".join(child.create_layout(float_mode, significant_digits) for child in node.children())
  return f"{name}\\left({arguments}\\right)"
