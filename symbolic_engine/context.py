"""Symbol binding environments shared by reduction and evaluation.

A Context maps symbol names to expression nodes and may chain to a parent
context. The parent link is weak: a child never keeps its parent alive, so
callers must hold on to the outer context for as long as the chain is used.
"""

import weakref
from numbers import Integral, Number
from typing import Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
  from .expression_tree.core.node import Node


class Context:
  """Hierarchical mapping from symbol names to expression nodes"""

  __slots__ = ('_symbols', '_parent', '__weakref__')

  def __init__(self, parent: Optional['Context'] = None):
    self._symbols: Dict[str, 'Node'] = {}
    self._parent = weakref.ref(parent) if parent is not None else None

  @property
  def parent(self) -> Optional['Context']:
    return self._parent() if self._parent is not None else None

  def expression_for_symbol(self, name: str) -> Optional['Node']:
    """Bound expression for `name`, looking through parents; None when unbound"""
    ctx = self
    while ctx is not None:
      if name in ctx._symbols:
        return ctx._symbols[name]
      ctx = ctx.parent
    return None

  def set_expression_for_symbol(self, name: str, expression) -> None:
    """Bind `name` locally. Plain numbers are wrapped into literal nodes.

    Binding None removes the local binding only; a parent binding becomes
    visible again.
    """
    if expression is None:
      self._symbols.pop(name, None)
      return
    node = _as_node(expression)
    if node.parent is not None:
      node = node.clone()
    self._symbols[name] = node

  def is_bound_locally(self, name: str) -> bool:
    return name in self._symbols

  def child(self) -> 'Context':
    return Context(parent=self)

  def __contains__(self, name: str) -> bool:
    return self.expression_for_symbol(name) is not None

  def __repr__(self) -> str:
    return f"Context({sorted(self._symbols)}, parent={'yes' if self.parent is not None else 'no'})"


def _as_node(value) -> 'Node':
  from .expression_tree.core.node import Node, Rational, ComplexLiteral
  if isinstance(value, Node):
    return value
  if isinstance(value, bool):
    raise TypeError("booleans cannot be bound to symbols")
  if isinstance(value, Integral):
    return Rational(int(value))
  if isinstance(value, Number):
    c = complex(value)
    return ComplexLiteral(c.real, c.imag)
  raise TypeError(f"Cannot bind value of type {type(value).__name__}")
