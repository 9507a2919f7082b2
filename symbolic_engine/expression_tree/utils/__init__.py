"""Utilities for expression trees.

`tree_utils` and `sympy_utils` depend on the node classes and are imported
from their modules directly to keep the import graph acyclic.
"""

from . import serialization

__all__ = ['serialization']
