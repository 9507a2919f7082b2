"""
Tree Utility Functions

Traversal and analysis helpers for expression trees. Every helper walks the
tree through `Node.children()` so it works for any node type, including
matrices and derivatives.
"""

from collections import deque
from typing import List, Set, Callable, Any, Optional

from ..core.node import Node
from ..core.operators import NodeType

EXACT_NODE_TYPES = frozenset((
    NodeType.RATIONAL, NodeType.CONSTANT,
    NodeType.ADDITION, NodeType.SUBTRACTION, NodeType.MULTIPLICATION,
    NodeType.DIVISION, NodeType.POWER, NodeType.OPPOSITE, NodeType.SQUARE_ROOT,
))


def get_all_nodes(node: Node, traversal_order: str = 'breadth_first') -> List[Node]:
    """
    Get all nodes in the tree using specified traversal order.

    Args:
        node: Root node of the tree
        traversal_order: 'breadth_first' (default) or 'depth_first'

    Returns:
        List of all nodes in the tree
    """
    if traversal_order == 'breadth_first':
        return _breadth_first_traversal(node)
    elif traversal_order == 'depth_first':
        return _depth_first_traversal(node)
    else:
        raise ValueError(f"Invalid traversal_order: {traversal_order}")


def _breadth_first_traversal(node: Node) -> List[Node]:
    nodes_to_visit = deque([node])
    all_nodes = []

    while nodes_to_visit:
        current_node = nodes_to_visit.popleft()
        all_nodes.append(current_node)
        nodes_to_visit.extend(current_node.children())

    return all_nodes


def _depth_first_traversal(node: Node) -> List[Node]:
    nodes = [node]
    for child in node.children():
        nodes.extend(_depth_first_traversal(child))
    return nodes


def calculate_tree_depth(node: Node) -> int:
    """Maximum depth of the tree (leaf nodes have depth 1)"""
    children = node.children()
    if not children:
        return 1
    return 1 + max(calculate_tree_depth(child) for child in children)


def tree_size(node: Node) -> int:
    return len(get_all_nodes(node))


def find_nodes_by_type(node: Node, node_type: NodeType) -> List[Node]:
    """
    Find all nodes carrying a given type tag.

    Args:
        node: Root node of the tree
        node_type: NodeType to search for

    Returns:
        List of matching nodes in breadth-first order
    """
    return [n for n in get_all_nodes(node) if n.TYPE == node_type]


def get_symbols(node: Node) -> Set[str]:
    """Names of all symbols appearing in the tree"""
    return {n.name for n in find_nodes_by_type(node, NodeType.SYMBOL)}


def has_only_exact_numbers(node: Node) -> bool:
    """Whether the tree is built from rationals and constants with exact operators only"""
    return all(n.TYPE in EXACT_NODE_TYPES for n in get_all_nodes(node))


def apply_to_all_nodes(node: Node, func: Callable[[Node], Any],
                       filter_type: Optional[NodeType] = None) -> List[Any]:
    """
    Apply a function to every node of the tree, optionally filtered by type.

    Returns:
        List of results from applying func to each (filtered) node
    """
    results = []
    for n in get_all_nodes(node):
        if filter_type is None or n.TYPE == filter_type:
            results.append(func(n))
    return results


def validate_tree_structure(node: Node) -> bool:
    """
    Validate that a tree is well formed: every node has the number of
    children its type requires and every child points back to its parent.

    Returns:
        True if the tree structure is valid, False otherwise
    """
    seen = set()
    for current in get_all_nodes(node):
        if id(current) in seen:
            return False
        seen.add(id(current))
        count = current.number_of_children()
        if current.TYPE == NodeType.MATRIX:
            if count != current.rows * current.columns:
                return False
        elif current.ARITY is not None and count != current.ARITY:
            return False
        for child in current.children():
            if child.parent is not current:
                return False
    return True
