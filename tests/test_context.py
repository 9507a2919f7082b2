import gc
import pytest

from symbolic_engine.context import Context
from symbolic_engine.expression_tree import Rational, ComplexLiteral, Symbol, Addition, NodeType


def test_unbound_symbol_is_none(context):
    assert context.expression_for_symbol('x') is None
    assert 'x' not in context


def test_lookup_falls_back_to_parent(context):
    context.set_expression_for_symbol('a', Rational(1))
    child = context.child()
    assert child.expression_for_symbol('a').value == 1
    assert not child.is_bound_locally('a')
    assert 'a' in child


def test_child_binding_shadows_parent(context):
    context.set_expression_for_symbol('a', Rational(1))
    child = context.child()
    child.set_expression_for_symbol('a', Rational(2))
    assert child.expression_for_symbol('a').value == 2
    assert context.expression_for_symbol('a').value == 1


def test_binding_none_unbinds_locally_only(context):
    context.set_expression_for_symbol('a', Rational(1))
    child = context.child()
    child.set_expression_for_symbol('a', Rational(2))
    child.set_expression_for_symbol('a', None)
    assert child.expression_for_symbol('a').value == 1
    child.set_expression_for_symbol('missing', None)


def test_parent_link_is_weak():
    parent = Context()
    child = parent.child()
    assert child.parent is parent
    del parent
    gc.collect()
    assert child.parent is None


@pytest.mark.parametrize("value, node_type", [
    (3, NodeType.RATIONAL),
    (2.5, NodeType.COMPLEX_LITERAL),
    (1 + 2j, NodeType.COMPLEX_LITERAL),
])
def test_plain_numbers_are_wrapped(context, value, node_type):
    context.set_expression_for_symbol('a', value)
    assert context.expression_for_symbol('a').TYPE == node_type


def test_complex_number_parts(context):
    context.set_expression_for_symbol('z', 1 + 2j)
    bound = context.expression_for_symbol('z')
    assert (bound.real, bound.imag) == (1.0, 2.0)


@pytest.mark.parametrize("value", [True, "3", [1, 2]])
def test_unsupported_values_are_rejected(context, value):
    with pytest.raises(TypeError):
        context.set_expression_for_symbol('a', value)


def test_node_owned_by_a_tree_is_cloned(context):
    tree = Addition(Symbol('x'), Rational(4))
    context.set_expression_for_symbol('a', tree.child_at(1))
    bound = context.expression_for_symbol('a')
    assert bound is not tree.child_at(1)
    assert bound.parent is None
    assert tree.child_at(1).parent is tree


def test_parentless_node_is_stored_as_is(context):
    node = ComplexLiteral(1.0)
    context.set_expression_for_symbol('a', node)
    assert context.expression_for_symbol('a') is node


def test_repr_lists_local_names(context):
    context.set_expression_for_symbol('b', 1)
    context.set_expression_for_symbol('a', 2)
    assert repr(context) == "Context(['a', 'b'], parent=no)"
