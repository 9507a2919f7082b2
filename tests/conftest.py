import pytest

from symbolic_engine.context import Context
from symbolic_engine.expression_tree import Expression
from symbolic_engine.logging_system import configure_logging, LogLevel
from symbolic_engine.settings import AngleUnit, ReductionContext


@pytest.fixture
def context():
    return Context()


@pytest.fixture
def radians(context):
    return ReductionContext(context=context, angle_unit=AngleUnit.RADIAN)


@pytest.fixture
def degrees(context):
    return ReductionContext(context=context, angle_unit=AngleUnit.DEGREE)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    configure_logging(LogLevel.MINIMAL)


def reduce_node(node, reduction_context=None):
    """Reduce a parentless node through an Expression and return the new root"""
    return Expression(node).reduce(reduction_context).root


def approximate(node, context=None, angle_unit=AngleUnit.RADIAN):
    return node.evaluate(context, angle_unit)
