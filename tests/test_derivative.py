import math
import numpy as np
import pytest

from symbolic_engine.context import Context
from symbolic_engine.expression_tree import (
    Expression, Rational, Constant, Symbol, Undefined, Matrix,
    Addition, Division, Power, Sine, Derivative, NodeType
)
from symbolic_engine.expression_tree.core import derivative as derivative_module
from symbolic_engine.settings import AngleUnit, Precision, ReductionContext

RAD = AngleUnit.RADIAN


def x():
    return Symbol('x')


def diff(function, point):
    return Derivative(function, point)


# -----------------------------
# End to end
# -----------------------------

def test_derivative_of_square():
    result = diff(Power(x(), Rational(2)), Rational(3)).evaluate(None, RAD)
    assert result.real == pytest.approx(6.0)
    assert result.imag == 0.0


def test_derivative_of_sine_at_zero():
    result = diff(Sine(x()), Rational(0)).evaluate(None, RAD)
    assert result.real == pytest.approx(1.0, abs=1e-6)


def test_derivative_of_sine_in_degrees():
    result = diff(Sine(x()), Rational(0)).evaluate(None, AngleUnit.DEGREE)
    assert result.real == pytest.approx(math.pi / 180, rel=1e-4)


def test_derivative_of_constant_is_zero():
    result = diff(Rational(5), Rational(2)).evaluate(None, RAD)
    assert result.real == 0.0


def test_derivative_in_single_precision():
    result = diff(Power(x(), Rational(2)), Rational(3)).evaluate(None, RAD, Precision.FLOAT)
    assert result.precision is Precision.FLOAT
    assert result.real == pytest.approx(6.0, rel=1e-3)


def test_derivative_uses_caller_context_for_other_symbols():
    context = Context()
    context.set_expression_for_symbol('a', Rational(4))
    function = Power(x(), Symbol('a'))
    result = diff(function, Rational(1)).evaluate(context, RAD)
    assert result.real == pytest.approx(4.0)


def test_derivative_does_not_leak_x_binding():
    context = Context()
    diff(Power(x(), Rational(2)), Rational(3)).evaluate(context, RAD)
    assert context.expression_for_symbol('x') is None


def test_derivative_point_can_use_outer_x():
    context = Context()
    context.set_expression_for_symbol('x', Rational(2))
    result = diff(Power(x(), Rational(3)), x()).evaluate(context, RAD)
    assert result.real == pytest.approx(12.0)


# -----------------------------
# Early rejection
# -----------------------------

def test_undefined_function_value_rejects_before_sampling(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("the extrapolation table must not be built")

    monkeypatch.setattr(Derivative, "_ridders", fail)
    result = diff(Division(Rational(1), x()), Rational(0)).evaluate(None, RAD)
    assert result.is_undefined()


def test_undefined_point_is_nan(monkeypatch):
    monkeypatch.setattr(Derivative, "_ridders", lambda *args: pytest.fail("sampled"))
    assert diff(x(), Undefined()).evaluate(None, RAD).is_undefined()


def test_nonreal_point_is_nan():
    assert diff(x(), Constant('i')).evaluate(None, RAD).is_undefined()


def test_noisy_function_is_rejected(monkeypatch):
    rng = np.random.default_rng(1234)

    def noisy(self, abscissa, context, angle_unit, precision):
        return precision.real_dtype(float(abscissa) + rng.normal(scale=1.0))

    monkeypatch.setattr(Derivative, "_evaluate_at", noisy)
    result = diff(x(), Rational(1)).evaluate(None, RAD)
    assert result.is_undefined()


def test_each_sample_gets_a_fresh_context(monkeypatch):
    seen = []
    original_evaluate = Power.evaluate

    def recording(self, context, angle_unit, precision=Precision.DOUBLE):
        seen.append(context)
        return original_evaluate(self, context, angle_unit, precision)

    monkeypatch.setattr(Power, "evaluate", recording)
    caller = Context()
    diff(Power(x(), Rational(2)), Rational(3)).evaluate(caller, RAD)
    assert len(seen) >= 8
    assert len({id(c) for c in seen}) == len(seen)
    assert all(c.parent is caller for c in seen)


def test_ridders_constants():
    assert derivative_module.RATE_STEP_SIZE == 2.0
    assert derivative_module.MIN_INITIAL_RATE == 0.01
    assert derivative_module.MAX_ERROR_RATE_ON_APPROXIMATION == 0.001
    assert derivative_module.TABLE_SIZE == 10


# -----------------------------
# Reduction
# -----------------------------

def test_only_the_point_is_reduced():
    node = diff(Addition(x(), Rational(0)), Addition(Rational(1), Rational(2)))
    result = Expression(node).reduce().root
    assert result.TYPE == NodeType.DERIVATIVE
    assert result.point().TYPE == NodeType.RATIONAL
    assert result.point().value == 3
    assert result.function().TYPE == NodeType.ADDITION


def test_matrix_function_reduces_to_undefined():
    node = diff(Matrix(1, 1, [x()]), Rational(1))
    assert Expression(node).reduce().root.TYPE == NodeType.UNDEFINED


def test_matrix_point_reduces_to_undefined():
    node = diff(x(), Matrix(1, 1, [Rational(1)]))
    assert Expression(node).reduce().root.TYPE == NodeType.UNDEFINED


def test_function_bound_to_matrix_symbol_reduces_to_undefined():
    context = Context()
    context.set_expression_for_symbol('m', Matrix(1, 1, [Rational(1)]))
    node = diff(Symbol('m'), Rational(1))
    result = Expression(node).reduce(ReductionContext(context=context)).root
    assert result.TYPE == NodeType.UNDEFINED


def test_reduced_derivative_still_evaluates():
    node = diff(Power(x(), Rational(2)), Addition(Rational(1), Rational(2)))
    reduced = Expression(node).reduce()
    assert reduced.evaluate().real == pytest.approx(6.0)
