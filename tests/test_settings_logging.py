import logging
import numpy as np
import pytest

from symbolic_engine.context import Context
from symbolic_engine.errors import EngineError, ArityError, ShapeError
from symbolic_engine.expression_tree import Expression, Rational, Division, Symbol
from symbolic_engine.logging_system import (
    LogLevel, configure_logging, get_logger, set_log_level, log_debug, log_warning
)
from symbolic_engine.settings import (
    AngleUnit, ComplexFormat, Precision, Preferences, PrintFloatMode, ReductionContext
)


# -----------------------------
# Settings
# -----------------------------

def test_precision_properties():
    assert Precision.DOUBLE.real_dtype is np.float64
    assert Precision.FLOAT.complex_dtype is np.complex64
    assert Precision.FLOAT.epsilon == pytest.approx(1.1920929e-07)
    assert Precision.DOUBLE.epsilon == pytest.approx(2.220446049250313e-16)
    assert Precision.FLOAT.tiny > 0.0


def test_default_preferences():
    preferences = Preferences()
    assert preferences.angle_unit is AngleUnit.RADIAN
    assert preferences.complex_format is ComplexFormat.CARTESIAN
    assert preferences.precision is Precision.DOUBLE
    assert preferences.significant_digits == 7


@pytest.mark.parametrize("kwargs, error", [
    ({"significant_digits": 0}, ValueError),
    ({"significant_digits": 15}, ValueError),
    ({"significant_digits": 2.5}, ValueError),
    ({"angle_unit": "degree"}, TypeError),
    ({"precision": 64}, TypeError),
    ({"float_display_mode": None}, TypeError),
])
def test_invalid_preferences(kwargs, error):
    with pytest.raises(error):
        Preferences(**kwargs)


def test_reduction_context_is_immutable():
    reduction_context = ReductionContext()
    with pytest.raises(Exception):
        reduction_context.angle_unit = AngleUnit.DEGREE


def test_reduction_context_with_context():
    context = Context()
    base = ReductionContext(angle_unit=AngleUnit.DEGREE)
    derived = base.with_context(context)
    assert derived.context is context
    assert derived.angle_unit is AngleUnit.DEGREE
    assert base.context is None


def test_reduction_context_from_preferences():
    preferences = Preferences(angle_unit=AngleUnit.DEGREE, complex_format=ComplexFormat.POLAR,
                              precision=Precision.FLOAT)
    reduction_context = ReductionContext.from_preferences(None, preferences)
    assert reduction_context.angle_unit is AngleUnit.DEGREE
    assert reduction_context.complex_format is ComplexFormat.POLAR
    assert reduction_context.precision is Precision.FLOAT
    assert ReductionContext().precision is Precision.DOUBLE


def test_approximate_uses_preferences():
    expression = Expression(Division(Rational(1), Rational(3)))
    preferences = Preferences(precision=Precision.FLOAT, float_display_mode=PrintFloatMode.SCIENTIFIC,
                              significant_digits=3)
    assert expression.approximate(preferences=preferences).value.dtype == np.complex64
    assert expression.approximate_to_string(preferences=preferences) == "3.33e-01"


# -----------------------------
# Errors
# -----------------------------

def test_error_hierarchy():
    assert issubclass(ShapeError, ArityError)
    assert issubclass(ArityError, EngineError)
    assert issubclass(EngineError, Exception)


# -----------------------------
# Logging
# -----------------------------

def engine_messages(caplog):
    return [record.getMessage() for record in caplog.records if record.name == "symbolic_engine"]


def test_debug_is_emitted_only_in_verbose_mode(caplog):
    configure_logging(LogLevel.VERBOSE)
    caplog.set_level(logging.DEBUG, logger='symbolic_engine')
    Expression(Division(Symbol('x'), Rational(0))).reduce()
    messages = engine_messages(caplog)
    assert any("reduced to undefined" in m for m in messages)
    assert all(m.startswith("DEBUG: ") for m in messages)


def test_debug_is_silent_by_default(caplog):
    configure_logging(LogLevel.MINIMAL)
    caplog.set_level(logging.DEBUG, logger='symbolic_engine')
    Expression(Division(Symbol('x'), Rational(0))).reduce()
    log_debug("not shown")
    assert engine_messages(caplog) == []


def test_warning_levels(caplog):
    configure_logging(LogLevel.SILENT)
    caplog.set_level(logging.DEBUG, logger='symbolic_engine')
    log_warning("hidden")
    set_log_level(LogLevel.MINIMAL)
    log_warning("shown")
    assert engine_messages(caplog) == ["shown"]


def test_configure_logging_replaces_global_logger():
    first = configure_logging(LogLevel.VERBOSE)
    assert get_logger() is first
    second = configure_logging(LogLevel.SILENT)
    assert get_logger() is second
    assert second.logger.handlers == []
