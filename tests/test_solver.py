import math

import numpy as np
import pytest

from expression_solver import (
    ExpressionSolver, ParseError, SolverConfig, UndefinedVariableError, UnrecognizedVariableError
)


@pytest.fixture
def solver():
    return ExpressionSolver(['x', 'y'], [2.0, 3.0])


def test_evaluates_with_bound_values(solver):
    assert solver.eval(solver.parse_string("3x + y^2")) == 15.0


def test_root_and_power_values():
    solver = ExpressionSolver()
    assert solver.eval_string("(2 r 2)*8 + 3^2*3") == pytest.approx(38.31370849898476)


def test_implicit_multiplication_evaluates_left_to_right():
    assert ExpressionSolver().eval_string("6 / 2(4 - 1)") == 9.0


def test_implicit_multiplication_with_variable():
    solver = ExpressionSolver(['x'], [-2.0])
    assert solver.eval_string("7x") == -14.0
    assert solver.eval(solver.parse_string("7x")) == -14.0


@pytest.mark.parametrize("optimize", [True, False])
def test_optimized_and_plain_parse_agree(optimize):
    solver = ExpressionSolver(['x', 'y', 'z'], [1.5, -2.0, 0.25])
    text = "(7 + x) - (z + (3 + y)) * cos x + 2 log (2^x) + sin(y)^2"
    expected = 7 + 1.5 - (0.25 + (3 - 2.0)) * math.cos(1.5) + 1.5 + math.sin(-2.0) ** 2
    assert solver.eval(solver.parse_string(text, optimize=optimize)) == pytest.approx(expected)


@pytest.mark.parametrize("text, expected", [
    ("2 + 3 * 4", 14.0),
    ("2 * 3 ^ 2", 18.0),
    ("-2 ^ 2", 4.0),
    ("3 r 8", 2.0),
    ("2 log 8", 3.0),
    ("1 max 2 + 3", 5.0),
    ("4 min 2 * 3", 4.0),
    ("ln 1", 0.0),
    ("cos 0 + sin 0", 1.0),
    ("tan 0", 0.0),
    ("round 2.5", 3.0),
    ("round -2.5", -2.0),
    ("ceil 1.2", 2.0),
    ("floor -1.2", -2.0),
])
def test_operator_values(text, expected):
    assert ExpressionSolver().eval_string(text) == pytest.approx(expected)


def test_ieee_results():
    solver = ExpressionSolver()
    assert solver.eval_string("1 / 0") == math.inf
    assert solver.eval_string("-1 / 0") == -math.inf
    assert math.isnan(solver.eval_string("0 / 0"))
    assert solver.eval_string("ln 0") == -math.inf
    assert math.isnan(solver.eval_string("ln -1"))


def test_optimized_division_by_zero_keeps_ieee_result():
    solver = ExpressionSolver()
    assert math.isnan(solver.eval(solver.parse_string("0 / 0")))
    assert solver.eval(solver.parse_string("1 / 0")) == math.inf


def test_eval_requires_values():
    solver = ExpressionSolver(['x'])
    expression = solver.parse_string("x + 1")
    with pytest.raises(RuntimeError, match="Uninitialized values"):
        solver.eval(expression)
    solver.set_values([4.0])
    assert solver.eval(expression) == 5.0


def test_value_count_must_match(solver):
    with pytest.raises(ValueError):
        solver.set_values([1.0])
    with pytest.raises(ValueError):
        ExpressionSolver(['x'], [1.0, 2.0])


def test_unknown_variable_is_rejected_at_parse(solver):
    with pytest.raises(UnrecognizedVariableError) as info:
        solver.parse_string("x + w")
    assert info.value.identifier == 'w'


def test_unrestricted_parse_fails_on_evaluation():
    solver = ExpressionSolver(['x'], [1.0], SolverConfig(restrict_variables=False))
    expression = solver.parse_string("x + w")
    assert expression.variables() == {'x', 'w'}
    with pytest.raises(UndefinedVariableError):
        solver.eval(expression)


def test_set_variables_keeps_values_when_count_matches(solver):
    solver.set_variables(['a', 'b'])
    assert solver.variables == ('a', 'b')
    assert solver.values == (2.0, 3.0)
    solver.set_variables(['a'])
    assert solver.values is None


@pytest.mark.parametrize("names", [['1x'], ['x', 'x'], ['']])
def test_invalid_variable_names(names):
    with pytest.raises(ValueError):
        ExpressionSolver(names)


def test_eval_batch(solver):
    result = solver.eval_batch("x*y + 1", np.array([[1.0, 2.0], [3.0, 4.0]]))
    np.testing.assert_allclose(result, [3.0, 13.0])


def test_eval_batch_matches_eval(solver):
    expression = solver.parse_string("sin(x) * y log (x + 4) - round(y / x)")
    rows = np.array([[0.5, 2.0], [2.0, 3.0], [7.25, 1.5]])
    expected = []
    for row in rows:
        solver.set_values(row)
        expected.append(solver.eval(expression))
    np.testing.assert_allclose(solver.eval_batch(expression, rows), expected)


def test_eval_batch_shape_is_checked(solver):
    with pytest.raises(ValueError):
        solver.eval_batch("x + y", np.ones((3, 3)))


def test_rational_flag_reaches_optimizer(solver):
    assert solver.rational
    assert solver.parse_string("x * 0").to_string() == "0"
    solver.rational = False
    assert not solver.optimizer.rational
    assert solver.parse_string("x * 0").to_string() == "(x * 0)"


def test_parse_without_optimization_keeps_shape(solver):
    expression = solver.parse_string("x + 0", optimize=False)
    assert expression.to_string() == "(x + 0)"
    assert solver.parse_string("x + 0").to_string() == "x"


def test_parse_errors_surface(solver):
    with pytest.raises(ParseError):
        solver.parse_string("x +")


def test_equals_uses_epsilon():
    solver = ExpressionSolver(config=SolverConfig(epsilon=1e-3))
    assert solver.equals(1.0, 1.0005)
    assert not solver.equals(1.0, 1.01)
    assert solver.equals(math.inf, math.inf)


@pytest.mark.parametrize("kwargs", [{'epsilon': 0.0}, {'epsilon': -1.0}, {'rational': 'yes'}])
def test_config_rejects_bad_values(kwargs):
    with pytest.raises((TypeError, ValueError)):
        SolverConfig(**kwargs)


def test_bind_rebinds_existing_name_only(solver):
    expression = solver.parse_string("x * y")
    solver.context.bind('y', 5.0)
    assert solver.values == (2.0, 5.0)
    assert solver.eval(expression) == 10.0
    with pytest.raises(UndefinedVariableError):
        solver.context.bind('w', 1.0)
    assert solver.variables == ('x', 'y')
