import numpy as np
import pytest
import sympy as sp

from expression_solver import Expression, ExpressionValidator, SymPySimplifier
from expression_solver.expression_tree.utils import (
    calculate_tree_depth, find_nodes_by_operator, find_root, get_all_nodes, get_constants,
    get_node_path, get_variables, replace_node_in_tree, validate_tree_structure
)
from conftest import B, C, U, V, parse_tree


@pytest.fixture
def tree():
    a, b, c = V('a'), V('b'), V('c')
    root = B('*', B('+', a, b), c)
    return root, a, b, c


def test_traversal_orders(tree):
    root, a, b, c = tree
    bfs = get_all_nodes(root)
    dfs = get_all_nodes(root, 'depth_first')
    assert [n.to_string() for n in bfs] == ["((a + b) * c)", "(a + b)", "c", "a", "b"]
    assert [n.to_string() for n in dfs] == ["((a + b) * c)", "(a + b)", "a", "b", "c"]
    with pytest.raises(ValueError):
        get_all_nodes(root, 'sideways')


def test_depth_and_size(tree):
    root, a, _, _ = tree
    assert calculate_tree_depth(root) == 3
    assert calculate_tree_depth(a) == 1
    assert root.size() == 5


def test_lookups():
    root = parse_tree("-x - y * 2 + 3")
    assert len(find_nodes_by_operator(root, '-')) == 1
    assert len(find_nodes_by_operator(root, 'neg')) == 1
    assert get_constants(root) == [2.0, 3.0]
    assert get_variables(root) == {'x', 'y'}


def test_paths_and_root(tree):
    root, a, b, c = tree
    assert find_root(b) is root
    assert get_node_path(root, b) == ['left', 'right']
    assert get_node_path(root, c) == ['right']
    assert get_node_path(root, root) == []
    assert get_node_path(root, V('a')) is None


def test_replace_node_updates_links_and_size(tree):
    root, a, b, _ = tree
    assert root.size() == 5
    replacement = B('^', C(5), V('d'))
    assert replace_node_in_tree(root, b, replacement) is root
    assert root.to_string() == "((a + (5 ^ d)) * c)"
    assert replacement.parent is a.parent
    assert b.parent is None
    assert root.size() == 7
    assert validate_tree_structure(root)


def test_replacing_root_returns_replacement(tree):
    root, _, _, _ = tree
    replacement = C(1)
    assert replace_node_in_tree(root, root, replacement) is replacement


def test_validate_tree_structure():
    assert validate_tree_structure(parse_tree("sin(x) + 2 log y"))
    assert not validate_tree_structure(B('+', V('x'), None))
    assert not validate_tree_structure(U('cos', None))
    shared = V('x')
    assert not validate_tree_structure(B('+', shared, shared))


def test_numeric_equivalence_check():
    variables = ['x', 'y']
    assert ExpressionValidator.check_equivalent(parse_tree("x*x*y"), parse_tree("x^2 y"), variables)
    assert ExpressionValidator.check_equivalent(parse_tree("ln(x*y)"), parse_tree("ln x + ln y"), variables)
    assert not ExpressionValidator.check_equivalent(parse_tree("x + 1"), parse_tree("x"), variables)
    assert ExpressionValidator.check_equivalent(parse_tree("0/0"), parse_tree("0/0"), [])


def test_sympy_conversion():
    x = sp.Symbol('x', positive=True)
    simplifier = SymPySimplifier()
    assert simplifier.to_sympy(parse_tree("x ^ 2 + 1")) == x ** 2 + 1
    assert C(2.5).to_sympy({}) == sp.Float(2.5)
    assert C(3).to_sympy({}) == sp.Integer(3)
    assert simplifier.latex_representation(parse_tree("x ^ 2")) == "x^{2}"


def test_sympy_equivalence():
    simplifier = SymPySimplifier()
    assert simplifier.are_equivalent(parse_tree("2 log (2^x)"), V('x'))
    assert simplifier.are_equivalent(parse_tree("ln(x*y)"), parse_tree("ln x + ln y"))
    assert not simplifier.are_equivalent(parse_tree("x + 1"), V('x'))


def test_simplify_expression_reports_best_form():
    result = SymPySimplifier().simplify_expression(parse_tree("sin(x)^2 + cos(x)^2"))
    assert result['simplified'] == 1
    assert result['complexity_reduction'] > 0
    assert result['strategy_used'] != 'none'


def test_expression_wrapper():
    expression = Expression(parse_tree("(x + 1) * y"))
    clone = expression.copy()
    assert clone == expression
    assert clone.root is not expression.root
    assert hash(clone) == hash(expression)
    assert expression.depth() == 3
    assert expression.size() == 5
    assert expression.variables() == {'x', 'y'}
    assert str(expression) == "((x + 1) * y)"

    clone.root.right = V('z')
    clone.clear_cache()
    assert clone != expression
    assert str(clone) == "((x + 1) * z)"


def test_expression_batch_single_column():
    expression = Expression(parse_tree("2x + 1"))
    np.testing.assert_allclose(expression.evaluate_batch(np.array([0.0, 1.0, 2.5]), ['x']), [1.0, 3.0, 6.0])


def test_unknown_operators_are_rejected():
    with pytest.raises(ValueError):
        B('%', V('x'), C(2))
    with pytest.raises(ValueError):
        U('sqrt', V('x'))
