import pytest

from expression_solver import ParseError, UnrecognizedVariableError, EvaluationContext
from expression_solver.expression_tree.utils import validate_tree_structure, get_all_nodes
from conftest import B, C, U, V, parse_tree


def test_precedence_and_grouping():
    expected = B('/', B('*', C(3), B('+', C(4.81), V('x'))), U('cos', V('rads')))
    assert parse_tree("3 * (4.81 + x) / cos rads") == expected


def test_implicit_multiplication():
    expected = B('max',
                 B('*', U('neg', C(3)), V('x')),
                 B('*', C(5), B('*', V('foo'), C(45))))
    assert parse_tree("-3x max 5(foo 45)") == expected


def test_chained_prefix_operators():
    expected = B('r',
                 U('sin', U('neg', C(10))),
                 B('+', B('+', C(2), B('*', C(4), C(3))), C(1)))
    assert parse_tree("sin -10 r (2 + 4 * 3 + 1)") == expected


def test_double_negation_parses():
    assert parse_tree("--x") == U('neg', U('neg', V('x')))


def test_binary_operators_associate_left():
    assert parse_tree("a - b + c - d") == B('-', B('+', B('-', V('a'), V('b')), V('c')), V('d'))
    assert parse_tree("2 ^ 3 ^ 2") == B('^', B('^', C(2), C(3)), C(2))
    assert parse_tree("8 / 4 / 2") == B('/', B('/', C(8), C(4)), C(2))


def test_minus_after_closed_group_is_subtraction():
    assert parse_tree("(3)-2") == B('-', C(3), C(2))
    assert parse_tree("(3)4") == B('*', C(3), C(4))


def test_minus_after_operator_is_negation():
    assert parse_tree("x * -y") == B('*', V('x'), U('neg', V('y')))
    assert parse_tree("2 ^ -x") == B('^', C(2), U('neg', V('x')))


def test_implicit_multiplication_binds_like_explicit():
    assert parse_tree("6 / 2(4 - 1)") == B('*', B('/', C(6), C(2)), B('-', C(4), C(1)))


def test_identifier_with_trailing_digits():
    assert parse_tree("x2 + 2x") == B('+', V('x2'), B('*', C(2), V('x')))


def test_extremum_has_lowest_precedence():
    assert parse_tree("2 max 1 + 4") == B('max', C(2), B('+', C(1), C(4)))


@pytest.mark.parametrize("text", [
    "3 4",
    "baz + / T",
    "(x",
    "x)",
    "()",
    "",
    "cos",
    "x +",
    "x cos y",
    "* 2",
])
def test_malformed_input(text):
    with pytest.raises(ParseError):
        parse_tree(text)


def test_unknown_variable_rejected_when_names_are_known():
    with pytest.raises(UnrecognizedVariableError) as excinfo:
        parse_tree("x + y", variables={'x'})
    assert excinfo.value.identifier == 'y'


def test_any_identifier_accepted_without_known_names():
    root = parse_tree("alpha + beta")
    assert root == B('+', V('alpha'), V('beta'))


def test_parent_links_agree_with_slots():
    root = parse_tree("3 * (4.81 + x) / cos rads - -y max 2")
    assert root.parent is None
    assert validate_tree_structure(root)
    for node in get_all_nodes(root):
        for child in node.children():
            assert child.parent is node


def test_unoptimized_parse_keeps_constant_subtrees():
    root = parse_tree("8 + 9")
    assert root == B('+', C(8), C(9))
    assert EvaluationContext().evaluate(root) == 17.0


def test_to_string_round_trips():
    for text in ["3 * (4.81 + x) / cos rads", "-3x max 5(foo 45)", "2 log (x + 1) r y"]:
        root = parse_tree(text)
        assert parse_tree(root.to_string()) == root
