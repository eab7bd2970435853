from expression_solver import ExpressionOptimizer, ExpressionParser, tokenize
from expression_solver.expression_tree.core.node import (
    ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode
)


def C(value):
    return ConstantNode(value)


def V(name):
    return VariableNode(name)


def U(operator, operand):
    return UnaryOpNode(operator, operand)


def B(operator, left, right):
    return BinaryOpNode(operator, left, right)


def parse_tree(text, variables=None):
    """Unoptimized root node of text"""
    return ExpressionParser().parse(tokenize(text), variables).root


def optimize_tree(text, rational=True):
    return ExpressionOptimizer(rational=rational, validate=True).optimize_tree(parse_tree(text))

