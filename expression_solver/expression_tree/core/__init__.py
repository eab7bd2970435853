"""Core node model and operator tables."""

from .node import (
    Node, VariableNode, ConstantNode, UnaryOpNode, BinaryOpNode,
    DEFAULT_EPSILON, format_constant, is_unary, is_binary, is_constant
)
from .operators import (
    NodeType, PRECEDENCE, OPERATOR_NAMES, BINARY_OPERATORS, UNARY_OPERATORS,
    BINARY_FUNCTIONS, UNARY_FUNCTIONS,
    evaluate_variable, evaluate_constant, evaluate_binary_op, evaluate_unary_op
)

__all__ = [
    "Node", "VariableNode", "ConstantNode", "UnaryOpNode", "BinaryOpNode",
    "DEFAULT_EPSILON", "format_constant", "is_unary", "is_binary", "is_constant",
    "NodeType", "PRECEDENCE", "OPERATOR_NAMES", "BINARY_OPERATORS", "UNARY_OPERATORS",
    "BINARY_FUNCTIONS", "UNARY_FUNCTIONS",
    "evaluate_variable", "evaluate_constant", "evaluate_binary_op", "evaluate_unary_op",
]
