"""Expression Tree Module

Node model, expression wrapper, optimizer and tree utilities.
"""

from .expression import Expression
from .core.node import (
    Node,
    VariableNode,
    ConstantNode,
    BinaryOpNode,
    UnaryOpNode,
    DEFAULT_EPSILON
)
from .core.operators import (
    NodeType,
    PRECEDENCE,
    OPERATOR_NAMES,
    evaluate_variable,
    evaluate_constant,
    evaluate_binary_op,
    evaluate_unary_op
)
from .optimization import ExpressionOptimizer
from .utils import SymPySimplifier, ExpressionValidator

__all__ = [
    "Expression",
    "Node", "VariableNode", "ConstantNode", "BinaryOpNode", "UnaryOpNode", "DEFAULT_EPSILON",
    "NodeType", "PRECEDENCE", "OPERATOR_NAMES",
    "evaluate_variable", "evaluate_constant", "evaluate_binary_op", "evaluate_unary_op",
    "ExpressionOptimizer",
    "SymPySimplifier", "ExpressionValidator"
]
