"""
Expression Solver

Tokenizes, parses, optimizes and evaluates infix math expressions with
implicit multiplication, prefix functions and named variables.
"""

from .errors import (
    ExpressionError, LexError, ParseError, UnrecognizedVariableError, UndefinedVariableError
)
from .config import SolverConfig
from .context import EvaluationContext
from .lexer import ExpressionLexer, Token, TokenType, tokenize
from .parser import ExpressionParser
from .solver import ExpressionSolver
from .expression_tree import (
    Expression, Node, VariableNode, ConstantNode, BinaryOpNode, UnaryOpNode,
    ExpressionOptimizer, ExpressionValidator, SymPySimplifier
)
from .logging_system import LogLevel, configure_logging, get_logger, set_log_level

__version__ = "1.0.0"

__all__ = [
    "ExpressionError", "LexError", "ParseError", "UnrecognizedVariableError", "UndefinedVariableError",
    "SolverConfig", "EvaluationContext",
    "ExpressionLexer", "Token", "TokenType", "tokenize",
    "ExpressionParser", "ExpressionSolver",
    "Expression", "Node", "VariableNode", "ConstantNode", "BinaryOpNode", "UnaryOpNode",
    "ExpressionOptimizer", "ExpressionValidator", "SymPySimplifier",
    "LogLevel", "configure_logging", "get_logger", "set_log_level",
]
