"""
Expression solver facade.

Holds an ordered variable list with its current values and ties the lexer,
parser, optimizer and evaluator together.
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .config import SolverConfig
from .context import EvaluationContext
from .expression_tree.expression import Expression
from .expression_tree.optimization import ExpressionOptimizer
from .lexer import ExpressionLexer
from .logging_system import LogLevel, log_info
from .parser import ExpressionParser


def _validate_names(names: Sequence[str]):
    for name in names:
        if not isinstance(name, str) or not name[:1].isalpha():
            raise ValueError(f"Variable names must start with a letter: {name!r}")
    if len(set(names)) != len(names):
        raise ValueError(f"Variable names must be unique: {list(names)}")


class ExpressionSolver:
    """
    Parses and evaluates infix expressions over a fixed set of variables.

    Example:
        solver = ExpressionSolver(['x', 'y'], [2.0, 3.0])
        expression = solver.parse_string('3x + y^2')
        solver.eval(expression)  # 15.0
    """

    def __init__(self, variables: Sequence[str] = (), values: Optional[Sequence[float]] = None,
                 config: Optional[SolverConfig] = None):
        self.config = config if config is not None else SolverConfig()
        self.lexer = ExpressionLexer()
        self.parser = ExpressionParser()
        self.optimizer = ExpressionOptimizer(
            rational=self.config.rational,
            epsilon=self.config.epsilon,
            validate=self.config.validate_optimizations
        )
        names = list(variables)
        _validate_names(names)
        self.context = EvaluationContext(names, values)

    @property
    def variables(self) -> Tuple[str, ...]:
        return self.context.names

    @property
    def values(self) -> Optional[Tuple[float, ...]]:
        return self.context.values

    @property
    def rational(self) -> bool:
        return self.config.rational

    @rational.setter
    def rational(self, value: bool):
        self.config.rational = bool(value)
        self.optimizer.rational = bool(value)

    def set_variables(self, names: Sequence[str]):
        """Replace the variable list; values survive only if the count still matches"""
        names = list(names)
        _validate_names(names)
        old_values = self.context.values
        keep = old_values if old_values is not None and len(old_values) == len(names) else None
        self.context = EvaluationContext(names, keep)
        log_info(f"Variables set to {names}", LogLevel.DETAILED)

    def set_values(self, values: Sequence[float]):
        self.context.set_values(values)
        log_info(f"Values set to {list(values)}", LogLevel.DETAILED)

    def parse_string(self, text: str, optimize: Optional[bool] = None) -> Expression:
        """Tokenize and parse text, optimizing unless told otherwise"""
        if optimize is None:
            optimize = self.config.optimize
        tokens = self.lexer.tokenize(text)
        known = set(self.context.names) if self.config.restrict_variables else None
        return self.parser.parse(tokens, known, optimize=optimize, optimizer=self.optimizer)

    def eval(self, expression: Expression) -> float:
        if not self.context.has_values:
            raise RuntimeError("Uninitialized values! Call set_values first")
        return expression.evaluate(self.context)

    def eval_string(self, text: str) -> float:
        """Parse without optimizing and evaluate once"""
        return self.eval(self.parse_string(text, optimize=False))

    def eval_batch(self, expression: Union[Expression, str], values: np.ndarray) -> np.ndarray:
        """Evaluate against one binding row per sample, columns in variable order"""
        if isinstance(expression, str):
            expression = self.parse_string(expression)
        return expression.evaluate_batch(values, self.context.names)

    def equals(self, first: float, second: float) -> bool:
        return first == second or abs(first - second) < self.config.epsilon
