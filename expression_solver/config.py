"""
Solver configuration.
"""

from dataclasses import dataclass

from .expression_tree.core.node import DEFAULT_EPSILON


@dataclass
class SolverConfig:
    """Options shared by the parser, optimizer and evaluator"""
    rational: bool = True
    epsilon: float = DEFAULT_EPSILON
    restrict_variables: bool = True
    optimize: bool = True
    validate_optimizations: bool = False

    def __post_init__(self):
        """Validate fields after initialization"""
        for name in ('rational', 'restrict_variables', 'optimize', 'validate_optimizations'):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a boolean")
        if not isinstance(self.epsilon, (int, float)) or isinstance(self.epsilon, bool):
            raise TypeError("epsilon must be numeric")
        if not self.epsilon > 0:
            raise ValueError("epsilon must be positive")
