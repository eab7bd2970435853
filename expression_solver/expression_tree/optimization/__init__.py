"""Tree optimization: rewrite rules, chain combination and the driver."""

from .optimizer import ExpressionOptimizer
from .rules import AlgebraicRules
from .combination import ChainCombiner, ChainTerm

__all__ = ['ExpressionOptimizer', 'AlgebraicRules', 'ChainCombiner', 'ChainTerm']
