import sympy as sp
from typing import Any, Dict
from ..core.node import Node
from .tree_utils import get_variables

class SymPySimplifier:
  """SymPy bridge: conversion, symbolic equivalence and simplified forms"""

  def __init__(self, positive: bool = True):
    # Positive symbols let sympy expand logarithms and combine powers.
    self.positive = positive
    self.simplification_strategies = [
      'simplify',
      'expand',
      'factor',
      'trigsimp',
      'logcombine'
    ]

  def to_sympy(self, node: Node) -> sp.Expr:
    symbols = {name: sp.Symbol(name, positive=self.positive) for name in sorted(get_variables(node))}
    return node.to_sympy(symbols)

  def are_equivalent(self, first: Node, second: Node) -> bool:
    """True if sympy can prove both trees denote the same function"""
    symbols: Dict[str, sp.Symbol] = {
      name: sp.Symbol(name, positive=self.positive)
      for name in sorted(get_variables(first) | get_variables(second))
    }
    difference = first.to_sympy(symbols) - second.to_sympy(symbols)
    if sp.simplify(difference) == 0:
      return True
    return sp.simplify(sp.expand_log(difference, force=True)) == 0

  def simplify_expression(self, node: Node) -> Dict[str, Any]:
    """
    Simplify using multiple SymPy strategies

    Returns:
        Dict with simplified expression and metadata
    """
    sympy_expr = self.to_sympy(node)
    original_complexity = self._calculate_complexity(sympy_expr)

    best_simplified = sympy_expr
    best_complexity = original_complexity
    best_strategy = 'none'

    for strategy in self.simplification_strategies:
      try:
        if strategy == 'simplify':
          simplified = sp.simplify(sympy_expr)
        elif strategy == 'expand':
          simplified = sp.expand(sympy_expr)
        elif strategy == 'factor':
          simplified = sp.factor(sympy_expr)
        elif strategy == 'trigsimp':
          simplified = sp.trigsimp(sympy_expr)
        else:
          simplified = sp.logcombine(sympy_expr, force=True)
      except (TypeError, ValueError, NotImplementedError):
        continue

      complexity = self._calculate_complexity(simplified)
      if complexity < best_complexity:
        best_simplified = simplified
        best_complexity = complexity
        best_strategy = strategy

    return {
      'simplified': best_simplified,
      'strategy_used': best_strategy,
      'complexity_reduction': original_complexity - best_complexity,
      'original_complexity': original_complexity,
      'simplified_complexity': best_complexity
    }

  def _calculate_complexity(self, expr: sp.Expr) -> int:
    """Complexity score for SymPy expressions"""
    return len(expr.free_symbols) + len(expr.atoms(sp.Function)) + sp.count_ops(expr)

  def latex_representation(self, node: Node) -> str:
    return sp.latex(self.to_sympy(node))
