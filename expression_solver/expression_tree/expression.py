import numpy as np
import sympy as sp
from typing import Optional, Sequence, Set, Dict
from .core.node import Node, DEFAULT_EPSILON
from .utils.tree_utils import calculate_tree_depth, get_variables


class Expression:
  """Expression wrapper owning the root of a parsed tree"""

  __slots__ = ('root', '_string_cache')

  def __init__(self, root: Node):
    self.root = root.detach()
    self._string_cache: Optional[str] = None

  def evaluate(self, context) -> float:
    return context.evaluate(self.root)

  def evaluate_batch(self, X: np.ndarray, variables: Sequence[str]) -> np.ndarray:
    """Evaluate against many binding rows at once.

    X has one row per binding set and one column per name in ``variables``.
    """
    X = np.ascontiguousarray(X, dtype=np.float64)
    if X.ndim == 1:
      X = X.reshape(-1, 1) if len(variables) == 1 else X.reshape(1, -1)
    if X.ndim != 2 or X.shape[1] != len(variables):
      raise ValueError(f"Expected a (n_samples, {len(variables)}) array, got shape {X.shape}")
    index_of: Dict[str, int] = {name: i for i, name in enumerate(variables)}
    with np.errstate(all='ignore'):
      return self.root.evaluate_batch(X, index_of)

  def optimize(self, optimizer, context=None) -> bool:
    """Optimize in place. Returns True if the tree changed."""
    before = self.root.copy()
    self.root = optimizer.optimize_tree(self.root, context)
    self.clear_cache()
    return not before.equals(self.root, 0.0)

  def to_string(self) -> str:
    if self._string_cache is None:
      self._string_cache = self.root.to_string()
    return self._string_cache

  def copy(self) -> 'Expression':
    return Expression(self.root.copy())

  def size(self) -> int:
    """Node count"""
    return self.root.size()

  def depth(self) -> int:
    return calculate_tree_depth(self.root)

  def variables(self) -> Set[str]:
    return get_variables(self.root)

  def clear_cache(self):
    """Clear cached values"""
    self._string_cache = None

  def to_sympy(self, symbols: Optional[Dict[str, sp.Symbol]] = None) -> sp.Expr:
    return self.root.to_sympy(symbols if symbols is not None else {})

  def equals(self, other: 'Expression', epsilon: float = DEFAULT_EPSILON) -> bool:
    return self.root.equals(other.root, epsilon)

  def __eq__(self, other) -> bool:
    if not isinstance(other, Expression):
      return NotImplemented
    return self.equals(other)

  def __hash__(self) -> int:
    return hash(self.root)

  def __str__(self) -> str:
    return self.to_string()

  def __repr__(self) -> str:
    return f"Expression({self.to_string()})"
