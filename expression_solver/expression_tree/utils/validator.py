import numpy as np
from typing import Sequence
from ..core.node import Node
from .tree_utils import validate_tree_structure


class ExpressionValidator:

  @staticmethod
  def is_well_formed(node: Node) -> bool:
    """Filled slots, agreeing parent links, no shared or cyclic nodes"""
    return validate_tree_structure(node)

  @staticmethod
  def check_equivalent(original: Node, candidate: Node, variables: Sequence[str],
                       n_samples: int = 16, low: float = 0.5, high: float = 3.0,
                       seed: int = 0, rtol: float = 1e-6, atol: float = 1e-9) -> bool:
    """Numerically compare two trees over random bindings.

    Bindings are drawn from [low, high) so logarithms and roots stay in
    their real domain for typical inputs. NaN in the same positions counts
    as agreement.
    """
    if not variables:
      X = np.zeros((1, 0), dtype=np.float64)
    else:
      rng = np.random.default_rng(seed)
      X = rng.uniform(low, high, size=(n_samples, len(variables)))
    index_of = {name: i for i, name in enumerate(variables)}
    with np.errstate(all='ignore'):
      expected = original.evaluate_batch(X, index_of)
      actual = candidate.evaluate_batch(X, index_of)
    return bool(np.allclose(expected, actual, rtol=rtol, atol=atol, equal_nan=True))
