from typing import Callable, Dict, List, Optional
from ..core.node import Node, ConstantNode, DEFAULT_EPSILON
from ..utils.validator import ExpressionValidator
from .rules import AlgebraicRules
from .combination import ChainCombiner
from ...context import EvaluationContext
from ...errors import UndefinedVariableError
from ...logging_system import LogLevel, log_debug, log_info, log_warning, log_enabled

Rule = Callable[[Node, EvaluationContext], Optional[Node]]


class ExpressionOptimizer:
  """Bottom-up tree rewriter.

  Children are optimized first, then the operator's rules run until none
  applies, then the subtree is folded to a constant if it evaluates without
  touching a variable. Finished nodes are marked so unchanged subtrees are
  skipped on later passes; any slot change clears the mark up to the root.
  """

  MAX_PASSES = 64

  def __init__(self, rational: bool = True, epsilon: float = DEFAULT_EPSILON, validate: bool = False):
    self.rational = rational
    self.epsilon = epsilon
    self.validate = validate
    rules = AlgebraicRules(self)
    chains = ChainCombiner(self)
    self._rule_table: Dict[str, List[Rule]] = {
      '+': [rules.simplify_addition, chains.collapse_additive_constants, chains.combine_logarithms],
      '-': [rules.simplify_subtraction, chains.collapse_additive_constants, chains.combine_logarithms],
      '*': [rules.simplify_multiplication, chains.collapse_multiplicative_constants,
            chains.combine_exponents, rules.combine_fractions],
      '/': [rules.simplify_division, chains.collapse_multiplicative_constants, chains.combine_exponents],
      '^': [rules.simplify_exponentiation],
      'r': [rules.simplify_root],
      'log': [rules.simplify_logarithm],
      'neg': [rules.simplify_negation],
      'ln': [rules.simplify_natural_log],
    }

  def optimize_tree(self, root: Node, context: Optional[EvaluationContext] = None) -> Node:
    """Optimize a whole tree and return its (detached) root"""
    if context is None:
      context = EvaluationContext.empty()
    size_before = root.size()
    replacement = self.optimize(root, context)
    result = (replacement if replacement is not None else root).detach()
    log_info(f"Optimized tree: {size_before} -> {result.size()} nodes", LogLevel.DETAILED)
    if self.validate and not ExpressionValidator.is_well_formed(result):
      raise RuntimeError(f"Optimizer produced a malformed tree: {result.to_string()}")
    return result

  def optimize(self, node: Node, context: EvaluationContext) -> Optional[Node]:
    """Optimize a subtree.

    Returns None if nothing changed, the node itself if it was rewritten in
    place, or a different node that must replace it in its parent.
    """
    if node.is_optimized:
      return None

    current = node
    changed = False
    for _ in range(self.MAX_PASSES):
      step = self._optimize_pass(current, context)
      if step is None:
        break
      changed = True
      current = step
    else:
      log_warning(f"Optimizer pass limit reached at {current.to_string()}")

    folded = self._fold(current, context)
    if folded is not None:
      folded.mark_optimized()
      return folded
    current.mark_optimized()
    return current if changed else None

  def _optimize_pass(self, node: Node, context: EvaluationContext) -> Optional[Node]:
    changed = False
    for slot, child in node.slots():
      replacement = self.optimize(child, context)
      if replacement is not None:
        changed = True
        if replacement is not child:
          setattr(node, slot, replacement)

    # All-constant operands are left to the fold, which evaluates exactly.
    children = node.children()
    if children and all(isinstance(child, ConstantNode) for child in children):
      return node if changed else None

    for rule in self._rule_table.get(getattr(node, 'operator', None), ()):
      before = node.to_string() if log_enabled(LogLevel.VERBOSE) else None
      result = rule(node, context)
      if result is not None:
        if before is not None:
          log_debug(f"{rule.__name__}: {before} -> {result.to_string()}")
        return result
    return node if changed else None

  def _fold(self, node: Node, context: EvaluationContext) -> Optional[ConstantNode]:
    if isinstance(node, ConstantNode):
      return None
    try:
      value = context.evaluate(node)
    except UndefinedVariableError:
      return None
    return ConstantNode(value)
