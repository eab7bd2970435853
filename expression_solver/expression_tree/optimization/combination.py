"""Chain-wide combination across associative operator runs.

An additive chain is a maximal run of +, - and negation nodes; a
multiplicative chain is a run of *, / and negation nodes. Each leaf of a
chain is a term carrying a flag: negative for additive chains, inverse for
multiplicative ones. One merge is performed per call; the optimizer re-runs
the rules until nothing applies.
"""

import numpy as np
from typing import List, NamedTuple, Optional, Tuple
from ..core.node import (
  Node, ConstantNode, UnaryOpNode, BinaryOpNode,
  is_unary, is_binary
)
from ..core.operators import E_VALUE
from ..utils.tree_utils import replace_node_in_tree

ADDITIVE = ('+', '-')
MULTIPLICATIVE = ('*', '/')


class ChainTerm(NamedTuple):
  node: Node
  flipped: bool


class ChainCombiner:
  """Constant collapsing, logarithm combination and exponent combination"""

  def __init__(self, optimizer):
    self.optimizer = optimizer

  @property
  def epsilon(self) -> float:
    return self.optimizer.epsilon

  def collect_terms(self, root: BinaryOpNode) -> List[ChainTerm]:
    operators = ADDITIVE if root.operator in ADDITIVE else MULTIPLICATIVE
    terms: List[ChainTerm] = []
    self._walk(root, False, operators, terms)
    return terms

  def _walk(self, node: Node, flipped: bool, operators: Tuple[str, str], terms: List[ChainTerm]):
    keep, flip = operators
    if is_binary(node, keep):
      self._walk(node.left, flipped, operators, terms)
      self._walk(node.right, flipped, operators, terms)
    elif is_binary(node, flip):
      self._walk(node.left, flipped, operators, terms)
      self._walk(node.right, not flipped, operators, terms)
    elif is_unary(node, 'neg'):
      # Negation flips the sign of a sum but is only a factor of -1 in a product.
      self._walk(node.operand, not flipped if operators is ADDITIVE else flipped, operators, terms)
    else:
      terms.append(ChainTerm(node, flipped))

  def _is_removable(self, term: Node, multiplicative: bool) -> bool:
    parent = term.parent
    return not (multiplicative and is_binary(parent, '/') and parent.left is term)

  def splice_out(self, term: Node, root: Node, multiplicative: bool) -> Node:
    """Remove a term from its chain and return the chain's (possibly new) root"""
    parent = term.parent
    if is_unary(parent, 'neg'):
      if multiplicative:
        return replace_node_in_tree(root, parent, ConstantNode(-1.0))
      return self.splice_out(parent, root, multiplicative)
    if parent.operator in ('+', '*'):
      survivor = parent.right if parent.left is term else parent.left
    elif parent.right is term:
      survivor = parent.left
    elif parent.operator == '-':
      survivor = UnaryOpNode('neg', parent.right)
    else:
      # Numerator of a quotient: the factor becomes 1.
      return replace_node_in_tree(root, term, ConstantNode(1.0))
    return replace_node_in_tree(root, parent, survivor)

  def collapse_additive_constants(self, node: BinaryOpNode, context) -> Optional[Node]:
    constants = [t for t in self.collect_terms(node) if isinstance(t.node, ConstantNode)]
    if len(constants) < 2:
      return None
    first, survivor = constants[0], constants[-1]
    with np.errstate(all='ignore'):
      total = self._signed(first) + self._signed(survivor)
    survivor.node.value = -total if survivor.flipped else total
    return self.splice_out(first.node, node, multiplicative=False)

  def collapse_multiplicative_constants(self, node: BinaryOpNode, context) -> Optional[Node]:
    constants = [t for t in self.collect_terms(node) if isinstance(t.node, ConstantNode)]
    if len(constants) < 2:
      return None
    pinned = [t for t in constants if not self._is_removable(t.node, multiplicative=True)]
    survivor = pinned[-1] if pinned else constants[-1]
    removable = [t for t in constants if t is not survivor and self._is_removable(t.node, multiplicative=True)]
    if not removable:
      return None
    first = removable[0]
    with np.errstate(all='ignore'):
      product = self._scaled(first) * self._scaled(survivor)
      survivor.node.value = np.float64(1.0) / product if survivor.flipped else product
    return self.splice_out(first.node, node, multiplicative=True)

  @staticmethod
  def _signed(term: ChainTerm) -> np.float64:
    value = np.float64(term.node.value)
    return -value if term.flipped else value

  @staticmethod
  def _scaled(term: ChainTerm) -> np.float64:
    value = np.float64(term.node.value)
    return np.float64(1.0) / value if term.flipped else value

  def combine_logarithms(self, node: BinaryOpNode, context) -> Optional[Node]:
    """Merge same-base logarithms: log_b(x) +/- log_b(y) -> log_b(x*y or x/y)"""
    entries: List[Tuple[ChainTerm, Node]] = []
    for term in self.collect_terms(node):
      base = self._log_base(term.node)
      if base is None:
        continue
      match = next((entry for entry in entries if entry[1].equals(base, self.epsilon)), None)
      if match is None:
        entries.append((term, base))
        continue

      entry_term = match[0]
      argument = self._log_argument(term.node)
      operator = '*' if entry_term.flipped == term.flipped else '/'
      root = self.splice_out(term.node, node, multiplicative=False)
      target = entry_term.node
      if isinstance(target, UnaryOpNode):
        target.operand = BinaryOpNode(operator, target.operand, argument)
      else:
        target.right = BinaryOpNode(operator, target.right, argument)
      return root
    return None

  @staticmethod
  def _log_base(node: Node) -> Optional[Node]:
    if is_binary(node, 'log'):
      return node.left
    if is_unary(node, 'ln'):
      return ConstantNode(E_VALUE)
    return None

  @staticmethod
  def _log_argument(node: Node) -> Node:
    return node.operand if isinstance(node, UnaryOpNode) else node.right

  def combine_exponents(self, node: BinaryOpNode, context) -> Optional[Node]:
    """Merge same-base factors: x^a * x^b -> x^(a+b), x^a / x -> x^(a-1)

    The first explicit power or root of each base is the entry other
    factors fold into; a bare base never becomes an entry itself.
    """
    terms = self.collect_terms(node)
    entries: List[Tuple[ChainTerm, Node]] = []
    for term in terms:
      base = self._power_base(term.node)
      if base is not None and not any(entry[1].equals(base, self.epsilon) for entry in entries):
        entries.append((term, base))

    for term in terms:
      base = self._power_base(term.node)
      if base is None:
        base = term.node
      match = next((entry for entry in entries
                    if entry[0] is not term and entry[1].equals(base, self.epsilon)), None)
      if match is None or match[0].node is term.node:
        continue
      if not self._is_removable(term.node, multiplicative=True):
        continue

      entry_term = match[0]
      exponent = self._power_exponent(term.node)
      target = entry_term.node
      if is_binary(target, 'r'):
        # Roots are normalized to base^(1/n) before merging.
        normalized = BinaryOpNode('^', target.right, BinaryOpNode('/', ConstantNode(1.0), target.left))
        target.parent.replace_child(target, normalized)
        target = normalized
      root = self.splice_out(term.node, node, multiplicative=True)
      operator = '+' if entry_term.flipped == term.flipped else '-'
      target.right = BinaryOpNode(operator, target.right, exponent)
      return root
    return None

  @staticmethod
  def _power_base(node: Node) -> Optional[Node]:
    if is_binary(node, '^'):
      return node.left
    if is_binary(node, 'r'):
      return node.right
    return None

  @staticmethod
  def _power_exponent(node: Node) -> Node:
    if is_binary(node, '^'):
      return node.right
    if is_binary(node, 'r'):
      return BinaryOpNode('/', ConstantNode(1.0), node.left)
    return ConstantNode(1.0)
