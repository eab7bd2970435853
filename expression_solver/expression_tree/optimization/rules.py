"""Local algebraic rewrite rules, one entry point per operator.

Every rule takes the operator node and the evaluation context and returns
None when it does not apply, the same node when it rewired the subtree in
place, or a new node that should take the original's place.
"""

from typing import Optional
from ..core.node import (
  Node, ConstantNode, UnaryOpNode, BinaryOpNode,
  is_unary, is_binary, is_constant
)
from ..core.operators import E_VALUE


class AlgebraicRules:
  """Identity elimination and normalizing rewrites"""

  def __init__(self, optimizer):
    self.optimizer = optimizer

  @property
  def rational(self) -> bool:
    return self.optimizer.rational

  @property
  def epsilon(self) -> float:
    return self.optimizer.epsilon

  def _same(self, first: Node, second: Node) -> bool:
    return first.equals(second, self.epsilon)

  def _is_e(self, node: Node) -> bool:
    return is_constant(node) and abs(node.value - E_VALUE) < self.epsilon

  def simplify_addition(self, node: BinaryOpNode, context) -> Optional[Node]:
    left, right = node.left, node.right
    if is_constant(right, 0.0):
      return left
    if is_constant(left, 0.0):
      return right
    if is_unary(right, 'neg'):
      return BinaryOpNode('-', left, right.operand)
    if is_unary(left, 'neg'):
      return BinaryOpNode('-', right, left.operand)
    return None

  def simplify_subtraction(self, node: BinaryOpNode, context) -> Optional[Node]:
    left, right = node.left, node.right
    if is_constant(right, 0.0):
      return left
    if is_constant(left, 0.0):
      return UnaryOpNode('neg', right)
    if self.rational and self._same(left, right):
      return ConstantNode(0.0)
    if is_unary(right, 'neg'):
      return BinaryOpNode('+', left, right.operand)
    return None

  def simplify_negation(self, node: UnaryOpNode, context) -> Optional[Node]:
    operand = node.operand
    if is_unary(operand, 'neg'):
      return operand.operand
    if is_binary(operand, '-'):
      return BinaryOpNode('-', operand.right, operand.left)
    if is_binary(operand, '*', '/'):
      return self._push_negation(operand)
    return None

  def _push_negation(self, product: BinaryOpNode) -> Node:
    """Move a negation into a product or quotient.

    A constant factor absorbs the sign, an inner negation cancels it;
    otherwise the negation lands on the leftmost factor.
    """
    absorber = self._find_sign_absorber(product)
    if isinstance(absorber, ConstantNode):
      absorber.value = -absorber.value
      return product
    if absorber is not None:
      absorber.parent.replace_child(absorber, absorber.operand)
      return product

    factor = product
    while is_binary(factor, '*', '/'):
      factor = factor.left
    holder = factor.parent
    holder.replace_child(factor, UnaryOpNode('neg', factor))
    return product

  def _find_sign_absorber(self, node: Node) -> Optional[Node]:
    if isinstance(node, ConstantNode) or is_unary(node, 'neg'):
      return node
    if is_binary(node, '*', '/'):
      return self._find_sign_absorber(node.left) or self._find_sign_absorber(node.right)
    return None

  def simplify_multiplication(self, node: BinaryOpNode, context) -> Optional[Node]:
    left, right = node.left, node.right
    if is_constant(right, 1.0):
      return left
    if is_constant(left, 1.0):
      return right
    if self.rational and (is_constant(left, 0.0) or is_constant(right, 0.0)):
      return ConstantNode(0.0)
    if is_unary(left, 'neg') and is_unary(right, 'neg'):
      return BinaryOpNode('*', left.operand, right.operand)
    if is_binary(right, '/') and is_constant(right.left, 1.0):
      return BinaryOpNode('/', left, right.right)
    if is_binary(left, '/') and is_constant(left.left, 1.0):
      return BinaryOpNode('/', right, left.right)
    return None

  def combine_fractions(self, node: BinaryOpNode, context) -> Optional[Node]:
    """(a/b)*(c/d) -> (a*c)/(b*d), kept only if a side simplifies.

    The candidate is built from copies, so the original subtree is left
    untouched when the rewrite does not pay off.
    """
    left, right = node.left, node.right
    if not (is_binary(left, '/') and is_binary(right, '/')):
      return None
    numerator = BinaryOpNode('*', left.left.copy(), right.left.copy())
    denominator = BinaryOpNode('*', left.right.copy(), right.right.copy())
    numerator_size, denominator_size = numerator.size(), denominator.size()
    numerator = self.optimizer.optimize_tree(numerator, context)
    denominator = self.optimizer.optimize_tree(denominator, context)
    if numerator.size() >= numerator_size and denominator.size() >= denominator_size:
      return None
    return BinaryOpNode('/', numerator, denominator)

  def simplify_division(self, node: BinaryOpNode, context) -> Optional[Node]:
    left, right = node.left, node.right
    if is_constant(right, 1.0):
      return left
    if self.rational and self._same(left, right):
      return ConstantNode(1.0)
    if self.rational and is_constant(left, 0.0):
      return ConstantNode(0.0)
    if is_unary(left, 'neg') and is_unary(right, 'neg'):
      return BinaryOpNode('/', left.operand, right.operand)
    if is_binary(left, '/'):
      # (x/y)/z -> x/(y*z)
      return BinaryOpNode('/', left.left, BinaryOpNode('*', left.right, right))
    if is_binary(right, '/'):
      # x/(y/z) -> (x*z)/y
      return BinaryOpNode('/', BinaryOpNode('*', left, right.right), right.left)
    return None

  def simplify_exponentiation(self, node: BinaryOpNode, context) -> Optional[Node]:
    base, exponent = node.left, node.right
    if is_constant(exponent, 1.0):
      return base
    if is_constant(exponent, 0.0) or is_constant(base, 1.0):
      return ConstantNode(1.0)
    if is_binary(base, '^'):
      # (x^a)^b -> x^(a*b)
      return BinaryOpNode('^', base.left, BinaryOpNode('*', base.right, exponent))
    if is_binary(base, 'r'):
      # (a r x)^b -> x^(b/a)
      return BinaryOpNode('^', base.right, BinaryOpNode('/', exponent, base.left))
    return None

  def simplify_root(self, node: BinaryOpNode, context) -> Optional[Node]:
    degree, radicand = node.left, node.right
    if is_constant(degree, 1.0):
      return radicand
    if is_binary(radicand, '^'):
      # a r (x^b) -> x^(b/a)
      return BinaryOpNode('^', radicand.left, BinaryOpNode('/', radicand.right, degree))
    if is_binary(radicand, 'r'):
      # a r (b r x) -> (a*b) r x
      return BinaryOpNode('r', BinaryOpNode('*', degree, radicand.left), radicand.right)
    return None

  def simplify_logarithm(self, node: BinaryOpNode, context) -> Optional[Node]:
    base, argument = node.left, node.right
    if is_binary(argument, '^') and self._same(argument.left, base):
      # log_b(b^x) -> x
      return argument.right
    if is_binary(argument, 'r') and self._same(argument.right, base):
      # log_b(a r b) -> 1/a
      return BinaryOpNode('/', ConstantNode(1.0), argument.left)
    return None

  def simplify_natural_log(self, node: UnaryOpNode, context) -> Optional[Node]:
    argument = node.operand
    if is_binary(argument, '^') and self._is_e(argument.left):
      return argument.right
    if is_binary(argument, 'r') and self._is_e(argument.right):
      return BinaryOpNode('/', ConstantNode(1.0), argument.left)
    return None
