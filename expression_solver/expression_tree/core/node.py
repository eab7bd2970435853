import math
import weakref
import numpy as np
import sympy as sp
from abc import ABC, abstractmethod
from typing import Optional, Dict, List, Tuple
from .operators import (
  NodeType, PRECEDENCE, PRECEDENCE_LEAF, OPERATOR_NAMES,
  BINARY_OPERATORS, UNARY_OPERATORS, BINARY_FUNCTIONS, UNARY_FUNCTIONS,
  evaluate_variable, evaluate_constant, evaluate_binary_op, evaluate_unary_op
)
from ...errors import UndefinedVariableError

DEFAULT_EPSILON = 1e-4

SYMPY_BINARY = {
  '+': lambda a, b: a + b,
  '-': lambda a, b: a - b,
  '*': lambda a, b: a * b,
  '/': lambda a, b: a / b,
  '^': lambda a, b: a ** b,
  'r': lambda a, b: b ** (sp.Integer(1) / a),
  'log': lambda a, b: sp.log(b) / sp.log(a),
  'max': sp.Max,
  'min': sp.Min,
}

SYMPY_UNARY = {
  'neg': lambda a: -a,
  'cos': sp.cos,
  'sin': sp.sin,
  'tan': sp.tan,
  'ln': sp.log,
  'round': lambda a: sp.floor(a + sp.Rational(1, 2)),
  'ceil': sp.ceiling,
  'floor': sp.floor,
}


def format_constant(value: float) -> str:
  """Shortest text that parses back to the same number"""
  if math.isfinite(value) and value.is_integer() and abs(value) < 1e15:
    return str(int(value))
  return repr(value)


class Node(ABC):
  """Base node class.

  Nodes own their operands; the parent link is a weak back-reference kept in
  agreement with the owning slot by the slot setters. Any slot change clears
  the optimized mark and size cache of the node and all of its ancestors.
  """

  __slots__ = ('_parent', '_optimized', '_size_cache', '__weakref__')

  def __init__(self):
    self._parent = None
    self._optimized = False
    self._size_cache: Optional[int] = None

  @property
  def parent(self) -> Optional['Node']:
    return self._parent() if self._parent is not None else None

  def _attach(self, parent: Optional['Node']):
    self._parent = weakref.ref(parent) if parent is not None else None

  def detach(self) -> 'Node':
    self._parent = None
    return self

  def _adopt(self, old: Optional['Node'], new: Optional['Node']):
    if old is not None and old.parent is self:
      old._parent = None
    if new is not None:
      new._attach(self)
    self.invalidate()

  @property
  def is_optimized(self) -> bool:
    return self._optimized

  def mark_optimized(self):
    self._optimized = True

  def invalidate(self):
    node = self
    while node is not None:
      node._optimized = False
      node._size_cache = None
      node = node.parent

  @property
  def precedence(self) -> int:
    return PRECEDENCE_LEAF

  @property
  def kind(self) -> str:
    """Human readable variant name"""
    return type(self).__name__

  def usable(self) -> bool:
    return True

  def children(self) -> List['Node']:
    return []

  def slots(self) -> List[Tuple[str, 'Node']]:
    return []

  def replace_child(self, old: 'Node', new: 'Node'):
    raise ValueError(f"{self.kind} has no child slots")

  def size(self) -> int:
    """Node count"""
    if self._size_cache is None:
      self._size_cache = self._compute_size()
    return self._size_cache

  @abstractmethod
  def _compute_size(self) -> int:
    pass

  @abstractmethod
  def evaluate(self, context) -> np.float64:
    pass

  @abstractmethod
  def evaluate_batch(self, X: np.ndarray, index_of: Dict[str, int]) -> np.ndarray:
    pass

  @abstractmethod
  def to_string(self) -> str:
    pass

  @abstractmethod
  def copy(self) -> 'Node':
    pass

  @abstractmethod
  def to_sympy(self, symbols: Dict[str, sp.Symbol]) -> sp.Expr:
    pass

  @abstractmethod
  def equals(self, other: 'Node', epsilon: float = DEFAULT_EPSILON) -> bool:
    pass

  @abstractmethod
  def _compute_hash(self) -> int:
    pass

  def __eq__(self, other) -> bool:
    if not isinstance(other, Node):
      return NotImplemented
    return self.equals(other)

  def __hash__(self) -> int:
    return self._compute_hash()

  def __repr__(self) -> str:
    return f"{type(self).__name__}({self.to_string()})"


class VariableNode(Node):
  __slots__ = ('name',)

  def __init__(self, name: str):
    super().__init__()
    self.name = name

  @property
  def kind(self) -> str:
    return 'Variable'

  def evaluate(self, context) -> np.float64:
    return context.get(self.name)

  def evaluate_batch(self, X: np.ndarray, index_of: Dict[str, int]) -> np.ndarray:
    index = index_of.get(self.name)
    if index is None:
      raise UndefinedVariableError(self.name)
    return evaluate_variable(X, index)

  def to_string(self) -> str:
    return self.name

  def copy(self) -> 'VariableNode':
    return VariableNode(self.name)

  def to_sympy(self, symbols: Dict[str, sp.Symbol]) -> sp.Expr:
    if self.name not in symbols:
      symbols[self.name] = sp.Symbol(self.name)
    return symbols[self.name]

  def equals(self, other: Node, epsilon: float = DEFAULT_EPSILON) -> bool:
    return isinstance(other, VariableNode) and other.name == self.name

  def _compute_size(self) -> int:
    return 1

  def _compute_hash(self) -> int:
    return hash((NodeType.VARIABLE, self.name))


class ConstantNode(Node):
  __slots__ = ('_value',)

  def __init__(self, value: float):
    super().__init__()
    self._value = float(value)

  @property
  def value(self) -> float:
    return self._value

  @value.setter
  def value(self, value: float):
    self._value = float(value)
    self.invalidate()

  @property
  def kind(self) -> str:
    return 'Constant'

  def evaluate(self, context) -> np.float64:
    return np.float64(self._value)

  def evaluate_batch(self, X: np.ndarray, index_of: Dict[str, int]) -> np.ndarray:
    return evaluate_constant(X.shape[0], self._value)

  def to_string(self) -> str:
    return format_constant(self._value)

  def copy(self) -> 'ConstantNode':
    return ConstantNode(self._value)

  def to_sympy(self, symbols: Dict[str, sp.Symbol]) -> sp.Expr:
    if math.isnan(self._value):
      return sp.nan
    if math.isinf(self._value):
      return sp.oo if self._value > 0 else -sp.oo
    if self._value.is_integer():
      return sp.Integer(int(self._value))
    return sp.Float(self._value)

  def equals(self, other: Node, epsilon: float = DEFAULT_EPSILON) -> bool:
    if not isinstance(other, ConstantNode):
      return False
    # Same-signed infinities compare equal; NaN never does.
    return other._value == self._value or abs(other._value - self._value) < epsilon

  def _compute_size(self) -> int:
    return 1

  def _compute_hash(self) -> int:
    return hash(NodeType.CONSTANT)


class UnaryOpNode(Node):
  __slots__ = ('operator', '_operand')

  def __init__(self, operator: str, operand: Optional[Node] = None):
    super().__init__()
    if operator not in UNARY_OPERATORS:
      raise ValueError(f"Unknown unary operator: {operator}")
    self.operator = operator
    self._operand: Optional[Node] = None
    if operand is not None:
      self.operand = operand

  @property
  def operand(self) -> Optional[Node]:
    return self._operand

  @operand.setter
  def operand(self, node: Optional[Node]):
    old = self._operand
    self._operand = node
    self._adopt(old, node)

  @property
  def precedence(self) -> int:
    return PRECEDENCE[self.operator]

  @property
  def kind(self) -> str:
    return OPERATOR_NAMES[self.operator]

  def usable(self) -> bool:
    return self._operand is not None

  def children(self) -> List[Node]:
    return [self._operand] if self._operand is not None else []

  def slots(self) -> List[Tuple[str, Node]]:
    return [('operand', self._operand)]

  def replace_child(self, old: Node, new: Node):
    if self._operand is not old:
      raise ValueError(f"{old!r} is not the operand of {self!r}")
    self.operand = new

  def evaluate(self, context) -> np.float64:
    return UNARY_FUNCTIONS[self.operator](self._operand.evaluate(context))

  def evaluate_batch(self, X: np.ndarray, index_of: Dict[str, int]) -> np.ndarray:
    return evaluate_unary_op(self._operand.evaluate_batch(X, index_of), self.operator)

  def to_string(self) -> str:
    inner = self._operand.to_string() if self._operand is not None else '?'
    if self.operator == 'neg':
      return f"-{inner}"
    if isinstance(self._operand, BinaryOpNode):
      return f"{self.operator}{inner}"
    return f"{self.operator}({inner})"

  def copy(self) -> 'UnaryOpNode':
    operand = self._operand.copy() if self._operand is not None else None
    return UnaryOpNode(self.operator, operand)

  def to_sympy(self, symbols: Dict[str, sp.Symbol]) -> sp.Expr:
    return SYMPY_UNARY[self.operator](self._operand.to_sympy(symbols))

  def equals(self, other: Node, epsilon: float = DEFAULT_EPSILON) -> bool:
    if not isinstance(other, UnaryOpNode) or other.operator != self.operator:
      return False
    if self._operand is None or other._operand is None:
      return self._operand is other._operand
    return self._operand.equals(other._operand, epsilon)

  def _compute_size(self) -> int:
    return 1 + (self._operand.size() if self._operand is not None else 0)

  def _compute_hash(self) -> int:
    return hash((NodeType.UNARY_OP, self.operator, hash(self._operand)))


class BinaryOpNode(Node):
  __slots__ = ('operator', '_left', '_right')

  def __init__(self, operator: str, left: Optional[Node] = None, right: Optional[Node] = None):
    super().__init__()
    if operator not in BINARY_OPERATORS:
      raise ValueError(f"Unknown binary operator: {operator}")
    self.operator = operator
    self._left: Optional[Node] = None
    self._right: Optional[Node] = None
    if left is not None:
      self.left = left
    if right is not None:
      self.right = right

  @property
  def left(self) -> Optional[Node]:
    return self._left

  @left.setter
  def left(self, node: Optional[Node]):
    old = self._left
    self._left = node
    self._adopt(old, node)

  @property
  def right(self) -> Optional[Node]:
    return self._right

  @right.setter
  def right(self, node: Optional[Node]):
    old = self._right
    self._right = node
    self._adopt(old, node)

  @property
  def precedence(self) -> int:
    return PRECEDENCE[self.operator]

  @property
  def kind(self) -> str:
    return OPERATOR_NAMES[self.operator]

  def usable(self) -> bool:
    return self._left is not None and self._right is not None

  def children(self) -> List[Node]:
    return [child for child in (self._left, self._right) if child is not None]

  def slots(self) -> List[Tuple[str, Node]]:
    return [('left', self._left), ('right', self._right)]

  def replace_child(self, old: Node, new: Node):
    if self._left is old:
      self.left = new
    elif self._right is old:
      self.right = new
    else:
      raise ValueError(f"{old!r} is not an operand of {self!r}")

  def evaluate(self, context) -> np.float64:
    left_val = self._left.evaluate(context)
    right_val = self._right.evaluate(context)
    return BINARY_FUNCTIONS[self.operator](left_val, right_val)

  def evaluate_batch(self, X: np.ndarray, index_of: Dict[str, int]) -> np.ndarray:
    left_val = self._left.evaluate_batch(X, index_of)
    right_val = self._right.evaluate_batch(X, index_of)
    return evaluate_binary_op(left_val, right_val, self.operator)

  def to_string(self) -> str:
    left_str = self._left.to_string() if self._left is not None else '?'
    right_str = self._right.to_string() if self._right is not None else '?'
    return f"({left_str} {self.operator} {right_str})"

  def copy(self) -> 'BinaryOpNode':
    left = self._left.copy() if self._left is not None else None
    right = self._right.copy() if self._right is not None else None
    return BinaryOpNode(self.operator, left, right)

  def to_sympy(self, symbols: Dict[str, sp.Symbol]) -> sp.Expr:
    return SYMPY_BINARY[self.operator](self._left.to_sympy(symbols), self._right.to_sympy(symbols))

  def equals(self, other: Node, epsilon: float = DEFAULT_EPSILON) -> bool:
    if not isinstance(other, BinaryOpNode) or other.operator != self.operator:
      return False
    for mine, theirs in ((self._left, other._left), (self._right, other._right)):
      if mine is None or theirs is None:
        if mine is not theirs:
          return False
      elif not mine.equals(theirs, epsilon):
        return False
    return True

  def _compute_size(self) -> int:
    return 1 + sum(child.size() for child in self.children())

  def _compute_hash(self) -> int:
    return hash((NodeType.BINARY_OP, self.operator, hash(self._left), hash(self._right)))


def is_unary(node: Optional[Node], *operators: str) -> bool:
  return isinstance(node, UnaryOpNode) and node.operator in operators


def is_binary(node: Optional[Node], *operators: str) -> bool:
  return isinstance(node, BinaryOpNode) and node.operator in operators


def is_constant(node: Optional[Node], value: Optional[float] = None) -> bool:
  if not isinstance(node, ConstantNode):
    return False
  return value is None or node.value == value
