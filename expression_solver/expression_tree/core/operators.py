import math
import numpy as np
import numba
from enum import IntEnum

class NodeType(IntEnum):
  VARIABLE = 0
  CONSTANT = 1
  BINARY_OP = 2
  UNARY_OP = 3

# Precedence classes, higher binds tighter. Leaves sit below every operator.
PRECEDENCE_LEAF = 0
PRECEDENCE_EXTREMUM = 1
PRECEDENCE_ADDITIVE = 2
PRECEDENCE_MULTIPLICATIVE = 3
PRECEDENCE_POWER = 4
PRECEDENCE_UNARY = 5

BINARY_OPERATORS = ('+', '-', '*', '/', '^', 'r', 'log', 'max', 'min')
UNARY_OPERATORS = ('neg', 'cos', 'sin', 'tan', 'ln', 'round', 'ceil', 'floor')

PRECEDENCE = {
  'max': PRECEDENCE_EXTREMUM, 'min': PRECEDENCE_EXTREMUM,
  '+': PRECEDENCE_ADDITIVE, '-': PRECEDENCE_ADDITIVE,
  '*': PRECEDENCE_MULTIPLICATIVE, '/': PRECEDENCE_MULTIPLICATIVE,
  '^': PRECEDENCE_POWER, 'r': PRECEDENCE_POWER, 'log': PRECEDENCE_POWER,
  'neg': PRECEDENCE_UNARY, 'cos': PRECEDENCE_UNARY, 'sin': PRECEDENCE_UNARY,
  'tan': PRECEDENCE_UNARY, 'ln': PRECEDENCE_UNARY, 'round': PRECEDENCE_UNARY,
  'ceil': PRECEDENCE_UNARY, 'floor': PRECEDENCE_UNARY,
}

OPERATOR_NAMES = {
  '+': 'Addition', '-': 'Subtraction', '*': 'Multiplication', '/': 'Division',
  '^': 'Exponentiation', 'r': 'Root', 'log': 'Logarithm',
  'max': 'Max', 'min': 'Min',
  'neg': 'Negation', 'cos': 'Cosine', 'sin': 'Sine', 'tan': 'Tangent',
  'ln': 'NaturalLog', 'round': 'Round', 'ceil': 'Ceiling', 'floor': 'Floor',
}

E_VALUE = math.e


def _root(degree, radicand):
  return np.power(radicand, 1.0 / degree)


def _logarithm(base, argument):
  return np.log(argument) / np.log(base)


def _round_half_up(value):
  return np.floor(value + 0.5)


# Scalar kernels over numpy float64 values. Callers wrap evaluation in
# np.errstate so IEEE results are produced without warnings.
BINARY_FUNCTIONS = {
  '+': np.add,
  '-': np.subtract,
  '*': np.multiply,
  '/': np.divide,
  '^': np.power,
  'r': _root,
  'log': _logarithm,
  'max': np.maximum,
  'min': np.minimum,
}

UNARY_FUNCTIONS = {
  'neg': np.negative,
  'cos': np.cos,
  'sin': np.sin,
  'tan': np.tan,
  'ln': np.log,
  'round': _round_half_up,
  'ceil': np.ceil,
  'floor': np.floor,
}

@numba.njit(cache=True, inline='always')
def evaluate_variable(X, index):
  return X[:, index].astype(np.float64)

@numba.njit(cache=True, inline='always')
def evaluate_constant(n_samples, value):
  return np.full(n_samples, value, dtype=np.float64)

# No fastmath: NaN and Infinity have to survive every kernel.
@numba.njit(cache=True, error_model='numpy')
def evaluate_binary_op(left_val, right_val, operator):
  if operator == '+':
    return left_val + right_val
  elif operator == '-':
    return left_val - right_val
  elif operator == '*':
    return left_val * right_val
  elif operator == '/':
    return left_val / right_val
  elif operator == '^':
    return np.power(left_val, right_val)
  elif operator == 'r':
    return np.power(right_val, 1.0 / left_val)
  elif operator == 'log':
    return np.log(right_val) / np.log(left_val)
  elif operator == 'max':
    return np.maximum(left_val, right_val)
  elif operator == 'min':
    return np.minimum(left_val, right_val)
  raise ValueError("unknown binary operator")

@numba.njit(cache=True, error_model='numpy')
def evaluate_unary_op(operand_val, operator):
  if operator == 'neg':
    return -operand_val
  elif operator == 'cos':
    return np.cos(operand_val)
  elif operator == 'sin':
    return np.sin(operand_val)
  elif operator == 'tan':
    return np.tan(operand_val)
  elif operator == 'ln':
    return np.log(operand_val)
  elif operator == 'round':
    return np.floor(operand_val + 0.5)
  elif operator == 'ceil':
    return np.ceil(operand_val)
  elif operator == 'floor':
    return np.floor(operand_val)
  raise ValueError("unknown unary operator")
