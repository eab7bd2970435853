"""
Evaluation context: the ordered variable bindings an expression is
evaluated against.
"""

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import UndefinedVariableError


class EvaluationContext:
    """
    Ordered (name, value) bindings with unique names.

    The empty context is what the optimizer evaluates against to decide
    whether a subtree is constant: any variable lookup fails, so only
    variable-free subtrees evaluate.
    """

    __slots__ = ('_names', '_values', '_index')

    def __init__(self, names: Iterable[str] = (), values: Optional[Sequence[float]] = None):
        self._names: List[str] = list(names)
        if len(set(self._names)) != len(self._names):
            raise ValueError(f"Variable names must be unique: {self._names}")
        self._index: Dict[str, int] = {name: i for i, name in enumerate(self._names)}
        self._values: Optional[np.ndarray] = None
        if values is not None:
            self.set_values(values)
        elif not self._names:
            self._values = np.empty(0, dtype=np.float64)

    @classmethod
    def empty(cls) -> 'EvaluationContext':
        return cls()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._names)

    @property
    def values(self) -> Optional[Tuple[float, ...]]:
        if self._values is None:
            return None
        return tuple(float(v) for v in self._values)

    @property
    def has_values(self) -> bool:
        return self._values is not None

    def set_values(self, values: Sequence[float]):
        array = np.asarray(values, dtype=np.float64).reshape(-1)
        if array.shape[0] != len(self._names):
            raise ValueError(
                f"Expected {len(self._names)} values for variables {self._names}, got {array.shape[0]}")
        self._values = array.copy()

    def bind(self, name: str, value: float):
        """Rebind one existing name; the name list itself never changes"""
        index = self._index.get(name)
        if index is None:
            raise UndefinedVariableError(name)
        if self._values is None:
            raise RuntimeError("Cannot bind a single variable before values are set")
        self._values[index] = value

    def get(self, name: str) -> np.float64:
        index = self._index.get(name)
        if index is None or self._values is None:
            raise UndefinedVariableError(name)
        return self._values[index]

    def evaluate(self, node) -> float:
        """Evaluate a node tree with IEEE semantics (no arithmetic exceptions)"""
        with np.errstate(all='ignore'):
            return float(node.evaluate(self))

    def items(self) -> Iterator[Tuple[str, float]]:
        values = self.values or ()
        return iter(zip(self._names, values))

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        bindings = ', '.join(f"{name}={value!r}" for name, value in self.items())
        return f"EvaluationContext({bindings})"
