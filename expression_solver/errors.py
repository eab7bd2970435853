"""
Exception hierarchy for the expression solver.

Every failure the lexer, parser or evaluator reports derives from
ExpressionError, so callers can catch one type at the API boundary.
"""

from typing import Optional


class ExpressionError(Exception):
    """Base class for errors raised while processing an expression"""

    def __init__(self, message: str, expression: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.expression = expression

    def __str__(self) -> str:
        if self.expression is not None:
            return f"{self.message} (in {self.expression!r})"
        return self.message


class LexError(ExpressionError):
    """Malformed number or unrecognized character"""

    def __init__(self, message: str, position: Optional[int] = None,
                 character: Optional[str] = None, expression: Optional[str] = None):
        super().__init__(message, expression)
        self.position = position
        self.character = character


class ParseError(ExpressionError):
    """Structurally invalid token sequence"""


class UnrecognizedVariableError(ParseError):
    """Identifier outside the set of known variable names"""

    def __init__(self, identifier: str, expression: Optional[str] = None):
        super().__init__(f'Unrecognized variable "{identifier}"', expression)
        self.identifier = identifier


class UndefinedVariableError(ExpressionError):
    """Variable lookup failed during evaluation"""

    def __init__(self, identifier: str):
        super().__init__(f'Encountered undefined variable "{identifier}" in expression')
        self.identifier = identifier
