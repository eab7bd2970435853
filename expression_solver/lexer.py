"""
Tokenizer for infix expressions.

A single left-to-right scan. Multi-character tokens (numbers, identifiers)
accumulate until a character of a different kind arrives; a virtual
end-of-input step flushes whatever is still open.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import LexError


class TokenType(Enum):
    NUMBER = 'number'
    IDENTIFIER = 'identifier'
    PLUS = '+'
    MINUS = '-'
    MULTIPLY = '*'
    DIVIDE = '/'
    EXPONENT = '^'
    OPEN_PAREN = '('
    CLOSE_PAREN = ')'
    ROOT = 'r'
    COS = 'cos'
    SIN = 'sin'
    TAN = 'tan'
    LOG = 'log'
    LN = 'ln'
    MAX = 'max'
    MIN = 'min'
    ROUND = 'round'
    CEIL = 'ceil'
    FLOOR = 'floor'


@dataclass(frozen=True)
class Token:
    type: TokenType
    text: Optional[str] = None

    def __str__(self) -> str:
        return self.text if self.text is not None else self.type.value


SINGLE_CHARACTER_TOKENS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.MULTIPLY,
    '/': TokenType.DIVIDE,
    '^': TokenType.EXPONENT,
    '(': TokenType.OPEN_PAREN,
    ')': TokenType.CLOSE_PAREN,
}

# Keywords are case-sensitive and must match the whole identifier.
KEYWORDS = {
    'r': TokenType.ROOT,
    'cos': TokenType.COS,
    'sin': TokenType.SIN,
    'tan': TokenType.TAN,
    'log': TokenType.LOG,
    'ln': TokenType.LN,
    'max': TokenType.MAX,
    'min': TokenType.MIN,
    'round': TokenType.ROUND,
    'ceil': TokenType.CEIL,
    'floor': TokenType.FLOOR,
}

_WHITESPACE = 'whitespace'


class ExpressionLexer:
    """Turns expression text into a list of tokens"""

    def tokenize(self, text: str) -> List[Token]:
        tokens: List[Token] = []
        current: Optional[TokenType] = None
        buffer: List[str] = []
        start = 0

        # One extra step past the end flushes the last open token.
        for position in range(len(text) + 1):
            char = text[position] if position < len(text) else None
            found = self._classify(char, current, position, text)

            if current is not None and found is not current:
                tokens.append(self._flush(current, ''.join(buffer), start, text))
                current = None
                buffer = []

            if found in (TokenType.NUMBER, TokenType.IDENTIFIER):
                if current is None:
                    current = found
                    start = position
                buffer.append(char)
            elif found is not None and found is not _WHITESPACE:
                tokens.append(Token(found))

        return tokens

    @staticmethod
    def _classify(char: Optional[str], current: Optional[TokenType], position: int, text: str):
        if char is None:
            return None
        if char in SINGLE_CHARACTER_TOKENS:
            return SINGLE_CHARACTER_TOKENS[char]
        if char.isalpha():
            return TokenType.IDENTIFIER
        if current is TokenType.IDENTIFIER and (char.isdigit() or char in '._'):
            return TokenType.IDENTIFIER
        if char == '.' or '0' <= char <= '9':
            return TokenType.NUMBER
        if char.isspace():
            return _WHITESPACE
        raise LexError(f"Unrecognized character {char!r} at position {position}",
                       position=position, character=char, expression=text)

    @staticmethod
    def _flush(token_type: TokenType, value: str, start: int, text: str) -> Token:
        if token_type is TokenType.NUMBER:
            if value.count('.') > 1:
                raise LexError(f"Malformed number {value!r}: more than one decimal point",
                               position=start, expression=text)
            if value == '.':
                raise LexError("Malformed number '.': no digits",
                               position=start, expression=text)
            return Token(TokenType.NUMBER, value)
        keyword = KEYWORDS.get(value)
        if keyword is not None:
            return Token(keyword)
        return Token(TokenType.IDENTIFIER, value)


def tokenize(text: str) -> List[Token]:
    """Tokenize expression text with a default lexer"""
    return ExpressionLexer().tokenize(text)
