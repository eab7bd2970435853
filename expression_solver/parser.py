"""
Precedence parser: token list to expression tree.

Each parenthesis level becomes a flat list of segments (operator stubs and
finished subtrees). Stubs are then resolved one precedence class at a time,
highest first, scanning left to right so binary operators associate to the
left. Prefix operators of one class apply innermost first, which lets them
chain (``--x``, ``sin -10``).
"""

from typing import AbstractSet, List, Optional

from .errors import ParseError, UnrecognizedVariableError
from .expression_tree.core.node import Node, ConstantNode, VariableNode, UnaryOpNode, BinaryOpNode
from .expression_tree.expression import Expression
from .lexer import Token, TokenType
from .logging_system import LogLevel, log_info

BINARY_TOKENS = {
    TokenType.PLUS: '+',
    TokenType.MULTIPLY: '*',
    TokenType.DIVIDE: '/',
    TokenType.EXPONENT: '^',
    TokenType.ROOT: 'r',
    TokenType.LOG: 'log',
    TokenType.MAX: 'max',
    TokenType.MIN: 'min',
}

UNARY_TOKENS = {
    TokenType.COS: 'cos',
    TokenType.SIN: 'sin',
    TokenType.TAN: 'tan',
    TokenType.LN: 'ln',
    TokenType.ROUND: 'round',
    TokenType.CEIL: 'ceil',
    TokenType.FLOOR: 'floor',
}


class _TokenCursor:
    __slots__ = ('tokens', 'index')

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0

    def exhausted(self) -> bool:
        return self.index >= len(self.tokens)

    def current(self) -> Token:
        return self.tokens[self.index]


class ExpressionParser:
    """Builds expression trees from token lists"""

    def parse(self, tokens: List[Token], variables: Optional[AbstractSet[str]] = None,
              optimize: bool = False, optimizer=None, context=None) -> Expression:
        """
        Parse a token list into an Expression.

        Args:
            tokens: Output of the lexer
            variables: Known variable names, or None to accept any identifier
            optimize: Run the optimizer on the finished tree
            optimizer: Optimizer to use; a default one is created when omitted
            context: Bindings the optimizer folds against (empty by default)

        Returns:
            Expression wrapping the root node
        """
        cursor = _TokenCursor(tokens)
        root = self._parse_scope(cursor, variables, depth=0)
        log_info(f"Parsed {len(tokens)} tokens into {root.size()} nodes", LogLevel.DETAILED)

        if optimize:
            if optimizer is None:
                from .expression_tree.optimization import ExpressionOptimizer
                optimizer = ExpressionOptimizer()
            root = optimizer.optimize_tree(root, context)
        return Expression(root)

    def _parse_scope(self, cursor: _TokenCursor, variables: Optional[AbstractSet[str]], depth: int) -> Node:
        segments: List[Node] = []
        # Kind of the previous value-producing segment: NUMBER, IDENTIFIER,
        # CLOSE_PAREN for a finished group, or None after an operator.
        previous: Optional[TokenType] = None

        while not cursor.exhausted():
            token = cursor.current()
            produced: Optional[TokenType] = None

            if token.type is TokenType.CLOSE_PAREN:
                if depth == 0:
                    raise ParseError("Unmatched closing parenthesis")
                return self._resolve(segments, empty_message="Empty parentheses")

            if token.type is TokenType.NUMBER:
                if previous is TokenType.NUMBER:
                    raise ParseError(f"Two consecutive numbers before {token.text}")
                if previous is not None:
                    segments.append(BinaryOpNode('*'))
                segments.append(ConstantNode(float(token.text)))
                produced = TokenType.NUMBER

            elif token.type is TokenType.IDENTIFIER:
                if variables is not None and token.text not in variables:
                    raise UnrecognizedVariableError(token.text)
                if previous is not None:
                    segments.append(BinaryOpNode('*'))
                segments.append(VariableNode(token.text))
                produced = TokenType.IDENTIFIER

            elif token.type is TokenType.OPEN_PAREN:
                if previous is not None:
                    segments.append(BinaryOpNode('*'))
                cursor.index += 1
                segments.append(self._parse_scope(cursor, variables, depth + 1))
                produced = TokenType.CLOSE_PAREN

            elif token.type is TokenType.MINUS:
                # Subtraction only directly after a value.
                segments.append(BinaryOpNode('-') if previous is not None else UnaryOpNode('neg'))

            elif token.type in BINARY_TOKENS:
                segments.append(BinaryOpNode(BINARY_TOKENS[token.type]))

            else:
                segments.append(UnaryOpNode(UNARY_TOKENS[token.type]))

            previous = produced
            cursor.index += 1

        if depth > 0:
            raise ParseError("Missing closing parenthesis")
        return self._resolve(segments, empty_message="Empty expression")

    def _resolve(self, segments: List[Node], empty_message: str) -> Node:
        if not segments:
            raise ParseError(empty_message)

        classes = sorted({segment.precedence for segment in segments if not segment.usable()}, reverse=True)
        for precedence in classes:
            index = 0
            while index < len(segments):
                segment = segments[index]
                if segment.usable() or segment.precedence != precedence:
                    index += 1
                elif isinstance(segment, UnaryOpNode):
                    last = index
                    while (last + 1 < len(segments) and isinstance(segments[last + 1], UnaryOpNode)
                           and not segments[last + 1].usable()
                           and segments[last + 1].precedence == precedence):
                        last += 1
                    for position in range(last, index - 1, -1):
                        self._apply_unary(segments, position)
                    index += 1
                else:
                    # The resolved operator lands at index - 1; the next
                    # candidate is then at index.
                    self._apply_binary(segments, index)

        if len(segments) > 1:
            kinds = ', '.join(segment.kind for segment in segments)
            raise ParseError(f"Multiple unconnected segments: {kinds}")
        root = segments[0]
        if not root.usable():
            raise ParseError(f"Missing arguments for {root.kind}")
        return root

    @staticmethod
    def _apply_unary(segments: List[Node], index: int):
        operator = segments[index]
        if index + 1 >= len(segments) or not segments[index + 1].usable():
            raise ParseError(f"Missing right argument for {operator.kind}")
        operator.operand = segments.pop(index + 1)

    @staticmethod
    def _apply_binary(segments: List[Node], index: int):
        operator = segments[index]
        if index == 0 or not segments[index - 1].usable():
            raise ParseError(f"Missing left argument for {operator.kind}")
        if index + 1 >= len(segments) or not segments[index + 1].usable():
            raise ParseError(f"Missing right argument for {operator.kind}")
        operator.right = segments.pop(index + 1)
        operator.left = segments.pop(index - 1)
