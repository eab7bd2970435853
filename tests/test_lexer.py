import pytest

from expression_solver import LexError, Token, TokenType, tokenize


def num(text):
    return Token(TokenType.NUMBER, text)


def ident(text):
    return Token(TokenType.IDENTIFIER, text)


def op(token_type):
    return Token(token_type)


def test_mixed_expression():
    tokens = tokenize("3 * (4.81 + x) / cos rads")
    assert tokens == [
        num("3"), op(TokenType.MULTIPLY), op(TokenType.OPEN_PAREN),
        num("4.81"), op(TokenType.PLUS), ident("x"), op(TokenType.CLOSE_PAREN),
        op(TokenType.DIVIDE), op(TokenType.COS), ident("rads"),
    ]


def test_two_decimal_points_is_an_error():
    with pytest.raises(LexError):
        tokenize("3.1415.926")


def test_lone_decimal_point_is_an_error():
    with pytest.raises(LexError):
        tokenize("2 + .")


def test_token_boundaries():
    tokens = tokenize("2x - x2 round 5.bob r foo3.8")
    assert tokens == [
        num("2"), ident("x"), op(TokenType.MINUS), ident("x2"), op(TokenType.ROUND),
        num("5."), ident("bob"), op(TokenType.ROOT), ident("foo3.8"),
    ]


def test_keywords_must_match_whole_identifier():
    tokens = tokenize("4 * cost + basin / mine")
    assert tokens == [
        num("4"), op(TokenType.MULTIPLY), ident("cost"), op(TokenType.PLUS),
        ident("basin"), op(TokenType.DIVIDE), ident("mine"),
    ]


def test_keywords_are_case_sensitive():
    assert tokenize("COS Ln") == [ident("COS"), ident("Ln")]


def test_whitespace_is_skipped():
    tokens = tokenize(" cos      8 + G\n")
    assert tokens == [op(TokenType.COS), num("8"), op(TokenType.PLUS), ident("G")]


def test_identifier_continuation_characters():
    assert tokenize("x_1 y.z") == [ident("x_1"), ident("y.z")]


def test_every_keyword():
    text = "r cos sin tan log ln max min round ceil floor"
    types = [token.type for token in tokenize(text)]
    assert types == [
        TokenType.ROOT, TokenType.COS, TokenType.SIN, TokenType.TAN, TokenType.LOG,
        TokenType.LN, TokenType.MAX, TokenType.MIN, TokenType.ROUND, TokenType.CEIL,
        TokenType.FLOOR,
    ]


def test_unrecognized_character_reports_position():
    with pytest.raises(LexError) as excinfo:
        tokenize("3 $ 4")
    assert excinfo.value.position == 2
    assert excinfo.value.character == "$"


def test_underscore_cannot_start_identifier():
    with pytest.raises(LexError):
        tokenize("_x")


def test_empty_input():
    assert tokenize("") == []
    assert tokenize("   ") == []
