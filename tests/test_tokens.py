"""Tests for the token stream.

Tokenizing is whitespace splitting and nothing else; each token's
symbol depends only on its exact text.  The stream hands symbols to
the parser one at a time with a single token of lookahead.
"""

import pytest

from py_sh.tokens import Symbol, TokenStream, symbol_for, tokenize

_THREE_TOKENS = 3


class TestSymbolFor:
    """Verify token text → symbol classification."""

    @pytest.mark.parametrize(
        ("text", "symbol"),
        [
            ("|", Symbol.PIPE),
            (";", Symbol.SEMICOLON),
            ("&", Symbol.AMP),
            ("&&", Symbol.AND_IF),
            ("||", Symbol.OR_IF),
            ("<", Symbol.LESS),
            (">", Symbol.GREAT),
            (">>", Symbol.DGREAT),
            ("(", Symbol.LPAREN),
            (")", Symbol.RPAREN),
        ],
    )
    def test_operators(self, text: str, symbol: Symbol) -> None:
        """Every reserved operator maps to its own symbol."""
        assert symbol_for(text) is symbol

    def test_words_are_literals(self) -> None:
        """Anything that is not an operator is a literal."""
        assert symbol_for("echo") is Symbol.LITERAL
        assert symbol_for("-la") is Symbol.LITERAL

    def test_glued_operators_are_literals(self) -> None:
        """Without spaces an operator is part of a word."""
        assert symbol_for("a|b") is Symbol.LITERAL
        assert symbol_for(">out.txt") is Symbol.LITERAL
        assert symbol_for("&&&") is Symbol.LITERAL

    def test_symbol_names_are_not_operators(self) -> None:
        """Typing a symbol's display name gives a plain literal."""
        assert symbol_for("literal") is Symbol.LITERAL
        assert symbol_for("end of input") is Symbol.LITERAL


class TestSymbolLabel:
    """Verify the names used in error messages."""

    def test_operator_label_is_its_text(self) -> None:
        """Operators are shown as typed."""
        assert Symbol.DGREAT.label == ">>"

    def test_categories_are_upper_case(self) -> None:
        """LITERAL and END read as categories, not text."""
        assert Symbol.LITERAL.label == "LITERAL"
        assert Symbol.END.label == "END OF INPUT"


class TestTokenize:
    """Verify whitespace splitting."""

    def test_splits_on_spaces_and_tabs(self) -> None:
        """Runs of spaces and tabs separate tokens."""
        assert tokenize("ls  -l\t/tmp") == ["ls", "-l", "/tmp"]

    def test_strips_line_endings(self) -> None:
        """Carriage returns and newlines are whitespace too."""
        assert tokenize("echo hi\r\n") == ["echo", "hi"]

    def test_no_quoting(self) -> None:
        """Quotes are ordinary characters."""
        assert tokenize('echo "a b"') == ["echo", '"a', 'b"']

    def test_blank_line(self) -> None:
        """A blank line has no tokens."""
        assert tokenize("   \t ") == []


class TestTokenStream:
    """Verify lookahead and consumption."""

    def test_lookahead_starts_on_first_token(self) -> None:
        """The first symbol is available before anything is consumed."""
        stream = TokenStream.from_line("echo | wc")
        assert stream.symbol is Symbol.LITERAL
        assert stream.text == "echo"

    def test_advance_moves_one_token(self) -> None:
        """Advance returns the consumed text and shifts the lookahead."""
        stream = TokenStream.from_line("echo | wc")
        assert stream.advance() == "echo"
        assert stream.symbol is Symbol.PIPE

    def test_end_is_sticky(self) -> None:
        """After the last token the stream stays at END."""
        stream = TokenStream.from_line("x")
        stream.advance()
        assert stream.symbol is Symbol.END
        assert stream.advance() is None
        assert stream.symbol is Symbol.END
        assert stream.text is None

    def test_empty_stream(self) -> None:
        """A stream over no tokens is immediately at END."""
        assert TokenStream([]).symbol is Symbol.END

    def test_len(self) -> None:
        """Length counts all tokens, consumed or not."""
        stream = TokenStream.from_line("a b c")
        stream.advance()
        assert len(stream) == _THREE_TOKENS
