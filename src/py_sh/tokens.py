"""Token stream — turn a raw line into symbols, one at a time.

Tokenizing is plain splitting: the line is split on whitespace and
nothing else.  There is no quoting and no escaping, so operators must
be separated by spaces (``a|b`` is a single literal, ``a | b`` is a
pipeline).

Each token's **symbol** is derived from its exact text.  The parser
only ever looks at symbols; it reaches for the token text when it
needs a literal's value (a program name, an argument, a file path).

The stream keeps a one-token lookahead: ``symbol`` is the category of
the token about to be consumed, ``advance()`` moves past it.  Once the
tokens run out the lookahead stays at ``Symbol.END`` forever.
"""

from enum import StrEnum


class Symbol(StrEnum):
    """Lexical category of a token.

    Operator members carry their exact token text as their value, so
    ``Symbol("&&") is Symbol.AND_IF``.
    """

    PIPE = "|"
    SEMICOLON = ";"
    AMP = "&"
    AND_IF = "&&"
    OR_IF = "||"
    LESS = "<"
    GREAT = ">"
    DGREAT = ">>"
    LPAREN = "("
    RPAREN = ")"
    LITERAL = "literal"
    END = "end of input"

    @property
    def label(self) -> str:
        """Return the name used for this symbol in error messages."""
        if self in (Symbol.LITERAL, Symbol.END):
            return self.value.upper()
        return self.value


# Only operators are looked up by text; "literal" typed at the prompt
# is just a literal.
_OPERATORS: dict[str, Symbol] = {
    s.value: s for s in Symbol if s not in (Symbol.LITERAL, Symbol.END)
}


def symbol_for(text: str) -> Symbol:
    """Return the symbol for one token's text."""
    return _OPERATORS.get(text, Symbol.LITERAL)


def tokenize(line: str) -> list[str]:
    """Split a line on spaces, tabs, carriage returns and newlines."""
    return line.split()


class TokenStream:
    """Tokens of one line, consumed left to right with one lookahead."""

    def __init__(self, tokens: list[str]) -> None:
        """Create a stream positioned on the first token."""
        self._tokens = list(tokens)
        self._position = 0

    @classmethod
    def from_line(cls, line: str) -> "TokenStream":
        """Tokenize ``line`` and wrap the result in a stream."""
        return cls(tokenize(line))

    @property
    def symbol(self) -> Symbol:
        """Return the lookahead symbol (``Symbol.END`` when exhausted)."""
        if self._position >= len(self._tokens):
            return Symbol.END
        return symbol_for(self._tokens[self._position])

    @property
    def text(self) -> str | None:
        """Return the lookahead token's text, or None when exhausted."""
        if self._position >= len(self._tokens):
            return None
        return self._tokens[self._position]

    def advance(self) -> str | None:
        """Consume the lookahead token and return its text."""
        text = self.text
        if text is not None:
            self._position += 1
        return text

    def __len__(self) -> int:
        """Return the total number of tokens in the line."""
        return len(self._tokens)
