"""Quote-aware splitting of a raw shell line into tokens."""

from __future__ import annotations

QUOTES = ('"', "'")
SEPARATORS = (" ", "\t")


def tokenize(line: str) -> list[str]:
    """Split a line into tokens.

    Spaces and tabs separate tokens outside quotes. A single or double quote
    opens a quoted region that only the same quote character closes; the
    quotes themselves are dropped and there is no escaping. An unterminated
    quote runs to the end of the line without raising.

    Args:
        line: The raw input line.

    Returns:
        The tokens in order; an empty list for a blank line.
    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None

    for char in line:
        if quote is not None:
            if char == quote:
                quote = None
            else:
                current.append(char)
        elif char in QUOTES:
            quote = char
        elif char in SEPARATORS:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(char)

    if current:
        tokens.append("".join(current))
    return tokens
