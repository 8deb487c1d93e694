"""Error types shared by the automata, lexer, parser and validator."""

from dataclasses import dataclass
from typing import Optional


class AutomatonError(Exception):
    """Raised for a malformed automaton (e.g. a transition to a missing state).
       This is a construction bug, never an outcome of analyzing some input."""


@dataclass
class LexicalError(Exception):
    """No token pattern matches the input at `offset`."""
    message: str
    offset: int
    character: str = ''

    def __str__(self):
        return f"{self.message} at offset {self.offset}"


@dataclass
class ValidationError(Exception):
    """A structural check over the token list failed at token `position`."""
    message: str
    position: int

    def __str__(self):
        return f"{self.message} (token {self.position})"


@dataclass
class ParseError(Exception):
    """The pushdown automaton got stuck: a terminal mismatch or no table entry.
       `expected` is the set of terminals that would have let the parse go on."""
    message: str
    position: int
    expected: tuple = ()
    found: Optional[str] = None

    def __str__(self):
        return f"{self.message} (token {self.position})"
