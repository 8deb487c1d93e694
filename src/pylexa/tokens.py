"""Token kinds, tokens, and the registry of token patterns.

The declaration order of `TokenKind` matters: when a DFA state accepts more
than one kind, the lexer picks the one with the smallest value."""

import enum
from dataclasses import dataclass
from typing import Callable, Dict

from pylexa import labels
from pylexa.labels import Label
from pylexa.nfa import NFA, Fragment


class TokenKind(enum.IntEnum):
    EOF = 0
    ID = 1
    NUMBER = 2
    PLUS = 3
    MINUS = 4
    STAR = 5
    SLASH = 6
    LPAREN = 7
    RPAREN = 8
    WS = 9

    @property
    def is_operator(self) -> bool:
        """The four binary arithmetic operators."""
        return self in _OPERATORS


_OPERATORS = frozenset({TokenKind.PLUS, TokenKind.MINUS, TokenKind.STAR, TokenKind.SLASH})


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    lexeme: str
    offset: int

    def __str__(self):
        if self.kind in (TokenKind.ID, TokenKind.NUMBER):
            return f"{self.kind.name}({self.lexeme})"
        return self.kind.name


def eof_token(text: str) -> Token:
    return Token(TokenKind.EOF, '$', len(text))


# ==================
# Token patterns
# ==================

def _identifier(nfa: NFA) -> Fragment:
    # letter (alnum | _)*
    return nfa.concat(nfa.atomic(labels.LETTER), nfa.star(nfa.atomic(labels.ALNUM_UNDERSCORE)))

def _number(nfa: NFA) -> Fragment:
    # digit+ (. digit+)?
    integer = nfa.plus(nfa.atomic(labels.DIGIT))
    fraction = nfa.concat(nfa.atomic(Label.literal('.')), nfa.plus(nfa.atomic(labels.DIGIT)))
    return nfa.concat(integer, nfa.optional(fraction))

def _char(c: str) -> Callable[[NFA], Fragment]:
    return lambda nfa: nfa.atomic(Label.literal(c))

def _whitespace(nfa: NFA) -> Fragment:
    # (space | tab)+, never the empty string
    return nfa.plus(nfa.union(nfa.atomic(Label.literal(' ')), nfa.atomic(Label.literal('\t'))))


TOKEN_PATTERNS: Dict[TokenKind, Callable[[NFA], Fragment]] = {
    TokenKind.ID: _identifier,
    TokenKind.NUMBER: _number,
    TokenKind.PLUS: _char('+'),
    TokenKind.MINUS: _char('-'),
    TokenKind.STAR: _char('*'),
    TokenKind.SLASH: _char('/'),
    TokenKind.LPAREN: _char('('),
    TokenKind.RPAREN: _char(')'),
    TokenKind.WS: _whitespace,
}
"""Ordered registry: token kind -> function building its fragment inside a given NFA."""


def build_token_nfa(patterns: Dict[TokenKind, Callable[[NFA], Fragment]] = TOKEN_PATTERNS) -> NFA:
    """Build the combined token NFA: a super-start state (always state 0) with
       an epsilon edge into each pattern's fragment, whose accept state is
       mapped to the pattern's token kind."""
    nfa = NFA()
    nfa.start = nfa.new_state()
    for kind, pattern in patterns.items():
        if kind is TokenKind.EOF:
            raise ValueError("EOF is synthesized by the lexer and cannot have a pattern")
        nfa.add_token(pattern(nfa), kind)
    return nfa
