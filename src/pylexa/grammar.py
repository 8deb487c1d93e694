#!/usr/bin/env python

"""The LL(1) expression grammar and its hand-built parse table.

    E  -> T E'
    E' -> + T E' | - T E' | ε
    T  -> F T'
    T' -> * F T' | / F T' | ε
    F  -> + F | - F | ( E ) | ID | NUMBER

Left recursion is eliminated through the primed nonterminals. Note that
`F -> + F | - F` lets a unary sign appear anywhere a factor can, with or
without parentheses; the structural validator is stricter about that."""

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from pylexa.tokens import TokenKind


class Symbol(enum.Enum):
    """Every grammar symbol. The value is the symbol as written in the grammar."""
    # Nonterminals
    E = "E"
    E_PRIME = "E'"
    T = "T"
    T_PRIME = "T'"
    F = "F"
    # Terminals
    ID = "ID"
    NUMBER = "NUMBER"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    LPAREN = "("
    RPAREN = ")"
    END = "$"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINALS

    @property
    def is_nonterminal(self) -> bool:
        return self in NONTERMINALS

    @classmethod
    def for_token(cls, kind: TokenKind) -> Optional['Symbol']:
        """The terminal a token kind stands for; None for whitespace."""
        return _TOKEN_TERMINALS.get(kind)

    def __str__(self):
        return self.value


NONTERMINALS = frozenset({Symbol.E, Symbol.E_PRIME, Symbol.T, Symbol.T_PRIME, Symbol.F})
TERMINALS = frozenset(set(Symbol) - NONTERMINALS)

_TOKEN_TERMINALS = {
    TokenKind.EOF: Symbol.END,
    TokenKind.ID: Symbol.ID,
    TokenKind.NUMBER: Symbol.NUMBER,
    TokenKind.PLUS: Symbol.PLUS,
    TokenKind.MINUS: Symbol.MINUS,
    TokenKind.STAR: Symbol.STAR,
    TokenKind.SLASH: Symbol.SLASH,
    TokenKind.LPAREN: Symbol.LPAREN,
    TokenKind.RPAREN: Symbol.RPAREN,
}


@dataclass(frozen=True)
class Production:
    lhs: Symbol
    rhs: Tuple[Symbol, ...] = ()

    @property
    def is_epsilon(self) -> bool:
        """The reserved ε-production: an empty right-hand side."""
        return len(self.rhs) == 0

    def __str__(self):
        rhs = ' '.join(str(s) for s in self.rhs) if self.rhs else 'ε'
        return f"{self.lhs} → {rhs}"


@dataclass(frozen=True)
class Grammar:
    """An LL(1) grammar together with its parse table.

       :param start: the start symbol, the first thing pushed above '$'
       :param productions: productions, referred to by index from the table
       :param table: (nonterminal, terminal) -> production index; missing keys
                     are syntax errors

    Instances are immutable (the table is wrapped in a read-only mapping) and
    may be shared between any number of parsers."""
    start: Symbol
    productions: Tuple[Production, ...]
    table: Mapping[Tuple[Symbol, Symbol], int]

    def __post_init__(self):
        if not self.start.is_nonterminal:
            raise ValueError(f"Start symbol {self.start} must be a nonterminal")
        for (nonterminal, terminal), index in self.table.items():
            if not nonterminal.is_nonterminal or not terminal.is_terminal:
                raise ValueError(f"Bad table key ({nonterminal}, {terminal})")
            if not 0 <= index < len(self.productions):
                raise ValueError(f"Table entry ({nonterminal}, {terminal}) refers to missing production {index}")
            if self.productions[index].lhs is not nonterminal:
                raise ValueError(f"Table entry ({nonterminal}, {terminal}) uses {self.productions[index]}")
        object.__setattr__(self, 'productions', tuple(self.productions))
        object.__setattr__(self, 'table', MappingProxyType(dict(self.table)))

    def lookup(self, nonterminal: Symbol, terminal: Symbol) -> Optional[int]:
        return self.table.get((nonterminal, terminal))

    def expected(self, nonterminal: Symbol) -> Tuple[Symbol, ...]:
        """Terminals that have a table entry for nonterminal, in declaration order."""
        return tuple(t for t in Symbol if (nonterminal, t) in self.table)

    def table_rows(self) -> List[Tuple[Symbol, Dict[Symbol, Production]]]:
        """The table as one (nonterminal, {terminal: production}) row per
           nonterminal, for printing or drawing."""
        return [(nt, {t: self.productions[self.table[(nt, t)]] for t in self.expected(nt)})
                for nt in Symbol if nt.is_nonterminal]

    def __str__(self):
        return '\n'.join(f"{i:>2}  {p}" for i, p in enumerate(self.productions))


def expression_grammar() -> Grammar:
    """Build the fixed expression grammar and its parse table."""
    S = Symbol
    productions = (
        Production(S.E, (S.T, S.E_PRIME)),                  # 0
        Production(S.E_PRIME, (S.PLUS, S.T, S.E_PRIME)),    # 1
        Production(S.E_PRIME, (S.MINUS, S.T, S.E_PRIME)),   # 2
        Production(S.E_PRIME),                              # 3
        Production(S.T, (S.F, S.T_PRIME)),                  # 4
        Production(S.T_PRIME, (S.STAR, S.F, S.T_PRIME)),    # 5
        Production(S.T_PRIME, (S.SLASH, S.F, S.T_PRIME)),   # 6
        Production(S.T_PRIME),                              # 7
        Production(S.F, (S.PLUS, S.F)),                     # 8
        Production(S.F, (S.MINUS, S.F)),                    # 9
        Production(S.F, (S.LPAREN, S.E, S.RPAREN)),         # 10
        Production(S.F, (S.ID,)),                           # 11
        Production(S.F, (S.NUMBER,)),                       # 12
    )
    first_f = (S.PLUS, S.MINUS, S.LPAREN, S.ID, S.NUMBER)   # FIRST(E) = FIRST(T) = FIRST(F)
    table = {}
    for t in first_f:
        table[(S.E, t)] = 0
        table[(S.T, t)] = 4
    table[(S.E_PRIME, S.PLUS)] = 1
    table[(S.E_PRIME, S.MINUS)] = 2
    for t in (S.RPAREN, S.END):                             # FOLLOW(E')
        table[(S.E_PRIME, t)] = 3
    table[(S.T_PRIME, S.STAR)] = 5
    table[(S.T_PRIME, S.SLASH)] = 6
    for t in (S.PLUS, S.MINUS, S.RPAREN, S.END):            # FOLLOW(T')
        table[(S.T_PRIME, t)] = 7
    table[(S.F, S.PLUS)] = 8
    table[(S.F, S.MINUS)] = 9
    table[(S.F, S.LPAREN)] = 10
    table[(S.F, S.ID)] = 11
    table[(S.F, S.NUMBER)] = 12
    return Grammar(S.E, productions, table)


EXPRESSION_GRAMMAR = expression_grammar()
