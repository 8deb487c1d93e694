"""Table-driven LL(1) parsing as an explicit-stack pushdown automaton.

A `Parser` holds one analysis worth of state: the symbol stack (bottom '$',
start symbol above it), the input pointer, and the status. `step()` applies a
single PDA transition; `parse_all()` just steps until the automaton halts, so
interactive and batch parsing can never disagree."""

import enum
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from pylexa.grammar import EXPRESSION_GRAMMAR, Grammar, Production, Symbol
from pylexa.tokens import Token
from pylexa._private.exceptions import ParseError

logger = logging.getLogger(__file__)


class ParseStatus(enum.Enum):
    RUNNING = 'running'
    ACCEPTED = 'accepted'
    REJECTED = 'rejected'


class Action(enum.Enum):
    EXPAND = 'expand'    # replace a nonterminal by a production's right-hand side
    MATCH = 'match'      # pop a terminal and consume the token
    ACCEPT = 'accept'
    ERROR = 'error'


@dataclass(frozen=True)
class ParseStep:
    """Record of one PDA transition. `stack` and `position` are the state
       after the transition; `top` and `lookahead` are what it looked at."""
    number: int
    action: Action
    top: Symbol
    lookahead: Optional[Token]
    stack: Tuple[Symbol, ...]
    position: int
    production: Optional[Production] = None
    error: Optional[ParseError] = None

    def describe(self) -> str:
        if self.action is Action.EXPAND:
            return f"expand {self.production}"
        if self.action is Action.MATCH:
            if self.lookahead is not None and self.top in (Symbol.ID, Symbol.NUMBER):
                return f"match {self.top} {self.lookahead.lexeme!r}"
            return f"match {self.top}"
        if self.action is Action.ACCEPT:
            return "accept"
        return f"error: {self.error.message}"


class Parser:
    """Predictive parser for `grammar` (the expression grammar by default).
       `tokens` is a lexer result, i.e. it ends with the EOF token."""

    def __init__(self, tokens: Sequence[Token] = (), grammar: Grammar = EXPRESSION_GRAMMAR):
        self.grammar = grammar
        self.reset(tokens)

    def reset(self, tokens: Optional[Sequence[Token]] = None):
        """Return to the initial configuration, optionally with new input."""
        if tokens is not None:
            self.tokens = list(tokens)
        self._stack: List[Symbol] = [Symbol.END, self.grammar.start]
        self.position = 0
        self.status = ParseStatus.RUNNING
        self.error: Optional[ParseError] = None
        self.steps: List[ParseStep] = []

    @property
    def stack(self) -> Tuple[Symbol, ...]:
        """Current stack contents, bottom first (so the top is the last element)."""
        return tuple(self._stack)

    @property
    def done(self) -> bool:
        return self.status is not ParseStatus.RUNNING

    @property
    def accepted(self) -> bool:
        return self.status is ParseStatus.ACCEPTED

    @property
    def lookahead(self) -> Optional[Token]:
        """The current token, or None once the pointer has run past the input."""
        return self.tokens[self.position] if self.position < len(self.tokens) else None

    def step(self) -> ParseStep:
        """Apply one transition and return its record. Once the parser has
           halted, the final step is returned again and nothing changes."""
        if self.done:
            return self.steps[-1]
        top = self._stack[-1]
        token = self.lookahead
        look = Symbol.END if token is None else Symbol.for_token(token.kind)

        if look is None:
            return self._fail(top, token, ParseError(
                f"Token {token.kind.name} has no terminal in the grammar", self.position, found=token.kind.name))

        if top is Symbol.END and look is Symbol.END:
            self.status = ParseStatus.ACCEPTED
            logger.debug(f"Accepted after {len(self.steps) + 1} steps")
            return self._record(Action.ACCEPT, top, token)

        if top.is_terminal:
            if top is look:
                self._stack.pop()
                self.position += 1
                return self._record(Action.MATCH, top, token)
            return self._fail(top, token, ParseError(
                f"Expected '{top}' but found '{look}'", self.position, expected=(top,), found=str(look)))

        index = self.grammar.lookup(top, look)
        if index is None:
            expected = self.grammar.expected(top)
            return self._fail(top, token, ParseError(
                f"No rule for {top} on '{look}'; expected one of "
                + ', '.join(f"'{t}'" for t in expected), self.position, expected=expected, found=str(look)))
        production = self.grammar.productions[index]
        self._stack.pop()
        self._stack.extend(reversed(production.rhs))
        return self._record(Action.EXPAND, top, token, production)

    def run(self) -> Iterator[ParseStep]:
        """Generator stepping the parser until it halts."""
        while not self.done:
            yield self.step()

    def parse_all(self, tokens: Optional[Sequence[Token]] = None) -> bool:
        """Reset, parse to completion, and return whether the input was accepted."""
        self.reset(tokens)
        for _ in self.run():
            pass
        return self.accepted

    def _record(self, action: Action, top: Symbol, token: Optional[Token],
                production: Optional[Production] = None, error: Optional[ParseError] = None) -> ParseStep:
        step = ParseStep(len(self.steps) + 1, action, top, token, self.stack, self.position, production, error)
        self.steps.append(step)
        logger.debug(f"Step {step.number}: {step.describe()}; stack {' '.join(map(str, self._stack))}")
        return step

    def _fail(self, top: Symbol, token: Optional[Token], error: ParseError) -> ParseStep:
        self.status = ParseStatus.REJECTED
        self.error = error
        logger.debug(f"Rejected: {error}")
        return self._record(Action.ERROR, top, token, error=error)
