"""One-call analysis of an expression: tokenize, validate, parse.

The NFA, DFA and grammar are built once per `Analyzer` and only read
afterwards; every call to `analyze` gets its own token list and parser."""

import functools
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pylexa.dfa import DFA, subset_construction
from pylexa.grammar import EXPRESSION_GRAMMAR, Grammar
from pylexa.lexer import tokenize
from pylexa.nfa import NFA
from pylexa.parser import ParseStep, Parser
from pylexa.tokens import Token, build_token_nfa
from pylexa.validator import ValidationResult, validate
from pylexa._private.exceptions import LexicalError, ParseError

logger = logging.getLogger(__file__)


@dataclass
class Analysis:
    """Outcome of analyzing one text. When tokenization fails, only `text` and
       `lexical_error` are filled in. Validation and parsing are independent:
       a text may pass one and fail the other."""
    text: str
    tokens: List[Token] = field(default_factory=list)
    lexical_error: Optional[LexicalError] = None
    validation: Optional[ValidationResult] = None
    parse_accepted: bool = False
    parse_error: Optional[ParseError] = None
    steps: List[ParseStep] = field(default_factory=list)

    @property
    def tokenized(self) -> bool:
        return self.lexical_error is None

    @property
    def ok(self) -> bool:
        return self.tokenized and bool(self.validation) and self.parse_accepted


class Analyzer:
    """Holds the shared automata and grammar.

       :param nfa: the token NFA; built from the token registry if not given
       :param dfa: the DFA; built from nfa by subset construction if not given
       :param grammar: the LL(1) grammar the parser runs
    """

    def __init__(self, nfa: Optional[NFA] = None, dfa: Optional[DFA] = None,
                 grammar: Grammar = EXPRESSION_GRAMMAR):
        if nfa is None:
            logger.info("Building token NFA")
            nfa = build_token_nfa()
        if dfa is None:
            dfa = subset_construction(nfa)
        self.nfa = nfa
        self.dfa = dfa
        self.grammar = grammar

    def tokenize(self, text: str) -> List[Token]:
        return tokenize(self.dfa, text)

    def parser(self, tokens=()) -> Parser:
        """A fresh parser over tokens, for step-by-step use."""
        return Parser(tokens, self.grammar)

    def analyze(self, text: str) -> Analysis:
        result = Analysis(text)
        try:
            result.tokens = self.tokenize(text)
        except LexicalError as e:
            result.lexical_error = e
            return result
        result.validation = validate(result.tokens)
        parser = self.parser(result.tokens)
        result.parse_accepted = parser.parse_all()
        result.parse_error = parser.error
        result.steps = parser.steps
        return result


@functools.lru_cache(maxsize=None)
def default_analyzer() -> Analyzer:
    return Analyzer()


def analyze(text: str) -> Analysis:
    """Analyze text with the standard expression language."""
    return default_analyzer().analyze(text)
