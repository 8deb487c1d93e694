from pylexa.labels import Label, LabelKind
from pylexa.nfa import NFA, Fragment
from pylexa.tokens import Token, TokenKind, build_token_nfa
from pylexa.dfa import DFA, subset_construction
from pylexa.lexer import tokenize
from pylexa.grammar import Grammar, Production, Symbol, EXPRESSION_GRAMMAR
from pylexa.parser import Parser, ParseStatus, ParseStep, Action
from pylexa.validator import ValidationResult, validate
from pylexa.analysis import Analysis, Analyzer, analyze
from pylexa._private.exceptions import AutomatonError, LexicalError, ParseError, ValidationError

__license__    = "Apache"
__version__    = "1.0"
__status__     = "Prototype"
