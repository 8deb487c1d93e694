"""Maximal-munch tokenizer driven by a DFA."""

import logging
from typing import List, Optional, Tuple

from pylexa.dfa import DFA
from pylexa.tokens import Token, TokenKind, eof_token
from pylexa._private.exceptions import LexicalError
from pylexa._private.util import printable

logger = logging.getLogger(__file__)


def longest_match(dfa: DFA, text: str, start: int) -> Optional[Tuple[int, TokenKind]]:
    """Run dfa from its initial state on text[start:] for as long as there are
       transitions. Return (end, kind) for the last accepting position seen, or
       None if no accepting state was reached. The kind is the lowest-ordinal
       candidate of that accepting state."""
    state, last = dfa.start, None
    for pos in range(start, len(text)):
        state = dfa.transition(state, text[pos])
        if state is None:
            break
        if dfa.states[state].accept:
            last = (pos + 1, dfa.states[state].token)
    return last


def tokenize(dfa: DFA, text: str, keep_whitespace=False) -> List[Token]:
    """Split text into tokens, always taking the longest match at the cursor.
       Whitespace tokens are dropped unless keep_whitespace is True. The list
       ends with a synthetic EOF token ('$' at offset len(text)).

       Raises LexicalError if at some token boundary no pattern matches; no
       partial token list is returned in that case."""
    tokens = []
    pos = 0
    while pos < len(text):
        match = longest_match(dfa, text, pos)
        if match is None:
            logger.debug(f"Lexical error at offset {pos}: {text[pos]!r}")
            raise LexicalError(f"Unexpected character '{printable(text[pos])}'", pos, text[pos])
        end, kind = match
        if kind is not TokenKind.WS or keep_whitespace:
            tokens.append(Token(kind, text[pos:end], pos))
            logger.debug(f"Token {kind.name} {text[pos:end]!r} at {pos}")
        pos = end
    tokens.append(eof_token(text))
    return tokens
