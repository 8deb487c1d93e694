"""Heuristic structural checks over a token list.

These run independently of the parser and are deliberately not the same
thing: the grammar accepts `-3` through `F -> - F`, but `check_unary_operators`
insists on a sign being written inside parentheses, as in `(-3)`.

Each check raises `ValidationError` with the index of the offending token;
`validate` runs them in order and turns the first failure into a
`ValidationResult`."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from pylexa.tokens import Token, TokenKind
from pylexa._private.exceptions import ValidationError


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    message: str = ''
    position: Optional[int] = None

    def __bool__(self):
        return self.valid


def _real_tokens(tokens: Sequence[Token]) -> List[Tuple[int, Token]]:
    """(index, token) pairs for everything but whitespace and EOF."""
    return [(i, t) for i, t in enumerate(tokens) if t.kind not in (TokenKind.EOF, TokenKind.WS)]


def check_not_empty(tokens: Sequence[Token]):
    if not _real_tokens(tokens):
        raise ValidationError("Empty expression", 0)


def check_parentheses(tokens: Sequence[Token]):
    """Every ')' closes an earlier '(' and every '(' is closed. An unclosed '('
       is reported at the first '(' of the expression, closed or not."""
    balance, first_open = 0, None
    for i, t in _real_tokens(tokens):
        if t.kind is TokenKind.LPAREN:
            balance += 1
            if first_open is None:
                first_open = i
        elif t.kind is TokenKind.RPAREN:
            balance -= 1
            if balance < 0:
                raise ValidationError("Unmatched closing parenthesis ')'", i)
    if balance > 0:
        raise ValidationError("Unmatched opening parenthesis '('", first_open)


def check_adjacent_operators(tokens: Sequence[Token]):
    real = _real_tokens(tokens)
    for (i, t), (_, u) in zip(real, real[1:]):
        if t.kind.is_operator and u.kind.is_operator:
            raise ValidationError(f"Adjacent operators '{t.lexeme}{u.lexeme}' are not allowed", i)


def check_operator_placement(tokens: Sequence[Token]):
    """No leading '+', '*' or '/' ('-' may lead) and no trailing operator."""
    real = _real_tokens(tokens)
    if not real:
        return
    i, first = real[0]
    if first.kind in (TokenKind.PLUS, TokenKind.STAR, TokenKind.SLASH):
        raise ValidationError(f"Expression cannot start with operator '{first.lexeme}'", i)
    i, last = real[-1]
    if last.kind.is_operator:
        raise ValidationError(f"Expression cannot end with operator '{last.lexeme}'", i)


def check_unary_operators(tokens: Sequence[Token]):
    """A '+' or '-' is unary when it comes first or right after an operator or
       '('. Unary signs are only allowed inside parentheses: (-3), a+(-b)."""
    depth, prev = 0, None
    for i, t in _real_tokens(tokens):
        if t.kind is TokenKind.LPAREN:
            depth += 1
        elif t.kind is TokenKind.RPAREN:
            depth -= 1
        elif t.kind in (TokenKind.PLUS, TokenKind.MINUS):
            unary = prev is None or prev.kind.is_operator or prev.kind is TokenKind.LPAREN
            if unary and depth == 0:
                raise ValidationError(f"Unary operator '{t.lexeme}' must be enclosed in parentheses, "
                                      f"e.g., ({t.lexeme}3)", i)
        prev = t


CHECKS: Tuple[Callable[[Sequence[Token]], None], ...] = (
    check_not_empty,
    check_parentheses,
    check_adjacent_operators,
    check_operator_placement,
    check_unary_operators,
)


def validate(tokens: Sequence[Token], checks=CHECKS) -> ValidationResult:
    """Run checks in order and report the first failure, if any."""
    try:
        for check in checks:
            check(tokens)
    except ValidationError as e:
        return ValidationResult(False, e.message, e.position)
    return ValidationResult(True)
