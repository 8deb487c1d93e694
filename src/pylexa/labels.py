"""Transition labels: a small tagged model of what an NFA edge consumes."""

import enum
from dataclasses import dataclass


class LabelKind(enum.Enum):
    EPSILON = 'eps'
    LITERAL = 'char'
    DIGIT = 'digit'
    LETTER = 'letter'
    ALNUM_UNDERSCORE = 'alnum_'


@dataclass(frozen=True)
class Label:
    """A transition label. Character classes are ASCII-only, so that every label
       is decidable over the bounded alphabet the DFA is built from.

       :param kind: which matcher this label is
       :param char: the character for LITERAL labels, empty otherwise
    """
    kind: LabelKind
    char: str = ''

    def __post_init__(self):
        if self.kind is LabelKind.LITERAL and len(self.char) != 1:
            raise ValueError(f"A literal label needs exactly one character, got {self.char!r}")
        if self.kind is not LabelKind.LITERAL and self.char:
            raise ValueError(f"Only literal labels carry a character, got {self.char!r} for {self.kind.name}")

    @classmethod
    def literal(cls, char: str) -> 'Label':
        return cls(LabelKind.LITERAL, char)

    @property
    def is_epsilon(self) -> bool:
        return self.kind is LabelKind.EPSILON

    def matches(self, c: str) -> bool:
        """True if this label consumes the character c. Epsilon consumes nothing."""
        kind = self.kind
        if kind is LabelKind.LITERAL:
            return c == self.char
        if not c.isascii():
            return False
        if kind is LabelKind.DIGIT:
            return '0' <= c <= '9'
        if kind is LabelKind.LETTER:
            return c.isalpha()
        if kind is LabelKind.ALNUM_UNDERSCORE:
            return c.isalnum() or c == '_'
        return False

    def __str__(self):
        if self.kind is LabelKind.LITERAL:
            return self.char
        return _LABEL_NAMES[self.kind]


_LABEL_NAMES = {
    LabelKind.EPSILON: 'ϵ',        # greek lunate epsilon
    LabelKind.DIGIT: '[0-9]',
    LabelKind.LETTER: '[A-Za-z]',
    LabelKind.ALNUM_UNDERSCORE: '[A-Za-z0-9_]',
}

EPSILON = Label(LabelKind.EPSILON)
DIGIT = Label(LabelKind.DIGIT)
LETTER = Label(LabelKind.LETTER)
ALNUM_UNDERSCORE = Label(LabelKind.ALNUM_UNDERSCORE)
