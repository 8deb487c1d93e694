#!/usr/bin/env python

"""Thompson-style NFA construction.

An `NFA` owns an append-only list of states, indexed by their ids. The builder
methods (`atomic`, `concat`, `union`, `star`, `optional`, `plus`) return
`Fragment`s, (start, accept) pairs of states that already live in the NFA.
Combinators only ever add states and epsilon edges, so a fragment that has
been built keeps meaning what it meant."""

from collections import defaultdict
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, NamedTuple, Optional

from pylexa.labels import EPSILON, Label
from pylexa._private import rendering, util
from pylexa._private.exceptions import AutomatonError

if TYPE_CHECKING:
    from pylexa.tokens import TokenKind


class Transition:
    __slots__ = ['target', 'label']
    def __init__(self, target: int, label: Label):
        self.target = target
        self.label = label

    def __repr__(self):
        return f"Transition({self.target}, {self.label!s})"


class NFAState:
    __slots__ = ['id', 'transitions']

    def __init__(self, id: int):
        self.id = id
        self.transitions: List[Transition] = []

    def add_transition(self, target: int, label: Label = EPSILON) -> Transition:
        """Add transition from self to target with label."""
        newtrans = Transition(target, label)
        self.transitions.append(newtrans)
        return newtrans

    def epsilon_targets(self):
        return (t.target for t in self.transitions if t.label.is_epsilon)


class Fragment(NamedTuple):
    start: int
    accept: int


class NFA(rendering.Renderable):

    def __init__(self):
        self.states: List[NFAState] = []
        """All states, indexed by id"""
        self.start: Optional[int] = None
        """Id of the initial state"""
        self.accept_tokens: Dict[int, 'TokenKind'] = {}
        """Accepting state id -> the token kind recognized there"""

    # ==================
    # Construction
    # ==================

    def new_state(self) -> int:
        sid = len(self.states)
        self.states.append(NFAState(sid))
        return sid

    def add_transition(self, source: int, target: int, label: Label = EPSILON) -> Transition:
        return self.states[source].add_transition(target, label)

    def atomic(self, label: Label) -> Fragment:
        """Two new states joined by a single edge labeled `label`."""
        s, a = self.new_state(), self.new_state()
        self.add_transition(s, a, label)
        return Fragment(s, a)

    def concat(self, a: Fragment, b: Fragment) -> Fragment:
        self.add_transition(a.accept, b.start)
        return Fragment(a.start, b.accept)

    def union(self, a: Fragment, b: Fragment) -> Fragment:
        s, x = self.new_state(), self.new_state()
        self.add_transition(s, a.start)
        self.add_transition(s, b.start)
        self.add_transition(a.accept, x)
        self.add_transition(b.accept, x)
        return Fragment(s, x)

    def star(self, f: Fragment) -> Fragment:
        """Zero or more repetitions of f."""
        s, a = self.new_state(), self.new_state()
        self.add_transition(s, f.start)
        self.add_transition(s, a)
        self.add_transition(f.accept, f.start)
        self.add_transition(f.accept, a)
        return Fragment(s, a)

    def optional(self, f: Fragment) -> Fragment:
        """Zero or one f; unlike star() there is no loop back."""
        s, a = self.new_state(), self.new_state()
        self.add_transition(s, f.start)
        self.add_transition(s, a)
        self.add_transition(f.accept, a)
        return Fragment(s, a)

    def plus(self, f: Fragment) -> Fragment:
        """One or more f, i.e. f f*."""
        return self.concat(f, self.star(f))

    def literal(self, string: str) -> Fragment:
        """Concatenation of one atomic fragment per character of a nonempty string."""
        if not string:
            raise ValueError("literal() needs a nonempty string")
        frags = [self.atomic(Label.literal(c)) for c in string]
        result = frags[0]
        for f in frags[1:]:
            result = self.concat(result, f)
        return result

    def add_token(self, fragment: Fragment, kind: 'TokenKind'):
        """Hook fragment up to the super-start with an epsilon edge and record
           its accept state as recognizing `kind`."""
        if self.start is None:
            self.start = self.new_state()
        self.add_transition(self.start, fragment.start)
        self.accept_tokens[fragment.accept] = kind

    # ==================
    # Traversal
    # ==================

    def epsilon_closure(self, stateids: Iterable[int]) -> FrozenSet[int]:
        """All states reachable from stateids by epsilon-hopping, stateids included."""
        closure = set(stateids)
        stack = list(closure)
        while stack:
            source = stack.pop()
            for target in self.states[source].epsilon_targets():
                if target not in closure:
                    closure.add(target)
                    stack.append(target)
        return frozenset(closure)

    def move(self, stateids: Iterable[int], c: str) -> FrozenSet[int]:
        """Targets of all non-epsilon transitions out of stateids that consume c."""
        return frozenset(t.target for s in stateids for t in self.states[s].transitions
                         if t.label.matches(c))

    def all_transitions(self):
        """Generator for (source id, Transition) over the whole NFA."""
        for state in self.states:
            for t in state.transitions:
                yield state.id, t

    def labels(self) -> set:
        return {t.label for _, t in self.all_transitions()}

    def verify(self):
        """Raise AutomatonError unless start and every transition target and
           accept id refer to existing states."""
        n = len(self.states)
        if self.start is None or not 0 <= self.start < n:
            raise AutomatonError(f"NFA start state {self.start} does not exist")
        for source, t in self.all_transitions():
            if not 0 <= t.target < n:
                raise AutomatonError(f"Dangling transition {source} -> {t.target} on {t.label}")
        for sid in self.accept_tokens:
            if not 0 <= sid < n:
                raise AutomatonError(f"Accept state {sid} does not exist")

    # ==================
    # Export
    # ==================

    def todict(self) -> dict:
        """Dictionary form of the NFA for export to JSON or an external renderer."""
        return {
            "start": self.start,
            "states": len(self.states),
            "transitions": {s.id: [[t.target, str(t.label)] for t in s.transitions]
                            for s in self.states if s.transitions},
            "accept": {sid: kind.name for sid, kind in sorted(self.accept_tokens.items())},
        }

    def view(self, show_alphabet=False) -> 'graphviz.Digraph':
        """Creates a 'graphviz.Digraph' object to view the NFA. Will automatically display in Jupyter.
           Accepting states show the token kind they recognize.

            :param show_alphabet: lists the distinct edge labels below the diagram
        """
        import graphviz
        sigma = "labels: {" + ', '.join(sorted(str(l) for l in self.labels())) + "}" \
            if show_alphabet else ""
        g = rendering.new_digraph('NFA', sigma)
        for s in self.states:
            final = s.id in self.accept_tokens
            label = f"{s.id}\n{self.accept_tokens[s.id].name}" if final else str(s.id)
            rendering.add_state(g, str(s.id), label, final, s.id == self.start)
        for s in self.states:
            grouped_targets = defaultdict(list)
            for t in s.transitions:
                grouped_targets[t.target].append(_label_fmt(t.label))
            for target, labellist in grouped_targets.items():
                g.edge(str(s.id), str(target), label=graphviz.nohtml(', '.join(sorted(labellist))))
        return g

    def __len__(self):
        """Return the number of states."""
        return len(self.states)

    def __str__(self):
        """An AT&T-like listing: one 'source target label' line per transition,
           then one 'state kind' line per accepting state."""
        st = ""
        for source, t in self.all_transitions():
            label = "@0@" if t.label.is_epsilon else str(t.label)
            st += '{}\t{}\t{}\n'.format(source, t.target, label)
        for sid, kind in sorted(self.accept_tokens.items()):
            st += '{}\t{}\n'.format(sid, kind.name)
        return st


def _label_fmt(label: Label) -> str:
    return util.printable(label.char) if label.char else str(label)
