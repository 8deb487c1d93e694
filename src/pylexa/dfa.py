#!/usr/bin/env python

"""Subset construction: from the combined token NFA to a DFA."""

import logging
from collections import defaultdict, deque
from typing import Dict, List, Optional, Sequence, Tuple

from pylexa.nfa import NFA
from pylexa.tokens import TokenKind
from pylexa._private import rendering, util

logger = logging.getLogger(__file__)

ASCII: Tuple[str, ...] = tuple(chr(i) for i in range(128))
"""The default bounded alphabet, code points 0-127."""


class DFAState:
    __slots__ = ['id', 'transitions', 'accept', 'tokens', 'nfa_states']

    def __init__(self, id: int, nfa_states: Tuple[int, ...], tokens: Tuple[TokenKind, ...] = ()):
        self.id = id
        self.transitions: Dict[str, int] = {}
        self.nfa_states = nfa_states      # sorted; this is the state's identity
        self.tokens = tokens              # candidate kinds in NFA state order, may repeat
        self.accept = len(tokens) > 0

    @property
    def token(self) -> Optional[TokenKind]:
        """The kind this state recognizes: the lowest-ordinal candidate."""
        return min(self.tokens) if self.tokens else None

    def __repr__(self):
        return f"DFAState({self.id}, accept={self.accept}, tokens={[k.name for k in self.tokens]})"


class DFA(rendering.Renderable):
    """A DFA over a bounded alphabet. State 0 is the initial state. Once built
       it is not modified, so one instance can serve any number of lexers."""

    def __init__(self, states: List[DFAState], alphabet: Sequence[str] = ASCII):
        self.states = states
        self.alphabet = tuple(alphabet)
        self.start = 0

    @classmethod
    def from_nfa(cls, nfa: NFA, alphabet: Sequence[str] = ASCII) -> 'DFA':
        return subset_construction(nfa, alphabet)

    @property
    def accept_states(self) -> List[int]:
        return [s.id for s in self.states if s.accept]

    @property
    def start_is_accepting(self) -> bool:
        """True would mean some token pattern matches the empty string."""
        return self.states[self.start].accept

    def transition(self, state: int, c: str) -> Optional[int]:
        return self.states[state].transitions.get(c)

    def accepts(self, word: str) -> Optional[TokenKind]:
        """Run the DFA over the whole of word; return the recognized kind or None."""
        state = self.start
        for c in word:
            state = self.transition(state, c)
            if state is None:
                return None
        return self.states[state].token

    def signature(self) -> Tuple[Tuple[TokenKind, ...], ...]:
        """Per-state candidate kinds, in state order. Two constructions from the
           same NFA produce the same signature."""
        return tuple(s.tokens for s in self.states)

    # ==================
    # Export
    # ==================

    def todict(self) -> dict:
        """Dictionary form of the DFA for export to JSON or an external renderer."""
        return {
            "start": self.start,
            "states": len(self.states),
            "transitions": {s.id: dict(s.transitions) for s in self.states if s.transitions},
            "accept": {s.id: [k.name for k in s.tokens] for s in self.states if s.accept},
            "nfa_states": {s.id: list(s.nfa_states) for s in self.states},
        }

    def view(self, show_nfa_states=False) -> 'graphviz.Digraph':
        """Creates a 'graphviz.Digraph' object to view the DFA. Will automatically display in Jupyter.
           Parallel edges are merged and their characters compressed into ranges.

            :param show_nfa_states: also print the NFA state set each DFA state stands for
        """
        import graphviz
        g = rendering.new_digraph('DFA')
        for s in self.states:
            label = str(s.id)
            if s.accept:
                label += "\n" + '|'.join(sorted({k.name for k in s.tokens}))
            if show_nfa_states:
                label += "\n{" + ','.join(str(n) for n in s.nfa_states) + "}"
            rendering.add_state(g, str(s.id), label, s.accept, s.id == self.start)
        for s in self.states:
            grouped_targets = defaultdict(set)
            for c, target in s.transitions.items():
                grouped_targets[target].add(c)
            for target, chars in grouped_targets.items():
                g.edge(str(s.id), str(target), label=graphviz.nohtml(util.char_ranges(chars)))
        return g

    def __len__(self):
        """Return the number of states."""
        return len(self.states)

    def __str__(self):
        """An AT&T-like listing: 'source target char' per transition, then
           'state kinds' per accepting state."""
        st = ""
        for s in self.states:
            for c, target in s.transitions.items():
                st += '{}\t{}\t{}\n'.format(s.id, target, util.printable(c))
        for s in self.states:
            if s.accept:
                st += '{}\t{}\n'.format(s.id, ','.join(k.name for k in s.tokens))
        return st


def subset_construction(nfa: NFA, alphabet: Sequence[str] = ASCII) -> DFA:
    """Powerset construction of a DFA from nfa over the given alphabet.

       DFA states are keyed by the sorted tuple of the NFA states in their
       closure, so equal subsets always collapse into one DFA state. States
       are numbered in the order they are discovered (FIFO worklist, alphabet
       order), which makes the result reproducible."""
    nfa.verify()

    def _accept_kinds(stateset: Tuple[int, ...]) -> Tuple[TokenKind, ...]:
        return tuple(nfa.accept_tokens[s] for s in stateset if s in nfa.accept_tokens)

    logger.info(f"Building DFA from NFA with {len(nfa)} states over {len(alphabet)} symbols")
    first = tuple(sorted(nfa.epsilon_closure([nfa.start])))
    states = [DFAState(0, first, _accept_kinds(first))]
    statesets = {first: 0}
    if states[0].accept:
        logger.warning(f"DFA start state is accepting for {[k.name for k in states[0].tokens]}: "
                       "some token pattern matches the empty string")

    Q = deque([first])
    while Q:
        current = Q.popleft()
        source = states[statesets[current]]
        for c in alphabet:
            moved = nfa.move(current, c)
            if not moved:
                continue
            target = tuple(sorted(nfa.epsilon_closure(moved)))
            if target not in statesets:
                newstate = DFAState(len(states), target, _accept_kinds(target))
                statesets[target] = newstate.id
                states.append(newstate)
                Q.append(target)
                logger.debug(f"DFA state {newstate.id} from state {source.id} on {c!r}: "
                             f"NFA states {list(target)}, tokens {[k.name for k in newstate.tokens]}")
            source.transitions[c] = statesets[target]

    dfa = DFA(states, alphabet)
    logger.info(f"Built DFA with {len(dfa)} states, accepting states {dfa.accept_states}")
    return dfa
