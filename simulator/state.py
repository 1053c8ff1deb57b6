from enum import Enum
from typing import List, Optional


class MoveAction(Enum):
    """Where the head goes after a transition wrote its output."""
    LEFT = "L"
    RIGHT = "R"
    NONE = "N"

    @classmethod
    def from_letter(cls, letter):
        try:
            return cls(letter.upper())
        except ValueError:
            raise ValueError(f"Unknown move direction: {letter!r}") from None


def _as_input_set(inputs):
    if isinstance(inputs, (set, frozenset, list, tuple)):
        return frozenset(inputs)
    return frozenset([inputs])


class State:
    """
    A machine state and its outgoing transitions.

    States are compared by identity; the id is what ends up in configuration
    fingerprints, so it should be unique within a machine. An accepting state
    only matters to the Acceptor.
    """

    def __init__(self, state_id=0, name=None, accepting=False):
        self.id = state_id
        self.name = name if name is not None else f"q{state_id}"
        self.accepting = accepting
        self.transitions: List["Transition"] = []

    def add_transition(self, transition) -> bool:
        """Register a transition. Returns False if this exact transition is already registered."""
        if any(existing is transition for existing in self.transitions):
            return False
        self.transitions.append(transition)
        return True

    def remove_transition(self, transition) -> bool:
        for idx, existing in enumerate(self.transitions):
            if existing is transition:
                del self.transitions[idx]
                return True
        return False

    def remove_transitions_to(self, state):
        self.transitions = [t for t in self.transitions if t.destination is not state]

    def transition_for(self, symbol) -> Optional["Transition"]:
        """First transition accepting the symbol, or None, which means halt."""
        for transition in self.transitions:
            if transition.accepts(symbol):
                return transition
        return None

    def __repr__(self):
        return f"({self.name}::{self.id})"


class Transition:
    """
    An immutable edge between two states.

    Building a transition registers it on its origin state. The input set may
    contain None, which matches a tape cell holding no value.
    """

    __slots__ = ("_origin", "_destination", "_inputs", "_output", "_move")

    def __init__(self, origin, destination, inputs=frozenset(), output=0, move=MoveAction.NONE):
        self._origin = origin
        self._destination = destination
        self._inputs = _as_input_set(inputs)
        self._output = output
        self._move = move
        origin.add_transition(self)

    @property
    def origin(self) -> State:
        return self._origin

    @property
    def destination(self) -> State:
        return self._destination

    @property
    def inputs(self) -> frozenset:
        return self._inputs

    @property
    def output(self) -> Optional[int]:
        return self._output

    @property
    def move(self) -> MoveAction:
        return self._move

    def accepts(self, symbol) -> bool:
        return symbol in self._inputs

    def __repr__(self):
        inputs = ",".join("_" if s is None else str(s) for s in sorted(self._inputs, key=_symbol_order))
        output = "_" if self._output is None else self._output
        return f"{self._origin!r} --{{{inputs}}}/{output},{self._move.value}--> {self._destination!r}"


def _symbol_order(symbol):
    return (symbol is not None, symbol if symbol is not None else 0)
