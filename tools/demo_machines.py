# tools/demo_machines.py

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from simulator.acceptor import Acceptor
from simulator.description import from_text
from simulator.state import MoveAction, State, Transition
from simulator.tape import Tape
from simulator.translation import SymbolTable, TranslatedTape
from simulator.turing_machine import TuringMachine


@dataclass
class Demo:
    name: str
    summary: str
    build: Callable[[], Tuple[TuringMachine, Optional[SymbolTable]]]


def build_unary_eraser():
    """Turns 1s into 0s, flips the trailing 0 and halts after wrapping to the start."""
    tape = Tape(5, 0, 1, 1, 1, 1, 0)
    machine = TuringMachine(tape)
    erase = State(1, "erase")
    done = State(2, "done")
    machine.add_transition(
        Transition(erase, erase, 1, 0, MoveAction.RIGHT),
        Transition(erase, done, 0, 1, MoveAction.RIGHT),
    )
    return machine, None


def build_ring_walker():
    """Copies every cell onto itself while walking right; the ring brings it back home."""
    tape = Tape(4, 0, None, 1, 2, None)
    machine = TuringMachine(tape)
    walker = State(0, "walk")
    for symbol in (None, 1, 2):
        Transition(walker, walker, symbol, symbol, MoveAction.RIGHT)
    machine.add_state(walker)
    return machine, None


def build_fill_and_wrap():
    """Flips the 0 under the head to 1, then paints 2s over empty cells until it wraps onto a 1."""
    tape = Tape(15, 7, None, None, 1, 1, 1, 1, 1, 0)
    machine = TuringMachine(tape)
    first = State(0)
    second = State(1)
    machine.add_transition(
        Transition(first, first, 1, 0, MoveAction.RIGHT),
        Transition(first, second, 0, 1, MoveAction.RIGHT),
        Transition(second, second, None, 2, MoveAction.RIGHT),
    )
    return machine, None


def build_busy_beaver_2():
    """The two-state busy beaver champion, leaves four 1s behind."""
    return from_text("1RB1LB_1LA1RZ", tape=Tape(16, 8)), None


def build_even_a_acceptor(word="aaaa"):
    """Accepts words with an even number of a's."""
    table = SymbolTable.from_string("a")
    tape = TranslatedTape.from_text(word, table, capacity=len(word) + 1).tape
    machine = Acceptor(tape)
    a = table.encode("a")
    even = State(0, "even", accepting=True)
    odd = State(1, "odd")
    machine.add_transition(
        Transition(even, odd, a, a, MoveAction.RIGHT),
        Transition(odd, even, a, a, MoveAction.RIGHT),
    )
    return machine, table


DEMOS = {
    demo.name: demo
    for demo in (
        Demo("eraser", "Unary eraser on a 5 cell ring (halts)", build_unary_eraser),
        Demo("walker", "Identity walker on a 4 cell ring (loops)", build_ring_walker),
        Demo("painter", "Fill-and-wrap painter on a 15 cell ring (halts)", build_fill_and_wrap),
        Demo("bb2", "2-state busy beaver 1RB1LB_1LA1RZ", build_busy_beaver_2),
        Demo("even", "Acceptor for an even number of a's", build_even_a_acceptor),
    )
}
