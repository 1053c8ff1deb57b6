"""
Machine descriptions.

Two formats are understood, both for machines over symbols 0..k-1 that halt
by missing a transition:

* standard text notation, one "_" separated row per state, three characters
  per symbol read: written symbol, direction, next state letter. "---" (or a
  "-"/"Z" next state) is the halting entry. Example: "1RB1LB_1LA---".
* ruleset lists as stored by the ruleset generator, state-major, one
  [new_symbol, dir_bit, new_state] triple per (state, symbol) with dir_bit 0
  for left and [-1, 0, -1] for halt.

The empty marker on the tape is read as the `blank` symbol, so these machines
run on sparse tapes without pre-filling them.
"""

from simulator.state import MoveAction, State, Transition
from simulator.turing_machine import TuringMachine

HALT_RULE = [-1, 0, -1]
HALT_TEXT = "---"


def state_letter(index):
    return chr(ord("A") + index)


def _inputs_for(symbol, blank):
    return {symbol, None} if symbol == blank else {symbol}


def _new_machine(num_states, tape):
    machine = TuringMachine(tape)
    states = [State(idx, state_letter(idx)) for idx in range(num_states)]
    for state in states:
        machine.add_state(state)
    return machine, states


def from_text(text, tape=None, blank=0) -> TuringMachine:
    rows = text.strip().split("_")
    num_symbols = len(rows[0]) // 3
    if num_symbols == 0 or not all(len(row) == 3 * num_symbols for row in rows):
        raise ValueError(f"Not in standard TM text format: {text!r}")

    machine, states = _new_machine(len(rows), tape)
    for origin, row in enumerate(rows):
        for symbol in range(num_symbols):
            write, direction, target = row[3 * symbol:3 * symbol + 3]
            if target == "-" or write == "-":
                continue
            target_idx = ord(target) - ord("A")
            if target == "Z" and target_idx >= len(states):
                continue
            if not 0 <= target_idx < len(states):
                raise ValueError(f"Unknown state {target!r} in {text!r}")
            Transition(
                states[origin],
                states[target_idx],
                _inputs_for(symbol, blank),
                int(write),
                MoveAction.from_letter(direction),
            )
    return machine


def _ordered_states(machine):
    return sorted(machine.states, key=lambda state: state.id)


def _symbol_count(machine):
    symbols = [
        symbol
        for state in machine.states
        for transition in state.transitions
        for symbol in transition.inputs
        if symbol is not None
    ]
    return max(symbols, default=0) + 1


def to_text(machine, num_symbols=None) -> str:
    num_symbols = num_symbols or _symbol_count(machine)
    states = _ordered_states(machine)
    index = {id(state): idx for idx, state in enumerate(states)}

    rows = []
    for state in states:
        row = ""
        for symbol in range(num_symbols):
            transition = state.transition_for(symbol)
            if transition is None:
                row += HALT_TEXT
                continue
            if transition.move is MoveAction.NONE:
                raise ValueError(f"{transition!r} does not move and has no text notation.")
            row += f"{transition.output}{transition.move.value}{state_letter(index[id(transition.destination)])}"
        rows.append(row)
    return "_".join(rows)


def from_rules(rules, num_symbols=2, tape=None, blank=0) -> TuringMachine:
    if len(rules) % num_symbols:
        raise ValueError(f"{len(rules)} rules do not fit {num_symbols} symbols per state.")
    num_states = len(rules) // num_symbols

    machine, states = _new_machine(num_states, tape)
    for rule_idx, rule in enumerate(rules):
        if list(rule) == HALT_RULE:
            continue
        new_symbol, dir_bit, new_state = rule
        if not 0 <= new_state < num_states:
            raise ValueError(f"Rule {rule_idx} points to unknown state {new_state}.")
        origin, symbol = divmod(rule_idx, num_symbols)
        Transition(
            states[origin],
            states[new_state],
            _inputs_for(symbol, blank),
            new_symbol,
            MoveAction.LEFT if dir_bit == 0 else MoveAction.RIGHT,
        )
    return machine


def to_rules(machine, num_symbols=None):
    num_symbols = num_symbols or _symbol_count(machine)
    states = _ordered_states(machine)
    index = {id(state): idx for idx, state in enumerate(states)}

    arr = []
    for state in states:
        for symbol in range(num_symbols):
            transition = state.transition_for(symbol)
            if transition is None:
                arr.append(list(HALT_RULE))
                continue
            if transition.move is MoveAction.NONE:
                raise ValueError(f"{transition!r} does not move and has no ruleset encoding.")
            dir_bit = 0 if transition.move is MoveAction.LEFT else 1
            arr.append([transition.output, dir_bit, index[id(transition.destination)]])
    return arr
