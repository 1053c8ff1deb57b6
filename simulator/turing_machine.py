from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from simulator.errors import InvalidConfiguration, PreconditionFailed
from simulator.state import State, Transition
from simulator.tape import Tape


class StepStatus(Enum):
    CONTINUED = "continued"
    HALTED = "halted"
    REFUSED = "refused"


@dataclass
class StepResult:
    """Outcome of a single step. A refused step carries its PreconditionFailed in `error`."""
    status: StepStatus
    transition: Optional[Transition] = None
    symbol: Optional[int] = None
    wrapped: bool = False
    error: Optional[PreconditionFailed] = None

    @property
    def halted(self) -> bool:
        return self.status is StepStatus.HALTED

    def trace_entry(self, step, state=None) -> dict:
        if self.transition is None:
            return {"step": step, "state": getattr(state, "name", None), "input": self.symbol, "halt": True}
        return {
            "step": step,
            "origin": self.transition.origin.name,
            "input": self.symbol,
            "destination": self.transition.destination.name,
            "output": self.transition.output,
            "move": self.transition.move.value,
            "wrapped": self.wrapped,
        }


class TuringMachine:
    """
    The execution engine: one tape, a graph of states, one transition per step.

    Halting is sticky. Once a step found no transition, every further step is
    refused until reset() is called.
    """

    def __init__(self, tape: Optional[Tape] = None, trace: Optional[Callable[[dict], None]] = None):
        self.tape = tape
        self.states = []
        self.current_state: Optional[State] = None
        self.halted = False
        self.steps = 0
        self.trace = trace

    # === State graph ===
    def add_state(self, state, make_current=False):
        """
        Add a state. The first state added becomes the current one.

        State ids are unique per machine: a different state reusing a
        registered id raises InvalidConfiguration.
        """
        if not any(existing is state for existing in self.states):
            clash = self.state_by_id(state.id)
            if clash is not None:
                raise InvalidConfiguration(f"State id {state.id} is already used by {clash!r}.")
            self.states.append(state)
        if make_current or self.current_state is None:
            self.current_state = state

    def create_state(self, name=None, accepting=False) -> State:
        state_id = max((s.id for s in self.states), default=-1) + 1
        state = State(state_id, name, accepting=accepting)
        self.add_state(state)
        return state

    def remove_state(self, state) -> bool:
        """Remove a state and every transition of the remaining states leading to it."""
        for idx, existing in enumerate(self.states):
            if existing is state:
                del self.states[idx]
                break
        else:
            return False

        for remaining in self.states:
            remaining.remove_transitions_to(state)
        if self.current_state is state:
            self.current_state = self.states[0] if self.states else None
        return True

    def add_transition(self, *transitions):
        """Transitions already live on their origin; this only adds both endpoints to the machine."""
        for transition in transitions:
            if transition is None:
                continue
            self.add_state(transition.origin)
            self.add_state(transition.destination)

    def state(self, index) -> State:
        return self.states[index]

    def state_by_id(self, state_id) -> Optional[State]:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    # === Execution ===
    def check_ready(self) -> Optional[PreconditionFailed]:
        if self.tape is None:
            return PreconditionFailed("Tape is missing.")
        if not self.states or self.current_state is None:
            return PreconditionFailed("Machine is currently not in any state.")
        if self.halted:
            return PreconditionFailed(
                "The machine has already halted. Call reset() first to continue anyway."
            )
        return None

    def step(self) -> StepResult:
        error = self.check_ready()
        if error is not None:
            return StepResult(StepStatus.REFUSED, error=error)

        symbol = self.tape.read()
        transition = self.current_state.transition_for(symbol)
        if transition is None:
            self.halted = True
            result = StepResult(StepStatus.HALTED, symbol=symbol)
            if self.trace is not None:
                self.trace(result.trace_entry(self.steps, self.current_state))
            return result

        self.tape.write(transition.output)
        wrapped = self.tape.move(transition.move)
        self.current_state = transition.destination
        self.steps += 1

        result = StepResult(StepStatus.CONTINUED, transition, symbol, wrapped)
        if self.trace is not None:
            self.trace(result.trace_entry(self.steps))
        return result

    def run(self, max_steps=None) -> int:
        """Step without loop supervision until halt, refusal or budget. Returns fired transitions."""
        steps = 0
        while max_steps is None or steps < max_steps:
            result = self.step()
            if result.status is not StepStatus.CONTINUED:
                break
            steps += 1
        return steps

    def reset(self):
        """Clear the halted flag so stepping may continue."""
        self.halted = False

    def visualize(self, radius=10) -> str:
        """A small window around the head, with a caret under the current cell."""
        if self.tape is None:
            return "<no tape>"
        tape_str = ""
        head_str = ""
        for position, value in self.tape.window(radius):
            cell = "_" if value is None else str(value)
            tape_str += f"{cell} "
            marker = "^" if position == self.tape.head else " "
            head_str += marker.ljust(len(cell)) + " "
        state_name = self.current_state.name if self.current_state else None
        return f"{tape_str.rstrip()}\n{head_str.rstrip()}\nState: {state_name}, Halted: {self.halted}"
