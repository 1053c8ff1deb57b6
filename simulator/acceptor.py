from typing import Optional

from simulator.turing_machine import StepResult, TuringMachine


class Acceptor(TuringMachine):
    """
    A machine that accepts or rejects its input.

    When it halts, the input counts as accepted if the state it halted in is
    marked accepting. A machine that loops never accepts.
    """

    def __init__(self, tape=None, trace=None):
        super().__init__(tape, trace)
        self.verdict: Optional[bool] = None

    @property
    def input_accepted(self) -> bool:
        return bool(self.verdict)

    def step(self) -> StepResult:
        result = super().step()
        if result.halted:
            self.verdict = self.current_state.accepting
        return result

    def reset(self):
        super().reset()
        self.verdict = None
