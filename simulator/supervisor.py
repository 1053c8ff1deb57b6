"""
Loop supervision for a TuringMachine.

After every step the supervisor fingerprints the whole configuration, that is
the current state id, the head position and the full tape. A fingerprint seen
before means the machine re-entered a configuration it already left once, so
being deterministic it will cycle forever.
"""

from enum import Enum
from typing import Optional

from simulator.errors import PreconditionFailed
from simulator.turing_machine import StepStatus, TuringMachine

PRINT_LOOP = "LOOPED. Does not halt."
PRINT_HALT = "HALTED."

# Above this capacity the supervisor always records compact fingerprints.
EXACT_FINGERPRINT_LIMIT = 4096


class SupervisorResult(Enum):
    RUNNING = "RUNNING"
    HALTS = "HALTS"
    LOOPS = "LOOPS"


def configuration_fingerprint(machine: TuringMachine, compact=False) -> str:
    """"<state-id>;<head>;<f0>;<f1>;..." for the machine's current configuration."""
    tape = machine.tape.compact_fingerprint() if compact else machine.tape.fingerprint()
    return f"{machine.current_state.id};{tape}"


class Supervisor:
    """
    Drives a machine until it halts or revisits a configuration.

    `compact` switches to run-length encoded fingerprints, which keeps memory
    proportional to the visited cells. Tapes larger than
    EXACT_FINGERPRINT_LIMIT are always recorded compactly.
    """

    def __init__(self, machine: TuringMachine, compact=False):
        error = machine.check_ready()
        attached = machine.tape is not None and machine.current_state is not None
        if error is not None and not (machine.halted and attached):
            raise error

        self.machine = machine
        self.compact = compact or machine.tape.capacity > EXACT_FINGERPRINT_LIMIT
        self.finished = False
        self.result = SupervisorResult.RUNNING
        self.steps = 0
        self.loop_entry_step: Optional[int] = None
        # fingerprint -> step at which it was first seen
        self._seen = {self._fingerprint(): 0}

    def _fingerprint(self) -> str:
        return configuration_fingerprint(self.machine, self.compact)

    @property
    def seen_configurations(self) -> int:
        return len(self._seen)

    @property
    def loop_period(self) -> Optional[int]:
        if self.loop_entry_step is None:
            return None
        return self.steps - self.loop_entry_step

    def _finish(self, result) -> SupervisorResult:
        self.finished = True
        self.result = result
        return result

    def run_single_iteration(self) -> SupervisorResult:
        if self.finished:
            return self.result

        outcome = self.machine.step()
        if outcome.status is StepStatus.HALTED:
            return self._finish(SupervisorResult.HALTS)
        if outcome.status is StepStatus.REFUSED:
            if self.machine.halted:
                return self._finish(SupervisorResult.HALTS)
            raise outcome.error or PreconditionFailed("Step was refused.")

        self.steps += 1
        fingerprint = self._fingerprint()
        first_seen = self._seen.get(fingerprint)
        if first_seen is not None:
            self.loop_entry_step = first_seen
            return self._finish(SupervisorResult.LOOPS)

        self._seen[fingerprint] = self.steps
        return SupervisorResult.RUNNING

    def run(self, max_steps=None) -> SupervisorResult:
        """
        Iterate until HALTS or LOOPS.

        With a step budget the run may also stop with RUNNING, meaning the
        machine is still undecided after `max_steps` further iterations.
        """
        iterations = 0
        while not self.finished:
            if max_steps is not None and iterations >= max_steps:
                break
            self.run_single_iteration()
            iterations += 1
        return self.result

    def describe(self) -> str:
        if self.result is SupervisorResult.LOOPS:
            return f"{PRINT_LOOP} Entered loop at step {self.loop_entry_step}, period {self.loop_period}."
        if self.result is SupervisorResult.HALTS:
            return f"{PRINT_HALT} After {self.steps} steps."
        return f"Still running after {self.steps} steps."
