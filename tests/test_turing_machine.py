import pytest

from simulator.errors import InvalidConfiguration, PreconditionFailed
from simulator.state import MoveAction, State, Transition
from simulator.supervisor import Supervisor, SupervisorResult
from simulator.tape import Tape
from simulator.turing_machine import StepStatus, TuringMachine


@pytest.fixture()
def eraser() -> TuringMachine:
    machine = TuringMachine(Tape(5, 0, 1, 1, 1, 1, 0))
    erase, done = State(1), State(2)
    machine.add_transition(
        Transition(erase, erase, 1, 0, MoveAction.RIGHT),
        Transition(erase, done, 0, 1, MoveAction.RIGHT),
    )
    return machine


def test_first_added_state_becomes_current(eraser: TuringMachine) -> None:
    assert eraser.current_state.id == 1
    assert [s.id for s in eraser.states] == [1, 2]


def test_step_without_tape_is_refused() -> None:
    machine = TuringMachine()
    machine.create_state()

    result = machine.step()

    assert result.status is StepStatus.REFUSED
    assert isinstance(result.error, PreconditionFailed)


def test_step_without_states_is_refused() -> None:
    result = TuringMachine(Tape(3)).step()

    assert result.status is StepStatus.REFUSED
    assert "not in any state" in str(result.error)


def test_run_to_halt(eraser: TuringMachine) -> None:
    assert eraser.run() == 5
    assert eraser.halted
    assert eraser.tape.to_list() == [0, 0, 0, 0, 1]
    assert eraser.current_state.id == 2


def test_halting_step_mutates_nothing(eraser: TuringMachine) -> None:
    eraser.run()
    eraser.reset()
    before = (eraser.tape.fingerprint(), eraser.current_state)

    result = eraser.step()

    assert result.halted
    assert result.symbol == 0
    assert (eraser.tape.fingerprint(), eraser.current_state) == before


def test_halt_is_sticky_until_reset(eraser: TuringMachine) -> None:
    eraser.run()

    refused = eraser.step()
    assert refused.status is StepStatus.REFUSED
    assert "already halted" in str(refused.error)

    eraser.reset()
    assert eraser.step().status is StepStatus.HALTED


def test_step_reports_transition_and_wrap(eraser: TuringMachine) -> None:
    results = [eraser.step() for _ in range(5)]

    assert [r.status for r in results] == [StepStatus.CONTINUED] * 5
    assert [r.wrapped for r in results] == [False, False, False, False, True]
    assert results[-1].transition.destination.id == 2
    assert results[0].symbol == 1


def test_run_respects_budget(eraser: TuringMachine) -> None:
    assert eraser.run(max_steps=2) == 2
    assert not eraser.halted
    assert eraser.tape.head == 2


def test_trace_receives_every_step(eraser: TuringMachine) -> None:
    entries = []
    eraser.trace = entries.append

    eraser.run()

    assert len(entries) == 6
    assert entries[0] == {
        "step": 1,
        "origin": "q1",
        "input": 1,
        "destination": "q1",
        "output": 0,
        "move": "R",
        "wrapped": False,
    }
    assert entries[-1]["halt"] is True


def test_remove_state_cascades() -> None:
    machine = TuringMachine(Tape(3))
    a, b, c = State(0), State(1), State(2)
    machine.add_transition(
        Transition(a, b, 0, 0, MoveAction.RIGHT),
        Transition(c, b, 1, 1, MoveAction.LEFT),
        Transition(c, a, 2, 2, MoveAction.LEFT),
        Transition(b, c, None, 0, MoveAction.RIGHT),
    )

    assert machine.remove_state(b) is True
    assert machine.remove_state(b) is False
    for state in machine.states:
        assert all(t.destination is not b for t in state.transitions)
    assert len(c.transitions) == 1


def test_removing_current_state_repoints_current() -> None:
    machine = TuringMachine(Tape(3))
    first = machine.create_state()
    second = machine.create_state()

    machine.remove_state(first)
    assert machine.current_state is second

    machine.remove_state(second)
    assert machine.current_state is None


def test_create_state_assigns_fresh_ids() -> None:
    machine = TuringMachine()
    machine.add_state(State(4))

    created = machine.create_state("scan")

    assert created.id == 5
    assert created.name == "scan"
    assert machine.state_by_id(5) is created
    assert machine.state(0).id == 4
    assert machine.state_by_id(99) is None


def test_add_state_can_switch_current() -> None:
    machine = TuringMachine()
    a, b = State(0), State(1)
    machine.add_state(a)
    machine.add_state(b, make_current=True)
    machine.add_state(b)

    assert machine.current_state is b
    assert len(machine.states) == 2


def test_visualize_shows_caret_under_head(eraser: TuringMachine) -> None:
    lines = eraser.visualize(radius=1).splitlines()

    assert lines[0] == "0 1 1"
    assert lines[1] == "  ^"
    assert lines[2] == "State: q1, Halted: False"


def test_state_ids_are_unique_per_machine() -> None:
    machine = TuringMachine(Tape(3))
    first, second = State(), State()
    machine.add_state(first)

    with pytest.raises(InvalidConfiguration):
        machine.add_state(second)
    with pytest.raises(InvalidConfiguration):
        machine.add_transition(Transition(first, State(0, "other"), None, 1, MoveAction.RIGHT))
    assert machine.states == [first]


def test_distinct_ids_let_a_halting_machine_halt() -> None:
    machine = TuringMachine(Tape(3))
    a, b = State(0), State(1)
    machine.add_transition(
        Transition(a, b, None, None, MoveAction.NONE),
        Transition(b, a, None, 1, MoveAction.NONE),
    )

    assert Supervisor(machine).run() is SupervisorResult.HALTS
    assert machine.steps == 2
