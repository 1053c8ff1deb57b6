# tools/replay.py

import time

from rich.console import Console
from rich.prompt import Prompt

from simulator.acceptor import Acceptor
from simulator.supervisor import Supervisor, SupervisorResult
from simulator.translation import TranslatedTape

RESULT_COLORS = {
    SupervisorResult.HALTS: "green",
    SupervisorResult.LOOPS: "yellow",
    SupervisorResult.RUNNING: "cyan",
}


def render_configuration(machine, table=None):
    tape = TranslatedTape(machine.tape, table).render() if table is not None else machine.tape.render()
    return f"{machine.current_state!r} {tape}"


def print_verdict(console, supervisor):
    color = RESULT_COLORS[supervisor.result]
    console.print(f"[bold {color}]{supervisor.result.value}[/bold {color}] {supervisor.describe()}")
    machine = supervisor.machine
    if isinstance(machine, Acceptor) and supervisor.result is SupervisorResult.HALTS:
        verdict = "[green]accepted[/green]" if machine.input_accepted else "[red]rejected[/red]"
        console.print(f"Input {verdict} in state {machine.current_state!r}.")


def replay(supervisor: Supervisor, console=None, table=None, delay=0.25, manual=False,
           max_steps=None, wait=None):
    """
    Show a supervised run one configuration at a time.

    Pacing is a fixed delay, or with `manual` a keypress (Enter) per step.
    Pacing never changes the result.
    """
    console = console or Console()
    if wait is None:
        wait = lambda: Prompt.ask("[dim]Enter for next step[/dim]", default="", show_default=False,
                                  console=console)

    console.print(render_configuration(supervisor.machine, table), markup=False, highlight=False)
    while not supervisor.finished:
        if max_steps is not None and supervisor.steps >= max_steps:
            break
        if manual:
            wait()
        elif delay:
            time.sleep(delay)

        result = supervisor.run_single_iteration()
        if result is SupervisorResult.HALTS:
            break
        console.print(f"[cyan]Step {supervisor.steps}[/cyan]")
        console.print(render_configuration(supervisor.machine, table), markup=False, highlight=False)

    print_verdict(console, supervisor)
    return supervisor.result


def run_quietly(supervisor: Supervisor, console=None, table=None, max_steps=None):
    console = console or Console()
    with console.status("[cyan]Supervising...[/cyan]"):
        supervisor.run(max_steps=max_steps)
    console.print(render_configuration(supervisor.machine, table), markup=False, highlight=False)
    print_verdict(console, supervisor)
    return supervisor.result
