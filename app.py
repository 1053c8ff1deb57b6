# app.py

import argparse
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt, IntPrompt, Confirm
from rich.table import Table

from config.config_loader import DEFAULT_CONFIG_PATH, load_config, save_config
from logger.logger import JSONLogger
from simulator.description import from_text
from simulator.supervisor import Supervisor
from simulator.tape import Tape
from tools.demo_machines import DEMOS
from tools.replay import replay, run_quietly
from tools.ruleset_generator import case_name, generate_all_rulesets, write_pool
from tools.simulate_pool import load_checkpoint, load_machine_pool, simulate_pool, summarize_results

console = Console()


# === Utilities ===
def load_runtime_config(path=DEFAULT_CONFIG_PATH):
    try:
        return load_config(path, verbose=False)
    except FileNotFoundError:
        console.print(f"[red]Error: {path} not found![/red]")
        sys.exit(1)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Error: invalid configuration: {e}[/red]")
        sys.exit(1)


def make_logger(config):
    return JSONLogger(config["output_directory"], config["log_file_prefix"])


def show_main_menu():
    console.print("\n[bold cyan]Turing Machine Loop Supervisor[/bold cyan]")
    console.print("[1] Run Demo Machine")
    console.print("[2] Step Through Demo Machine")
    console.print("[3] Run Machine from Notation")
    console.print("[4] Generate Rule Sets")
    console.print("[5] Simulate Machine Pool")
    console.print("[6] Edit Config")
    console.print("[7] Exit")


def supervise(machine, config, name, table=None, step_through=False):
    """Run one machine under loop supervision and log the outcome."""
    logger = make_logger(config)
    if config["trace_steps"]:
        machine.trace = logger.log_trace

    supervisor = Supervisor(machine, compact=config["compact_fingerprints"])
    if step_through:
        replay(
            supervisor,
            console,
            table=table,
            delay=config["step_delay"],
            manual=config["step_mode"] == "manual",
            max_steps=config["max_steps"],
        )
    else:
        run_quietly(supervisor, console, table=table, max_steps=config["max_steps"])

    logger.log_summary([{
        "machine": name,
        "result": supervisor.result.value,
        "steps": supervisor.steps,
        "loop_entry_step": supervisor.loop_entry_step,
        "loop_period": supervisor.loop_period,
        "configurations": supervisor.seen_configurations,
        "timestamp": datetime.now().isoformat()
    }])
    return supervisor


def choose_demo():
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", justify="center")
    table.add_column("Description")
    for demo in DEMOS.values():
        table.add_row(demo.name, demo.summary)
    console.print(table)
    return Prompt.ask("Demo", choices=list(DEMOS), default="eraser")


def handle_demo(config, step_through=False):
    console.print("\n[bold]Demo Machines[/bold]")
    demo = DEMOS[choose_demo()]
    machine, table = demo.build()
    supervise(machine, config, demo.name, table=table, step_through=step_through)


def handle_notation(config):
    console.print("\n[bold]Run Machine from Notation[/bold]")
    text = Prompt.ask("Standard notation (e.g., 1RB1LB_1LA1RZ)", default="1RB1LB_1LA1RZ")
    tape_size = IntPrompt.ask("Tape Size", default=config["tape_size"])
    head = IntPrompt.ask("Head Position", default=min(config["head_position"], tape_size - 1))
    step_through = Confirm.ask("Step through?", default=False)
    try:
        machine = from_text(text, tape=Tape(tape_size, head))
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return
    supervise(machine, config, text, step_through=step_through)


def handle_generate(config):
    console.print("\n[bold]Generate Rule Sets[/bold]")

    states = IntPrompt.ask("Number of States", default=config["states"])
    symbols = IntPrompt.ask("Number of Symbols", default=config["symbols"])

    console.print(f"[cyan]Generating rule sets for {states} states, {symbols} symbols...[/cyan]")
    generate_all_rulesets(states, symbols, root=Path(config["rulesets_directory"]))

    # After generation, auto-create a pool
    try:
        pool_file = write_pool(states, symbols, root=Path(config["rulesets_directory"]),
                               pools_root=Path(config["pools_directory"]))
        console.print(f"[green]Auto-created machine pool at {pool_file}[/green]")
    except FileNotFoundError:
        console.print(f"[red]Warning: Index file not found, pool not created automatically.[/red]")


def detect_pools(config):
    pool_dir = Path(config["pools_directory"])
    results_dir = Path(config["results_directory"])
    pool_dir.mkdir(parents=True, exist_ok=True)

    pools = []
    for pool_file in sorted(pool_dir.glob("*.txt")):
        pool_name = pool_file.stem
        checkpoint = results_dir / pool_name / "results_checkpoint.json"
        results_file = results_dir / pool_name / "results.jsonl"

        if not checkpoint.exists() and not results_file.exists():
            status = "Available"
        elif checkpoint.exists():
            completed_machines = load_checkpoint(checkpoint)
            if len(completed_machines) >= len(load_machine_pool(pool_file)):
                status = "Completed"
            else:
                status = "In Progress"
        else:
            status = "In Progress"

        pools.append((pool_name, status))

    return pools


def show_summary(results):
    table = Table(title="Pool Summary", show_header=True, header_style="bold magenta")
    table.add_column("Result", justify="center")
    table.add_column("Machines", justify="right")
    table.add_column("Mean Steps", justify="right")
    table.add_column("Median Steps", justify="right")
    table.add_column("Max Steps", justify="right")
    for result, stats in summarize_results(results).items():
        table.add_row(result, f"{stats['count']:,}", f"{stats['mean_steps']:.1f}",
                      f"{stats['median_steps']:.1f}", f"{stats['max_steps']:,}")
    console.print(table)


def handle_simulate_pool(config):
    console.print("\n[bold]Simulate Machine Pool[/bold]")

    pools = detect_pools(config)
    if not pools:
        console.print("[red]No pools found. Please generate rule sets first.[/red]")
        return

    console.print("\n[bold cyan]Available Pools:[/bold cyan]\n")
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Index", justify="center")
    table.add_column("Pool Name", justify="center")
    table.add_column("Status", justify="center")

    for idx, (pool_name, status) in enumerate(pools):
        color = {
            "Available": "cyan",
            "In Progress": "yellow",
            "Completed": "green"
        }.get(status, "white")
        table.add_row(str(idx), pool_name, f"[{color}]{status}[/{color}]")

    console.print(table)

    idx_choice = IntPrompt.ask("\nChoose a pool by Index")
    if idx_choice < 0 or idx_choice >= len(pools):
        console.print("[red]Invalid choice. Exiting.[/red]")
        return

    selected_pool, _ = pools[idx_choice]
    default_case = selected_pool if selected_pool.startswith("s") else case_name(config["states"], config["symbols"])
    case_folder = Prompt.ask("Case folder (e.g., s2_k2)", default=default_case)

    console.print(f"[cyan]Simulating pool {selected_pool}...[/cyan]")
    results = simulate_pool(
        str(Path(config["pools_directory"]) / f"{selected_pool}.txt"),
        case_folder,
        "results",
        batch_size=config["batch_size"],
        max_steps=config["max_steps"],
        tape_size=config["tape_size"],
        compact=config["compact_fingerprints"],
        rulesets_root=Path(config["rulesets_directory"]),
        results_root=Path(config["results_directory"]),
        long_runners_pool=Path(config["pools_directory"]) / "long_runners.txt",
        logger=make_logger(config)
    )
    show_summary(results)
    console.print("[green]Machine pool simulation completed![/green]")


def handle_edit_config(config, path=DEFAULT_CONFIG_PATH):
    console.print("\n[bold]Edit Configuration[/bold]")

    tape_size = IntPrompt.ask("Tape Size", default=config["tape_size"])
    head_position = IntPrompt.ask("Head Position", default=min(config["head_position"], tape_size - 1))
    max_steps = IntPrompt.ask("Max Steps", default=config["max_steps"])
    step_mode = Prompt.ask("Step Mode", choices=["auto", "manual"], default=config["step_mode"])
    step_delay = float(Prompt.ask("Step Delay (seconds)", default=str(config["step_delay"])))
    compact = Confirm.ask("Compact fingerprints?", default=config["compact_fingerprints"])
    trace_steps = Confirm.ask("Trace every step to the log?", default=config["trace_steps"])
    states = IntPrompt.ask("Number of States", default=config["states"])
    symbols = IntPrompt.ask("Number of Symbols", default=config["symbols"])
    batch_size = IntPrompt.ask("Batch Size", default=config["batch_size"])

    updated = dict(config)
    updated.update({
        "tape_size": tape_size,
        "head_position": head_position,
        "max_steps": max_steps,
        "step_mode": step_mode,
        "step_delay": step_delay,
        "compact_fingerprints": compact,
        "trace_steps": trace_steps,
        "states": states,
        "symbols": symbols,
        "batch_size": batch_size
    })

    try:
        save_config(updated, path)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Configuration not saved: {e}[/red]")
        return config
    console.print("[green]Configuration updated successfully.[/green]")
    return updated


def interactive_main(config_path=DEFAULT_CONFIG_PATH):
    config = load_runtime_config(config_path)

    while True:
        show_main_menu()
        choice = Prompt.ask("\nChoose an option", choices=["1", "2", "3", "4", "5", "6", "7"], default="7")

        if choice == "1":
            handle_demo(config)
        elif choice == "2":
            handle_demo(config, step_through=True)
        elif choice == "3":
            handle_notation(config)
        elif choice == "4":
            handle_generate(config)
        elif choice == "5":
            handle_simulate_pool(config)
        elif choice == "6":
            config = handle_edit_config(config, config_path)
        elif choice == "7":
            console.print("[bold green]Goodbye![/bold green]")
            break


# === CLI Mode for Automation ===
def cli_main(args):
    config = load_runtime_config(args.config)
    if args.step:
        config["step_mode"] = "manual"

    if args.list:
        for demo in DEMOS.values():
            console.print(f"[cyan]{demo.name}[/cyan]  {demo.summary}")
    if args.demo:
        if args.demo not in DEMOS:
            console.print(f"[red]Unknown demo '{args.demo}'. Use --list.[/red]")
            sys.exit(1)
        machine, table = DEMOS[args.demo].build()
        supervise(machine, config, args.demo, table=table, step_through=args.step)
    if args.text:
        machine = from_text(args.text, tape=Tape(config["tape_size"], config["head_position"]))
        supervise(machine, config, args.text, step_through=args.step)
    if args.generate:
        generate_all_rulesets(config["states"], config["symbols"], root=Path(config["rulesets_directory"]))
        write_pool(config["states"], config["symbols"], root=Path(config["rulesets_directory"]),
                   pools_root=Path(config["pools_directory"]))
    if args.simulate:
        name = case_name(config["states"], config["symbols"])
        results = simulate_pool(
            str(Path(config["pools_directory"]) / f"{name}.txt"),
            name,
            "results",
            batch_size=config["batch_size"],
            max_steps=config["max_steps"],
            tape_size=config["tape_size"],
            compact=config["compact_fingerprints"],
            rulesets_root=Path(config["rulesets_directory"]),
            results_root=Path(config["results_directory"]),
            long_runners_pool=Path(config["pools_directory"]) / "long_runners.txt",
            logger=make_logger(config)
        )
        show_summary(results)


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Loop Supervisor")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to runtime_config.json")
    parser.add_argument("--list", action="store_true", help="List the demo machines")
    parser.add_argument("--demo", help="Run a demo machine by name")
    parser.add_argument("--text", help="Run a machine given in standard notation (e.g., 1RB1LB_1LA1RZ)")
    parser.add_argument("--step", action="store_true", help="Step through the run, one Enter per step")
    parser.add_argument("--generate", action="store_true", help="Generate rule sets and a pool for the configured case")
    parser.add_argument("--simulate", action="store_true", help="Classify the configured case's pool")
    args = parser.parse_args()

    if args.list or args.demo or args.text or args.generate or args.simulate:
        cli_main(args)
    else:
        interactive_main(args.config)


if __name__ == "__main__":
    main()
