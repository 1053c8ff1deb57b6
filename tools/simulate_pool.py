# tools/simulate_pool.py

import argparse
import json
import os
from datetime import datetime
from pathlib import Path

import numpy as np
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn

from logger.logger import JSONLogger
from simulator.description import from_rules
from simulator.errors import SimulatorError
from simulator.supervisor import Supervisor, SupervisorResult
from simulator.tape import Tape
from tools.ruleset_generator import RULESETS_ROOT
from tools.ruleset_inspect import load_machine_index, load_ruleset

RESULTS_ROOT = Path("results")
LONG_RUNNERS_POOL = Path("pools/long_runners.txt")


# === Supervised Simulation ===
def simulate_single(rules, num_symbols=2, max_steps=1000000, tape_size=512, compact=False):
    """
    Classify one ruleset on a ring tape with the head in the middle.

    Returns (steps, result). RUNNING means the step budget ran out first.
    """
    tape = Tape(tape_size, tape_size // 2)
    machine = from_rules(rules, num_symbols, tape=tape)
    supervisor = Supervisor(machine, compact=compact)
    result = supervisor.run(max_steps=max_steps)
    return supervisor.steps, result


# === Promotion for Long-Runners ===
def promote_long_runner(machine_id, pool_file=LONG_RUNNERS_POOL):
    Path(pool_file).parent.mkdir(parents=True, exist_ok=True)
    with open(pool_file, "a", encoding="utf-8") as f:
        f.write(machine_id + "\n")


# === Utility Loaders ===
def load_machine_pool(machine_pool_file):
    with open(machine_pool_file, "r", encoding="utf-8") as f:
        machines = [line.strip() for line in f if line.strip()]
    return machines


def load_checkpoint(checkpoint_path):
    if checkpoint_path.exists():
        with open(checkpoint_path, "r", encoding="utf-8") as f:
            checkpoint = json.load(f)
        return checkpoint.get("completed", [])
    return []


def save_checkpoint(completed, checkpoint_path):
    with open(checkpoint_path, "w", encoding="utf-8") as f:
        json.dump({"completed": completed}, f, indent=4)


def console_message(msg):
    print(f"[{Path(os.getcwd()).name}] {msg}")


def summarize_results(entries):
    """Count and step statistics per result."""
    summary = {}
    for result in SupervisorResult:
        steps = np.array([e["steps_taken"] for e in entries if e["result"] == result.value], dtype=np.int64)
        if steps.size == 0:
            continue
        summary[result.value] = {
            "count": int(steps.size),
            "mean_steps": float(np.mean(steps)),
            "median_steps": float(np.median(steps)),
            "max_steps": int(np.max(steps)),
        }
    return summary


# === Main Simulation Runner ===
def simulate_pool(machine_pool_file, case_folder, output_name, batch_size=4096, max_steps=1000000,
                  tape_size=512, compact=False, rulesets_root=RULESETS_ROOT, results_root=RESULTS_ROOT,
                  long_runners_pool=LONG_RUNNERS_POOL, logger=None):
    pool_name = Path(machine_pool_file).stem
    results_folder = Path(results_root) / pool_name
    results_folder.mkdir(parents=True, exist_ok=True)
    results_file = results_folder / f"{output_name}.jsonl"
    checkpoint_file = results_folder / f"{output_name}_checkpoint.json"

    case_path = Path(rulesets_root) / case_folder
    machine_map = load_machine_index(case_path / "index.jsonl")
    block_root = case_path / "blocks"

    all_machines = load_machine_pool(machine_pool_file)
    completed = load_checkpoint(checkpoint_file)
    done = set(completed)

    pending_machines = [m for m in all_machines if m not in done]
    console_message(f"Loaded {len(all_machines):,} total machines. {len(pending_machines):,} pending.")

    all_results = []
    with open(results_file, "a", encoding="utf-8") as results_fh:
        for batch_start in range(0, len(pending_machines), batch_size):
            batch = pending_machines[batch_start:batch_start + batch_size]
            console_message(f"Processing batch {batch_start // batch_size + 1} with {len(batch):,} machines...")

            with Progress(
                    SpinnerColumn(),
                    BarColumn(),
                    "[progress.percentage]{task.percentage:>3.0f}%",
                    TextColumn("{task.completed}/{task.total} Machines"),
                    TimeElapsedColumn()
            ) as progress:

                task = progress.add_task("[cyan]Supervising...", total=len(batch))
                batch_results = []

                for machine_id in batch:
                    try:
                        entry = machine_map[machine_id]
                        rules = load_ruleset(block_root, entry["ruleset_hash"])
                        steps, result = simulate_single(rules, entry.get("symbols", 2), max_steps=max_steps,
                                                        tape_size=tape_size, compact=compact)

                        batch_results.append({
                            "machine_id": machine_id,
                            "steps_taken": steps,
                            "result": result.value,
                            "halted": result is SupervisorResult.HALTS
                        })
                        completed.append(machine_id)

                        if result is SupervisorResult.RUNNING:
                            promote_long_runner(machine_id, long_runners_pool)

                    except (KeyError, OSError, ValueError, SimulatorError) as e:
                        console_message(f"[WARNING] Failed to simulate {machine_id}: {e}")

                    progress.update(task, advance=1)

                # One bulk write per batch
                for entry in batch_results:
                    results_fh.write(json.dumps(entry) + "\n")
                results_fh.flush()
                if logger is not None and batch_results:
                    logger.rotate()
                    logger.log_verdicts(batch_results)
                    logger.log({
                        "pool": pool_name,
                        "batch": batch_start // batch_size + 1,
                        "machines": len(batch_results),
                        "summary": summarize_results(batch_results),
                        "timestamp": datetime.now().isoformat()
                    })

                save_checkpoint(completed, checkpoint_file)
                all_results.extend(batch_results)
                console_message(f"[INFO] Batch completed. Checkpoint saved.")

    console_message("[SUCCESS] All machines simulated. Results saved.")
    return all_results


# === CLI ===
def main():
    parser = argparse.ArgumentParser(description="Classify a pool of Turing machines as halting or looping.")
    parser.add_argument("--pool", required=True, help="Path to machine pool file (one ID per line)")
    parser.add_argument("--case", required=True, help="Case folder where machines are stored (e.g., s2_k2)")
    parser.add_argument("--output", default="results", help="Output result file name (default: results)")
    parser.add_argument("--batch_size", type=int, default=4096, help="Batch size per save/checkpoint")
    parser.add_argument("--max_steps", type=int, default=1000000, help="Step budget before a machine counts as undecided")
    parser.add_argument("--tape_size", type=int, default=512, help="Ring tape size (cells)")
    parser.add_argument("--compact", action="store_true", help="Use run-length encoded fingerprints")
    parser.add_argument("--log_dir", default="logs/", help="Directory for per-verdict JSONL logs")
    args = parser.parse_args()

    results = simulate_pool(
        args.pool,
        args.case,
        args.output,
        batch_size=args.batch_size,
        max_steps=args.max_steps,
        tape_size=args.tape_size,
        compact=args.compact,
        logger=JSONLogger(args.log_dir)
    )
    for result, stats in summarize_results(results).items():
        console_message(f"{result}: {stats}")


if __name__ == "__main__":
    main()
