import json
import argparse
from pathlib import Path

from simulator.description import HALT_RULE, from_text, state_letter, to_rules
from tools.ruleset_generator import RULESETS_ROOT, block_path


def load_machine_index(index_file):
    """Load index.jsonl into a dictionary mapping machine_id -> entry."""
    machine_map = {}
    with open(index_file, "r", encoding="utf-8") as f:
        for line in f:
            entry = json.loads(line)
            machine_map[entry["machine_id"]] = entry
    return machine_map


def load_ruleset(block_root, ruleset_hash):
    """Load a ruleset JSON file given its hash."""
    path = block_path(block_root, ruleset_hash)
    if not path.exists():
        raise FileNotFoundError(f"Ruleset block {path} not found.")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def format_action(transition):
    if list(transition) == HALT_RULE:
        return "HALT"
    write_symbol, dir_bit, next_state = transition
    move_dir = "L" if dir_bit == 0 else "R"
    return f"{write_symbol}{move_dir}{state_letter(next_state)}"


def transition_table(rules, num_states, num_symbols):
    """Rows of [state letter, action per symbol...] in compact busy beaver notation."""
    table = []
    idx = 0
    for state in range(num_states):
        row = [state_letter(state)]
        for _ in range(num_symbols):
            row.append(format_action(rules[idx]))
            idx += 1
        table.append(row)
    return table


def pretty_print_ruleset(rules, num_states, num_symbols):
    """Pretty print the ruleset as a state x symbol table, then as LaTeX."""
    table = transition_table(rules, num_states, num_symbols)

    print("\n=== Transition Table ===")
    header = [" "] + [f"{i}" for i in range(num_symbols)]
    print("\t".join(header))
    for row in table:
        print("\t".join([f"State {row[0]}"] + row[1:]))

    print("\n=== LaTeX Table ===")
    print(r"\begin{array}{c|" + "c" * num_symbols + "}")
    print("State/Symbol & " + " & ".join([f"\\text{{{i}}}" for i in range(num_symbols)]) + r" \\ \hline")
    for row in table:
        print(" & ".join(row) + r" \\")
    print(r"\end{array}")


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Ruleset Inspector")
    parser.add_argument("--case", help="Case folder, e.g., s2_k2")
    parser.add_argument("--machine_id", help="Machine ID to inspect, e.g., TM_000123")
    parser.add_argument("--hash", help="Ruleset hash to inspect directly")
    parser.add_argument("--text", help="Machine in standard text notation, e.g., 1RB1LB_1LA1RZ")
    parser.add_argument("--symbols", type=int, default=2, help="Symbols per state for --hash lookups")
    args = parser.parse_args()

    if args.text:
        num_symbols = len(args.text.split("_")[0]) // 3
        machine = from_text(args.text)
        rules = to_rules(machine, num_symbols)
        pretty_print_ruleset(rules, len(machine.states), num_symbols)
        return

    if not args.case:
        raise ValueError("You must specify --case together with --machine_id or --hash.")

    case_folder = RULESETS_ROOT / args.case
    block_root = case_folder / "blocks"
    index_file = case_folder / "index.jsonl"

    if args.machine_id:
        machine_map = load_machine_index(index_file)
        if args.machine_id not in machine_map:
            raise ValueError(f"Machine ID {args.machine_id} not found in {index_file}")
        entry = machine_map[args.machine_id]
        ruleset_hash = entry["ruleset_hash"]
        num_symbols = entry["symbols"]
        print(f"[INFO] Machine {args.machine_id}")
        print(f"  States: {entry['states']}")
        print(f"  Symbols: {entry['symbols']}")
        print(f"  Notation: {entry.get('text', '?')}")
        print(f"  Ruleset Hash: {ruleset_hash}")
        print(f"  Canonical: {entry['is_canonical']}")
    elif args.hash:
        ruleset_hash = args.hash
        num_symbols = args.symbols
        print(f"[INFO] Direct hash lookup: {ruleset_hash}")
    else:
        raise ValueError("You must specify either --machine_id or --hash.")

    rules = load_ruleset(block_root, ruleset_hash)
    print("\n=== Ruleset ===")
    pretty_print_ruleset(rules, len(rules) // num_symbols, num_symbols)


if __name__ == "__main__":
    main()
