import json
import hashlib
from itertools import product
from datetime import datetime
from pathlib import Path
import argparse

from simulator.description import HALT_RULE, from_rules, to_text

RULESETS_ROOT = Path("rulesets")


def case_name(num_states, num_symbols):
    return f"s{num_states}_k{num_symbols}"


# === TRANSITION OPTION MAP ===
def generate_transition_options(num_states, num_symbols):
    """Build list of all possible transitions including halt (None)."""
    options = []
    for new_symbol in range(num_symbols):
        for direction in ['L', 'R']:
            for new_state in range(num_states):
                dir_bit = 0 if direction == 'L' else 1
                options.append((new_symbol, dir_bit, new_state))
    options.append(None)  # Represent halting as None
    return options


def hash_ruleset(rules):
    """Hash a serialized ruleset deterministically."""
    rules_json = json.dumps(rules, sort_keys=True)
    return hashlib.sha256(rules_json.encode('utf-8')).hexdigest()


def block_path(block_root, ruleset_hash):
    return Path(block_root) / ruleset_hash[:2] / ruleset_hash[2:4] / f"{ruleset_hash}.json"


def save_block(block_root, ruleset_hash, rules):
    """Save ruleset to a hashed block path if it doesn't exist."""
    path = block_path(block_root, ruleset_hash)
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        with open(path, "w", encoding="utf-8") as f:
            json.dump(rules, f, indent=2)
    return str(path)


def save_machine_index(index_file, machine_entry):
    """Append a machine entry to the index file."""
    index_file.parent.mkdir(parents=True, exist_ok=True)
    with open(index_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(machine_entry) + "\n")


def generate_all_rulesets(num_states=2, num_symbols=2, root=RULESETS_ROOT, require_halt=True):
    """
    Enumerate every ruleset for (states, symbols) into content-addressed blocks.

    With `require_halt` rulesets without a single halting entry are skipped;
    the loop supervisor can classify those too, but they can never halt.
    Returns (generated, skipped).
    """
    case_folder = Path(root) / case_name(num_states, num_symbols)
    block_root = case_folder / "blocks"
    index_file = case_folder / "index.jsonl"

    block_root.mkdir(parents=True, exist_ok=True)
    index_file.parent.mkdir(parents=True, exist_ok=True)

    num_transitions = num_states * num_symbols
    transition_options = generate_transition_options(num_states, num_symbols)

    # Pre-build serialized transitions (lists)
    prebuilt_transitions = [list(HALT_RULE) if option is None else list(option) for option in transition_options]
    num_transition_options = len(transition_options)

    seen_hashes = dict()
    machine_counter = 0
    skipped_counter = 0

    total_combinations = num_transition_options ** num_transitions
    print(f"[INFO] Preparing to generate {total_combinations:,} possible rule sets...")

    for transition_choice in product(range(num_transition_options), repeat=num_transitions):
        rules = [prebuilt_transitions[choice_idx] for choice_idx in transition_choice]

        if require_halt and not any(transition == HALT_RULE for transition in rules):
            skipped_counter += 1
            continue

        ruleset_hash = hash_ruleset(rules)

        is_canonical = ruleset_hash not in seen_hashes
        if is_canonical:
            save_block(block_root, ruleset_hash, rules)
            seen_hashes[ruleset_hash] = f"TM_{machine_counter:06d}"

        machine_entry = {
            "machine_id": f"TM_{machine_counter:06d}",
            "states": num_states,
            "symbols": num_symbols,
            "ruleset_hash": ruleset_hash,
            "text": to_text(from_rules(rules, num_symbols), num_symbols),
            "is_canonical": is_canonical,
            "timestamp": datetime.now().isoformat()
        }
        save_machine_index(index_file, machine_entry)

        machine_counter += 1

        if machine_counter % 10000 == 0:
            print(f"[INFO] Generated {machine_counter:,} machines so far...")

    print(f"[INFO] Finished generating {machine_counter:,} machines.")
    print(f"[INFO] Skipped {skipped_counter:,} rule sets without any halting transitions.")
    return machine_counter, skipped_counter


def write_pool(num_states, num_symbols, root=RULESETS_ROOT, pools_root=Path("pools")):
    """Write every machine id of a case into pools/<case>.txt."""
    name = case_name(num_states, num_symbols)
    index_file = Path(root) / name / "index.jsonl"
    if not index_file.exists():
        raise FileNotFoundError(f"Index file not found: {index_file}")

    pool_file = Path(pools_root) / f"{name}.txt"
    pool_file.parent.mkdir(parents=True, exist_ok=True)
    with open(index_file, "r", encoding="utf-8") as f_in, open(pool_file, "w", encoding="utf-8") as f_out:
        for line in f_in:
            entry = json.loads(line)
            f_out.write(entry["machine_id"] + "\n")
    return pool_file


# === CLI WRAPPER ===
def main():
    parser = argparse.ArgumentParser(description="Turing Machine RuleSet Generator (Hash-Based Storage)")
    parser.add_argument("--states", type=int, default=2,
                        help="Number of machine states (default=2)")
    parser.add_argument("--symbols", type=int, default=2,
                        help="Number of tape symbols (default=2)")
    parser.add_argument("--include_non_halting", action="store_true",
                        help="Also keep rule sets without any halting entry")
    parser.add_argument("--pool", action="store_true",
                        help="Write a machine pool for the case afterwards")
    args = parser.parse_args()

    generate_all_rulesets(num_states=args.states, num_symbols=args.symbols,
                          require_halt=not args.include_non_halting)
    if args.pool:
        pool_file = write_pool(args.states, args.symbols)
        print(f"[INFO] Machine pool written to {pool_file}")


if __name__ == "__main__":
    main()
