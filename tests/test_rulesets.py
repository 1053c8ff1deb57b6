from pathlib import Path

import pytest

from simulator.description import HALT_RULE
from tools.ruleset_generator import (
    generate_all_rulesets,
    generate_transition_options,
    hash_ruleset,
    write_pool,
)
from tools.ruleset_inspect import (
    format_action,
    load_machine_index,
    load_ruleset,
    pretty_print_ruleset,
    transition_table,
)


def test_transition_options_cover_every_write_move_and_target() -> None:
    options = generate_transition_options(2, 2)

    assert len(options) == 2 * 2 * 2 + 1
    assert options[-1] is None
    assert (1, 0, 1) in options
    assert (0, 1, 0) in options


def test_hash_is_stable_and_content_based() -> None:
    assert hash_ruleset([[1, 1, 0]]) == hash_ruleset([[1, 1, 0]])
    assert hash_ruleset([[1, 1, 0]]) != hash_ruleset([[1, 0, 0]])


@pytest.mark.parametrize(
    "states, symbols, require_halt, expected",
    [
        (1, 1, True, (1, 2)),
        (1, 2, True, (9, 16)),
        (1, 1, False, (3, 0)),
    ],
)
def test_generate_counts(tmp_path: Path, states: int, symbols: int, require_halt: bool, expected: tuple) -> None:
    assert generate_all_rulesets(states, symbols, root=tmp_path, require_halt=require_halt) == expected


def test_generated_index_and_blocks_agree(tmp_path: Path) -> None:
    generate_all_rulesets(1, 2, root=tmp_path)
    case = tmp_path / "s1_k2"

    machine_map = load_machine_index(case / "index.jsonl")

    assert len(machine_map) == 9
    entry = machine_map["TM_000000"]
    assert entry["states"] == 1 and entry["symbols"] == 2
    rules = load_ruleset(case / "blocks", entry["ruleset_hash"])
    assert HALT_RULE in rules
    assert entry["text"].count("---") == rules.count(HALT_RULE)


def test_missing_block_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_ruleset(tmp_path, "ab" * 32)


def test_write_pool_lists_every_machine(tmp_path: Path) -> None:
    generate_all_rulesets(1, 2, root=tmp_path)

    pool_file = write_pool(1, 2, root=tmp_path, pools_root=tmp_path / "pools")

    assert pool_file.read_text(encoding="utf-8").split() == [f"TM_{i:06d}" for i in range(9)]


def test_write_pool_needs_an_index(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        write_pool(3, 3, root=tmp_path, pools_root=tmp_path)


def test_transition_table_uses_busy_beaver_notation() -> None:
    rules = [[1, 1, 1], [1, 0, 1], [1, 0, 0], list(HALT_RULE)]

    assert format_action(HALT_RULE) == "HALT"
    assert transition_table(rules, 2, 2) == [["A", "1RB", "1LB"], ["B", "1LA", "HALT"]]


def test_pretty_print_emits_text_and_latex(capsys: pytest.CaptureFixture[str]) -> None:
    pretty_print_ruleset([[1, 1, 0], list(HALT_RULE)], 1, 2)

    out = capsys.readouterr().out
    assert "State A\t1RA\tHALT" in out
    assert r"A & 1RA & HALT \\" in out
    assert r"\end{array}" in out
