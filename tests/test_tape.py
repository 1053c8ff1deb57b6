import pytest

from simulator.errors import InvalidConfiguration, TapeCorruption
from simulator.state import MoveAction
from simulator.tape import Tape


@pytest.mark.parametrize(
    "capacity, head, values",
    [
        (0, 0, ()),
        (3, -1, ()),
        (3, 3, ()),
        (2, 0, (1, 2, 3)),
    ],
)
def test_invalid_construction_is_rejected(capacity: int, head: int, values: tuple) -> None:
    with pytest.raises(InvalidConfiguration):
        Tape(capacity, head, *values)


def test_invalid_configuration_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        Tape(0)


@pytest.mark.parametrize("capacity", [1, 2, 5])
def test_read_at_head_returns_initial_value_or_empty(capacity: int) -> None:
    values = [7, None, 9][:capacity]
    for head in range(capacity):
        tape = Tape(capacity, head, *values)
        expected = values[head] if head < len(values) else None
        assert tape.read() == expected


def test_head_extremities_and_head_are_materialized() -> None:
    tape = Tape(100, 40)

    assert [position for position, _ in tape.cells()] == [0, 40, 99]
    assert len(tape) == 3


@pytest.mark.parametrize("capacity, head", [(1, 0), (4, 0), (4, 3), (9, 5)])
def test_full_lap_right_wraps_exactly_once(capacity: int, head: int) -> None:
    tape = Tape(capacity, head)

    wraps = [tape.move_right() for _ in range(capacity)]

    assert tape.head == head
    assert wraps.count(True) == 1


@pytest.mark.parametrize("capacity, head", [(1, 0), (6, 2)])
def test_full_lap_left_wraps_exactly_once(capacity: int, head: int) -> None:
    tape = Tape(capacity, head)

    wraps = [tape.move_left() for _ in range(capacity)]

    assert tape.head == head
    assert wraps.count(True) == 1


def test_moving_into_a_gap_splices_an_empty_tile() -> None:
    tape = Tape(10, 5, 1)

    assert tape.move_right() is False
    assert tape.head == 6
    assert tape.read() is None
    assert tape.move_left() is False
    assert tape.move_left() is False
    assert tape.head == 4

    assert [position for position, _ in tape.cells()] == [0, 4, 5, 6, 9]
    for position, _ in tape.cells():
        tile = tape._tiles[position]
        assert tape._tiles[tile.right].left == position
        assert tape._tiles[tile.left].right == position


def test_wrap_lands_on_existing_extremity_tiles() -> None:
    tape = Tape(5, 0, 3)

    assert tape.move_left() is True
    assert tape.head == 4
    tape.write(8)
    assert tape.move_right() is True
    assert tape.head == 0
    assert tape.read() == 3
    assert tape.to_list() == [3, None, None, None, 8]


def test_read_does_not_materialize() -> None:
    tape = Tape(8, 3)
    tape.read()
    tape.read_at(5)

    assert len(tape) == 3


def test_write_and_move_dispatch() -> None:
    tape = Tape(4, 1)
    tape.write(12)

    assert tape.move(MoveAction.NONE) is False
    assert tape.read() == 12
    tape.move(MoveAction.RIGHT)
    assert tape.head == 2
    tape.move(MoveAction.LEFT)
    assert tape.head == 1


def test_missing_neighbour_link_is_corruption() -> None:
    tape = Tape(5, 2)
    tape.current.right = None

    with pytest.raises(TapeCorruption):
        tape.move_right()


def test_backwards_neighbour_link_is_corruption() -> None:
    tape = Tape(5, 2)
    tape.current.right = 0

    with pytest.raises(TapeCorruption):
        tape.move_right()


def test_fingerprint_format() -> None:
    assert Tape(4, 0, None, 1, 2, None).fingerprint() == "0;;1;2;"
    assert Tape(6, 2).fingerprint() == "2;;;;;;"
    assert Tape(1, 0, -5).fingerprint() == "0;-5"


def test_fingerprint_encodes_gaps_positionally() -> None:
    tape = Tape(6, 2)
    tape.write(7)

    assert tape.fingerprint() == "2;;;7;;;"


def test_fingerprint_ignores_materialization_history() -> None:
    visited = Tape(6, 0)
    for _ in range(3):
        visited.move_right()
    for _ in range(3):
        visited.move_left()

    assert len(visited) > len(Tape(6, 0))
    assert visited.fingerprint() == Tape(6, 0).fingerprint()
    assert visited.compact_fingerprint() == Tape(6, 0).compact_fingerprint()


def test_fingerprint_distinguishes_head_symbol_and_position() -> None:
    base = Tape(5, 0, 1, None, 2)
    moved_head = Tape(5, 1, 1, None, 2)
    other_symbol = Tape(5, 0, 1, None, 3)
    shifted = Tape(5, 0, 1, 2, None)

    prints = {t.fingerprint() for t in (base, moved_head, other_symbol, shifted)}
    compact = {t.compact_fingerprint() for t in (base, moved_head, other_symbol, shifted)}

    assert len(prints) == 4
    assert len(compact) == 4


def test_compact_fingerprint_collapses_empty_runs() -> None:
    tape = Tape(6, 2)
    tape.write(7)

    assert tape.compact_fingerprint() == "2;~2;7;~3"
    assert Tape(3, 0, 1, 2, 3).compact_fingerprint() == "0;1;2;3"


def test_huge_capacity_stays_sparse() -> None:
    capacity = 10 ** 30
    tape = Tape(capacity, 10 ** 29)

    tape.write(2 ** 100)
    tape.move_right()
    tape.write(1)

    assert tape.head == 10 ** 29 + 1
    assert len(tape) == 4
    fingerprint = tape.compact_fingerprint()
    assert str(2 ** 100) in fingerprint
    assert len(fingerprint) < 200


def test_render_marks_head_and_abbreviates_gaps() -> None:
    assert Tape(4, 0, None, 1, 2, None).render() == "{ Head: 0, Tape: <[> <] [1] [2] [ ]> }"
    assert str(Tape(10, 0)) == "{ Head: 0, Tape: <[> <] [ ] ... 6 ... [ ] [ ]> }"
    assert Tape(4, 3).render() == "{ Head: 3, Tape: <[ ] [ ] [ ] [> <]> }"


def test_window_wraps_around_head() -> None:
    tape = Tape(5, 0, 1, 2, 3, 4, 5)

    assert tape.window(1) == [(4, 5), (0, 1), (1, 2)]
    assert [p for p, _ in tape.window(10)] == [3, 4, 0, 1, 2]


def test_from_values_defaults_capacity_to_value_count() -> None:
    tape = Tape.from_values([1, 2, 3], head=2)

    assert tape.capacity == 3
    assert tape.read() == 3
