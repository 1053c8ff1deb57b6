from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from simulator.errors import InvalidConfiguration, TapeCorruption
from simulator.state import MoveAction

FILLER_TILE = "[ ]"
GAP_MARKER = "~"


@dataclass
class Tile:
    """One materialized tape cell. Neighbours are positions into the tape arena."""
    position: int
    value: Optional[int] = None
    left: Optional[int] = None
    right: Optional[int] = None


class Tape:
    """
    A ring tape of fixed capacity whose cells are only created when visited.

    Tiles live in an arena keyed by position and link to their left and right
    neighbours by position. The tiles at 0, capacity - 1 and the head are
    always materialized, so the arena is one closed ring from the start and
    moving the head over an unvisited position splices a single empty tile in.
    Positions, capacity and symbols are plain ints and never overflow.
    """

    def __init__(self, capacity, head=0, *values):
        if capacity < 1:
            raise InvalidConfiguration("Tape size may not be smaller than 1.")
        if head < 0:
            raise InvalidConfiguration("Head position may not be negative.")
        if head >= capacity:
            raise InvalidConfiguration("Head position must be smaller than the tape size.")
        if len(values) > capacity:
            raise InvalidConfiguration(
                f"Tape of size {capacity} is not large enough to store {len(values)} values."
            )

        self.capacity = capacity
        self.head = head
        self._tiles = {}

        for position, value in enumerate(values):
            self._tiles[position] = Tile(position, value)
        for position in (0, capacity - 1, head):
            if position not in self._tiles:
                self._tiles[position] = Tile(position)

        positions = sorted(self._tiles)
        for idx, position in enumerate(positions):
            tile = self._tiles[position]
            tile.left = positions[idx - 1]
            tile.right = positions[(idx + 1) % len(positions)]

    @classmethod
    def from_values(cls, values, capacity=None, head=0):
        values = list(values)
        if capacity is None:
            capacity = max(len(values), 1)
        return cls(capacity, head, *values)

    # === Tiles ===
    @property
    def first(self) -> Tile:
        return self._tile(0)

    @property
    def last(self) -> Tile:
        return self._tile(self.capacity - 1)

    @property
    def current(self) -> Tile:
        return self._tile(self.head)

    def _tile(self, position) -> Tile:
        tile = self._tiles.get(position)
        if tile is None:
            raise TapeCorruption(f"Tile {position} should be materialized but is missing.")
        return tile

    def _neighbour(self, tile, direction) -> Tile:
        position = tile.left if direction == "left" else tile.right
        if position is None or position not in self._tiles:
            raise TapeCorruption(
                f"Cannot move {direction}: neighbour of tile {tile.position} is missing."
            )
        return self._tiles[position]

    # === Head ===
    def read(self) -> Optional[int]:
        return self.current.value

    def write(self, value: Optional[int]):
        self.current.value = value

    def read_at(self, position) -> Optional[int]:
        """Value at an absolute position, without materializing it."""
        tile = self._tiles.get(position)
        return None if tile is None else tile.value

    def move(self, action: MoveAction) -> bool:
        if action is MoveAction.RIGHT:
            return self.move_right()
        if action is MoveAction.LEFT:
            return self.move_left()
        if action is MoveAction.NONE:
            return False
        raise ValueError(f"Unknown move action: {action!r}")

    def move_left(self) -> bool:
        """Move one tile left. Returns True if the head wrapped to the last tile."""
        if self.head == 0:
            self.head = self.capacity - 1
            return True

        tile = self.current
        neighbour = self._neighbour(tile, "left")
        target = self.head - 1

        if neighbour.position > target:
            raise TapeCorruption(
                f"Left neighbour of tile {tile.position} is tile {neighbour.position}."
            )
        if neighbour.position < target:
            # Not adjacent, splice in the missing tile
            filler = Tile(target, None, left=neighbour.position, right=tile.position)
            self._tiles[target] = filler
            neighbour.right = target
            tile.left = target

        self.head = target
        return False

    def move_right(self) -> bool:
        """Move one tile right. Returns True if the head wrapped to the first tile."""
        if self.head == self.capacity - 1:
            self.head = 0
            return True

        tile = self.current
        neighbour = self._neighbour(tile, "right")
        target = self.head + 1

        if neighbour.position < target:
            raise TapeCorruption(
                f"Right neighbour of tile {tile.position} is tile {neighbour.position}."
            )
        if neighbour.position > target:
            filler = Tile(target, None, left=tile.position, right=neighbour.position)
            self._tiles[target] = filler
            tile.right = target
            neighbour.left = target

        self.head = target
        return False

    # === Contents ===
    def cells(self) -> Iterator[Tuple[int, Optional[int]]]:
        """Yield (position, value) of every materialized tile, first to last."""
        tile = self.first
        while True:
            yield tile.position, tile.value
            if tile.right is None:
                raise TapeCorruption(f"Tile {tile.position} has no right neighbour.")
            if tile.right <= tile.position:
                return
            tile = self._neighbour(tile, "right")

    def to_list(self) -> List[Optional[int]]:
        """Dense tape contents. Linear in capacity, meant for small tapes."""
        return [self.read_at(position) for position in range(self.capacity)]

    def window(self, radius=10) -> List[Tuple[int, Optional[int]]]:
        """Positions and values around the head, wrapping at the extremities."""
        span = min(2 * radius + 1, self.capacity)
        start = self.head - min(radius, (self.capacity - 1) // 2)
        return [
            ((start + offset) % self.capacity, self.read_at((start + offset) % self.capacity))
            for offset in range(span)
        ]

    def __len__(self):
        return len(self._tiles)

    # === Fingerprints ===
    def fingerprint(self) -> str:
        """
        Canonical string of head and full contents: "<head>;<f0>;<f1>;...".

        Every position of the tape gets exactly one field, the decimal value
        or the empty string for the empty marker and for unmaterialized gaps.
        Gaps are emitted as one repeated separator per run.
        """
        parts = [str(self.head)]
        previous = -1
        for position, value in self.cells():
            gap = position - previous - 1
            if gap:
                parts.append(";" * gap)
            parts.append(";" if value is None else f";{value}")
            previous = position
        trailing = self.capacity - 1 - previous
        if trailing:
            parts.append(";" * trailing)
        return "".join(parts)

    def compact_fingerprint(self) -> str:
        """Like fingerprint(), but every maximal run of empty fields is one "~<count>" field."""
        fields = [str(self.head)]
        run = 0
        previous = -1
        for position, value in self.cells():
            run += position - previous - 1
            previous = position
            if value is None:
                run += 1
                continue
            if run:
                fields.append(f"{GAP_MARKER}{run}")
                run = 0
            fields.append(str(value))
        run += self.capacity - 1 - previous
        if run:
            fields.append(f"{GAP_MARKER}{run}")
        return ";".join(fields)

    # === Display ===
    def _tile_repr(self, position, value):
        text = " " if value is None else str(value)
        if position == self.head:
            return f"[>{text}<]"
        return f"[{text}]"

    def render(self) -> str:
        parts = []
        previous = None
        for position, value in self.cells():
            if previous is not None:
                gap = position - previous - 1
                if gap > 2:
                    parts.append(FILLER_TILE)
                    parts.append(f"... {gap - 2} ...")
                    parts.append(FILLER_TILE)
                else:
                    parts.extend([FILLER_TILE] * gap)
            parts.append(self._tile_repr(position, value))
            previous = position
        return f"{{ Head: {self.head}, Tape: <{' '.join(parts)}> }}"

    def __str__(self):
        return self.render()

    def __repr__(self):
        return f"Tape(capacity={self.capacity}, head={self.head}, tiles={len(self._tiles)})"
