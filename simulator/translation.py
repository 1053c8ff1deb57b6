"""
Display symbols for tapes that only store integers.

A SymbolTable maps human readable symbols (usually single characters) to
the integers written on tiles and back. The tape never sees the table.
"""

from typing import Dict, Hashable, Iterable, Optional

from simulator.tape import Tape

BLANK = " "


class SymbolTable:
    def __init__(self):
        self._to_int: Dict[Hashable, int] = {}
        self._to_symbol: Dict[int, Hashable] = {}

    @classmethod
    def from_string(cls, text) -> "SymbolTable":
        """One entry per distinct character of `text`, numbered from 0 in order of appearance."""
        return cls.auto(*text)

    @classmethod
    def auto(cls, *symbols) -> "SymbolTable":
        table = cls()
        table.autofill(symbols)
        return table

    def autofill(self, symbols: Iterable[Hashable]):
        """Give every new symbol the lowest free integer."""
        counter = 0
        for symbol in symbols:
            if symbol in self._to_int:
                continue
            while counter in self._to_symbol:
                counter += 1
            self.add(counter, symbol)
            counter += 1

    def add(self, number, symbol):
        if symbol is None or symbol == BLANK:
            raise ValueError("The blank symbol is the empty marker and cannot be mapped.")
        if number in self._to_symbol and self._to_symbol[number] != symbol:
            raise ValueError(f"{number} is already mapped to {self._to_symbol[number]!r}.")
        if symbol in self._to_int and self._to_int[symbol] != number:
            raise ValueError(f"{symbol!r} is already mapped to {self._to_int[symbol]}.")
        self._to_int[symbol] = number
        self._to_symbol[number] = symbol

    def encode(self, symbol) -> Optional[int]:
        if symbol is None or symbol == BLANK:
            return None
        try:
            return self._to_int[symbol]
        except KeyError:
            raise KeyError(f"Symbol {symbol!r} is not in the table.") from None

    def decode(self, number) -> Optional[Hashable]:
        if number is None:
            return None
        try:
            return self._to_symbol[number]
        except KeyError:
            raise KeyError(f"Value {number} has no display symbol.") from None

    def __contains__(self, symbol):
        return symbol in self._to_int

    def __len__(self):
        return len(self._to_int)

    def items(self):
        return sorted(self._to_symbol.items())


class TranslatedTape:
    """Reads and writes a Tape in display symbols."""

    def __init__(self, tape: Tape, table: SymbolTable):
        self.tape = tape
        self.table = table

    @classmethod
    def from_text(cls, text, table=None, capacity=None, head=0) -> "TranslatedTape":
        """Lay `text` out from position 0. Spaces become empty cells."""
        if table is None:
            table = SymbolTable.from_string(text.replace(BLANK, ""))
        values = [table.encode(char) for char in text]
        return cls(Tape.from_values(values, capacity=capacity, head=head), table)

    def read(self):
        return self.table.decode(self.tape.read())

    def write(self, symbol):
        self.tape.write(self.table.encode(symbol))

    def text(self) -> str:
        """Dense contents as a string, blanks for empty cells."""
        return "".join(
            BLANK if value is None else str(self.table.decode(value)) for value in self.tape.to_list()
        )

    def render(self) -> str:
        cells = []
        for position, value in self.tape.cells():
            symbol = BLANK if value is None else self.table.decode(value)
            cells.append(f"[>{symbol}<]" if position == self.tape.head else f"[{symbol}]")
        return f"{{ Head: {self.tape.head}, Tape: <{' '.join(cells)}> }}"

    def __str__(self):
        return self.render()
