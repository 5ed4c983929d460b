from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from match3.components.cell import Cell
from match3.constants import GRID_COLS, GRID_ROWS

Position = Tuple[int, int]

ORTHOGONAL_STEPS: Tuple[Position, ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass(slots=True)
class Board:
    """Grid of cells addressed by (row, col); row 0 is the top of the board.

    Phase functions never mutate a board they receive; they call ``clone`` and
    return the new value.
    """

    rows: int = GRID_ROWS
    cols: int = GRID_COLS
    cells: List[List[Cell]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[Cell.empty() for _ in range(self.cols)] for _ in range(self.rows)]

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def cell(self, pos: Position) -> Cell:
        row, col = pos
        return self.cells[row][col]

    def set_cell(self, pos: Position, cell: Cell) -> None:
        row, col = pos
        self.cells[row][col] = cell

    def positions(self) -> Iterator[Position]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield (row, col)

    def neighbours(self, pos: Position) -> Iterator[Position]:
        row, col = pos
        for dr, dc in ORTHOGONAL_STEPS:
            if self.in_bounds(row + dr, col + dc):
                yield (row + dr, col + dc)

    def square(self, pos: Position, radius: int) -> Iterator[Position]:
        """Positions of the (2*radius+1)^2 block centred on pos, clipped to the board."""
        row, col = pos
        for dr in range(-radius, radius + 1):
            for dc in range(-radius, radius + 1):
                if self.in_bounds(row + dr, col + dc):
                    yield (row + dr, col + dc)

    def row_positions(self, row: int) -> Iterator[Position]:
        for col in range(self.cols):
            yield (row, col)

    def column_positions(self, col: int) -> Iterator[Position]:
        for row in range(self.rows):
            yield (row, col)

    @property
    def center(self) -> Position:
        return (self.rows // 2, self.cols // 2)

    def clone(self) -> 'Board':
        return Board(
            rows=self.rows,
            cols=self.cols,
            cells=[[cell.copy() for cell in row] for row in self.cells],
        )


def are_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


@dataclass(slots=True)
class BoardState:
    """Singleton component holding the live board of a world."""

    board: Board
