from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from match3.components.board import Board, Position
from match3.components.cell import Cell, Obstacle, ObstacleKind, SpecialType
from match3.constants import COLORS

# One letter per palette color; '.' is an empty slot and '#' a blocker.
LETTERS = {
    'R': 'red',
    'G': 'green',
    'B': 'blue',
    'Y': 'yellow',
    'M': 'magenta',
    'O': 'orange',
}


def board_from_layout(
    layout: Sequence[str],
    *,
    specials: Mapping[Position, SpecialType] | None = None,
    obstacles: Mapping[Position, tuple[ObstacleKind, int]] | None = None,
) -> Board:
    """Build a board from rows of letters, e.g. ``["RGB", "BYM"]``."""
    rows, cols = len(layout), len(layout[0])
    board = Board(rows=rows, cols=cols)
    for row, line in enumerate(layout):
        assert len(line) == cols, f"row {row} has {len(line)} cells, expected {cols}"
        for col, letter in enumerate(line):
            if letter == '#':
                board.cells[row][col] = Cell.blocker()
            elif letter == '.':
                board.cells[row][col] = Cell.empty()
            else:
                board.cells[row][col] = Cell(color=LETTERS[letter])
    for pos, special in (specials or {}).items():
        board.cell(pos).special = special
    for pos, (kind, health) in (obstacles or {}).items():
        board.cell(pos).obstacle = Obstacle(kind, health)
    return board


def filler_board(rows: int = 8, cols: int = 8) -> Board:
    """Run-free board: color index (2*row + col) % 6 never lines up three."""
    board = Board(rows=rows, cols=cols)
    for row in range(rows):
        for col in range(cols):
            board.cells[row][col] = Cell(color=COLORS[(2 * row + col) % len(COLORS)])
    return board


def paint(board: Board, positions: Iterable[Position], color: str) -> Board:
    for pos in positions:
        board.cell(pos).color = color
    return board


def board_letters(board: Board) -> list[str]:
    reverse = {name: letter for letter, name in LETTERS.items()}
    lines = []
    for row in board.cells:
        line = ''
        for cell in row:
            if cell.is_blocker:
                line += '#'
            elif cell.color is None:
                line += '.'
            else:
                line += reverse[cell.color]
        lines.append(line)
    return lines


def swappable_board() -> Board:
    """8x8 run-free board where swapping (6, 2) with (7, 2) lines up three greens on row 7."""
    board = filler_board()
    paint(board, [(7, 0), (7, 1), (6, 2)], 'green')
    return board
