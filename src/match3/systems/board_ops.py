from __future__ import annotations

import logging
import random
from typing import List, Optional, Sequence, Tuple

from match3.components.board import Board, Position, are_adjacent
from match3.components.cell import Cell, Obstacle, ObstacleKind, SpecialType, can_match, can_swap
from match3.components.level import Difficulty, LevelConfig
from match3.constants import COLORS, DIFFICULTY_SEEDING, GRID_COLS, GRID_ROWS, MIN_MATCH_LENGTH
from match3.systems.match import has_any_match

logger = logging.getLogger(__name__)

Swap = Tuple[Position, Position]


def _matchable_color(board: Board, row: int, col: int) -> Optional[str]:
    if not board.in_bounds(row, col):
        return None
    cell = board.cells[row][col]
    return cell.color if can_match(cell) else None


def completes_run(board: Board, pos: Position, color: str) -> bool:
    """True if placing color at pos would line up three or more."""
    row, col = pos
    for dr, dc in ((0, 1), (1, 0)):
        length = 1
        for sign in (-1, 1):
            step = 1
            while _matchable_color(board, row + sign * dr * step, col + sign * dc * step) == color:
                length += 1
                step += 1
        if length >= MIN_MATCH_LENGTH:
            return True
    return False


def pick_color(board: Board, pos: Position, rng: random.Random, palette: Sequence[str] = COLORS) -> str:
    """Uniform choice among colors that do not complete a run at pos."""
    available = [color for color in palette if not completes_run(board, pos, color)]
    if not available:
        # Every color completes a run; should not happen with six colors and two axes.
        logger.warning("no run-free color available at %s", pos)
        available = list(palette)
    return rng.choice(available)


def create_initial_board(
    difficulty: Difficulty = Difficulty.MEDIUM,
    level_config: LevelConfig | None = None,
    rng: random.Random | None = None,
    *,
    rows: int = GRID_ROWS,
    cols: int = GRID_COLS,
    palette: Sequence[str] = COLORS,
) -> Board:
    """Build a run-free board, place level obstacles and seed starting specials."""
    rng = rng or random.Random()
    if level_config is not None and level_config.difficulty is not None:
        difficulty = level_config.difficulty
    board = Board(rows=rows, cols=cols)
    for row in range(rows):
        for col in range(cols):
            available = list(palette)
            # Only cells to the left and above are filled at this point.
            if col >= 2:
                left1 = board.cells[row][col - 1].color
                left2 = board.cells[row][col - 2].color
                if left1 == left2 and left1 in available:
                    available = [clr for clr in available if clr != left1]
            if row >= 2:
                up1 = board.cells[row - 1][col].color
                up2 = board.cells[row - 2][col].color
                if up1 == up2 and up1 in available:
                    available = [clr for clr in available if clr != up1]
            board.cells[row][col] = Cell(color=rng.choice(available))

    if level_config is not None:
        for placement in level_config.obstacles:
            if not board.in_bounds(placement.row, placement.col):
                logger.warning("obstacle %s outside board at %s", placement.kind.value, (placement.row, placement.col))
                continue
            if placement.kind is ObstacleKind.BLOCKER:
                board.cells[placement.row][placement.col] = Cell.blocker()
            else:
                board.cells[placement.row][placement.col].obstacle = Obstacle(placement.kind, max(1, placement.health))

    rocket_count, propeller_count = DIFFICULTY_SEEDING[difficulty.value]
    free = [pos for pos in board.positions() if not board.cell(pos).is_blocker]
    seeded = rng.sample(free, min(len(free), rocket_count + propeller_count))
    for index, pos in enumerate(seeded):
        if index < rocket_count:
            board.cell(pos).special = SpecialType.ROW_CLEAR if rng.random() > 0.5 else SpecialType.COLUMN_CLEAR
        else:
            board.cell(pos).special = SpecialType.HOMING_STRIKE
    logger.debug("created %dx%d board (%s, %d specials seeded)", rows, cols, difficulty.value, len(seeded))
    return board


def swap_cells(board: Board, a: Position, b: Position) -> Board:
    """Return a copy of board with the contents of a and b exchanged."""
    new_board = board.clone()
    cell_a = new_board.cell(a)
    new_board.set_cell(a, new_board.cell(b))
    new_board.set_cell(b, cell_a)
    return new_board


def is_swap_allowed(board: Board, a: Position, b: Position) -> bool:
    if not (board.in_bounds(*a) and board.in_bounds(*b)):
        return False
    if not are_adjacent(a, b):
        return False
    return can_swap(board.cell(a)) and can_swap(board.cell(b))


def apply_gravity(board: Board) -> Board:
    """Compact every column downwards; blockers stay put and act as floors."""
    new_board = board.clone()
    for col in range(new_board.cols):
        landing = new_board.rows - 1
        for row in range(new_board.rows - 1, -1, -1):
            cell = new_board.cells[row][col]
            if cell.is_blocker:
                landing = row - 1
                continue
            if cell.color is None:
                continue
            if row != landing:
                new_board.cells[landing][col] = cell
                new_board.cells[row][col] = Cell.empty()
            landing -= 1
    return new_board


def fill_empty_spaces(board: Board, rng: random.Random | None = None, palette: Sequence[str] = COLORS) -> Board:
    """Give every empty, non-blocker cell a fresh plain token.

    Colors are drawn uniformly from those that do not complete a run with the
    neighbours already in place. Runs among surviving tokens are left for the
    next detection pass.
    """
    rng = rng or random.Random()
    new_board = board.clone()
    for pos in new_board.positions():
        if not new_board.cell(pos).is_empty:
            continue
        new_board.set_cell(pos, Cell(color=pick_color(new_board, pos, rng, palette)))
    return new_board


def _has_line_match(board: Board, pos: Position) -> bool:
    color = _matchable_color(board, *pos)
    if color is None:
        return False
    return completes_run(board, pos, color)


def predict_swap_creates_match(board: Board, a: Position, b: Position) -> bool:
    swapped = swap_cells(board, a, b)
    return _has_line_match(swapped, a) or _has_line_match(swapped, b)


def find_valid_swaps(board: Board) -> List[Swap]:
    """Enumerate adjacent swaps that would match or fuse two specials."""
    swaps: List[Swap] = []
    for row in range(board.rows):
        for col in range(board.cols):
            pos = (row, col)
            for other in ((row, col + 1), (row + 1, col)):
                if not board.in_bounds(*other) or not is_swap_allowed(board, pos, other):
                    continue
                if board.cell(pos).is_special and board.cell(other).is_special:
                    swaps.append((pos, other))
                elif predict_swap_creates_match(board, pos, other):
                    swaps.append((pos, other))
    return swaps


def has_valid_move(board: Board) -> bool:
    return bool(find_valid_swaps(board))


def reshuffle_board(board: Board, rng: random.Random | None = None, *, max_attempts: int = 200) -> Board:
    """Shuffle tokens in place of a stuck board; obstacles and blockers stay where they are."""
    rng = rng or random.Random()
    movable = [pos for pos in board.positions() if can_swap(board.cell(pos))]
    tokens = [(board.cell(pos).color, board.cell(pos).special) for pos in movable]
    for _ in range(max_attempts):
        rng.shuffle(tokens)
        candidate = board.clone()
        for pos, (color, special) in zip(movable, tokens):
            cell = candidate.cell(pos)
            cell.color = color
            cell.special = special
        if has_any_match(candidate) or not has_valid_move(candidate):
            continue
        return candidate
    raise RuntimeError("Unable to reshuffle board without matches and valid swaps")
