"""Turns a detected MatchResult into the board mutation for one cascade round."""
from __future__ import annotations

import logging
import math
from typing import Iterable, List, Set

from match3.components.board import Board, Position
from match3.components.cell import Cell, SpecialType
from match3.components.match_result import ClearedCell, MatchResult, ObstacleDamage, RemovalResult
from match3.constants import (
    COMBO_MULTIPLIER_STEP,
    MIN_MATCH_LENGTH,
    SCORE_BOMB_ACTIVATION,
    SCORE_PER_CELL,
    SCORE_PER_EXTRA_CELL,
    SCORE_PROPELLER_ACTIVATION,
    SCORE_RAINBOW_ACTIVATION,
    SCORE_ROCKET_ACTIVATION,
)
from match3.systems.match import activation_area, activation_counts

logger = logging.getLogger(__name__)

ACTIVATION_SCORES = {
    SpecialType.ROW_CLEAR: SCORE_ROCKET_ACTIVATION,
    SpecialType.COLUMN_CLEAR: SCORE_ROCKET_ACTIVATION,
    SpecialType.COLOR_CLEAR: SCORE_RAINBOW_ACTIVATION,
    SpecialType.AREA_CLEAR: SCORE_BOMB_ACTIVATION,
    SpecialType.HOMING_STRIKE: SCORE_PROPELLER_ACTIVATION,
}


def sweep(
    board: Board,
    positions: Iterable[Position],
    to_remove: Set[Position],
    obstacles_cleared: List[ObstacleDamage],
) -> None:
    """Hit every position with a special-token blast.

    Blockers are untouched. A covered cell loses one obstacle health point and
    is only removed once the obstacle is gone; a bare cell is removed.
    Mutates ``board`` in place, callers pass a clone.
    """
    for pos in positions:
        cell = board.cell(pos)
        if cell.is_blocker:
            continue
        obstacle = cell.obstacle
        if obstacle is None:
            to_remove.add(pos)
            continue
        obstacle.health -= 1
        if obstacle.health <= 0:
            cell.obstacle = None
            obstacles_cleared.append(ObstacleDamage(position=pos, kind=obstacle.kind, destroyed=True))
            to_remove.add(pos)
        else:
            obstacles_cleared.append(ObstacleDamage(position=pos, kind=obstacle.kind, destroyed=False))


def clear_positions(board: Board, to_remove: Set[Position], result: MatchResult | None = None) -> List[ClearedCell]:
    """Empty every position in to_remove, placing created specials where queued.

    Returns ``(row, col, color)`` for each removed cell with its color before
    removal.
    """
    cleared: List[ClearedCell] = []
    for pos in sorted(to_remove):
        cell = board.cell(pos)
        if cell.is_blocker:
            continue
        cleared.append((pos[0], pos[1], cell.color))
        creation = result.creation_at(pos) if result is not None else None
        if creation is not None:
            board.set_cell(pos, Cell(color=creation.color, special=creation.special))
        else:
            board.set_cell(pos, Cell.empty())
    return cleared


def remove_matches(board: Board, result: MatchResult) -> RemovalResult:
    """Apply obstacle damage, matches and activations to a copy of board."""
    new_board = board.clone()
    to_remove: Set[Position] = set()
    obstacles_cleared: List[ObstacleDamage] = []

    for damage in result.obstacle_damage:
        cell = new_board.cell(damage.position)
        obstacle = cell.obstacle
        if obstacle is None or cell.is_blocker:
            continue
        obstacle.health -= 1
        destroyed = obstacle.health <= 0
        if destroyed:
            cell.obstacle = None
        obstacles_cleared.append(ObstacleDamage(position=damage.position, kind=damage.kind, destroyed=destroyed))

    for pos in result.matched_positions():
        if new_board.cell(pos).obstacle is None:
            to_remove.add(pos)

    # Areas are recomputed here, after damage, not taken from detection.
    for activation in result.activations:
        sweep(new_board, list(activation_area(new_board, activation)), to_remove, obstacles_cleared)

    cleared_cells = clear_positions(new_board, to_remove, result)
    logger.debug("removed %d cells, %d obstacle hits", len(cleared_cells), len(obstacles_cleared))
    return RemovalResult(
        board=new_board,
        cleared_count=len(cleared_cells),
        obstacles_cleared=obstacles_cleared,
        cleared_cells=cleared_cells,
    )


def calculate_score(result: MatchResult) -> int:
    score = 0
    for match in result.matches:
        length = len(match)
        score += SCORE_PER_CELL * length
        score += SCORE_PER_EXTRA_CELL * max(0, length - MIN_MATCH_LENGTH)
    for special, count in activation_counts(result).items():
        score += ACTIVATION_SCORES.get(special, 0) * count
    return score


def combo_multiplier(combo_count: int) -> float:
    return 1 + combo_count * COMBO_MULTIPLIER_STEP


def round_score(result: MatchResult, combo_count: int) -> int:
    """Score for one cascade round, scaled by how deep into the cascade it is."""
    return int(math.floor(calculate_score(result) * combo_multiplier(combo_count)))
