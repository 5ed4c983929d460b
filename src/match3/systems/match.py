"""Match detection: runs, special activations, creations and obstacle damage."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Set, Tuple

from match3.components.board import Board, Position
from match3.components.cell import (
    PROPELLER_TARGET_PRIORITY,
    ObstacleKind,
    SpecialType,
    can_match,
)
from match3.components.match_result import (
    Activation,
    Creation,
    Direction,
    Match,
    MatchResult,
    ObstacleDamage,
)
from match3.constants import (
    BOMB_RADIUS,
    MIN_MATCH_LENGTH,
    PROPELLER_RADIUS,
    PROPELLER_ROW_BONUS,
    RAINBOW_RUN_LENGTH,
    ROCKET_RUN_LENGTH,
)

logger = logging.getLogger(__name__)


def _scan_line(board: Board, line: List[Position], direction: Direction) -> List[Match]:
    """Return every maximal run of MIN_MATCH_LENGTH or more along one row or column."""
    found: List[Match] = []
    run: List[Position] = []
    run_color = None
    for pos in line + [None]:
        cell = board.cell(pos) if pos is not None else None
        color = cell.color if cell is not None and can_match(cell) else None
        if color is not None and color == run_color:
            run.append(pos)
            continue
        if len(run) >= MIN_MATCH_LENGTH:
            found.append(Match(cells=run, direction=direction, color=run_color))
        run = [pos] if color is not None else []
        run_color = color
    return found


def find_runs(board: Board) -> Tuple[List[Match], List[Match]]:
    """Horizontal and vertical runs, each axis scanned independently."""
    horizontal: List[Match] = []
    for row in range(board.rows):
        horizontal.extend(_scan_line(board, list(board.row_positions(row)), Direction.HORIZONTAL))
    vertical: List[Match] = []
    for col in range(board.cols):
        vertical.extend(_scan_line(board, list(board.column_positions(col)), Direction.VERTICAL))
    return horizontal, vertical


def has_any_match(board: Board) -> bool:
    horizontal, vertical = find_runs(board)
    return bool(horizontal or vertical)


def activation_area(board: Board, activation: Activation) -> Iterable[Position]:
    """Cells swept by an activation on the given board."""
    row, col = activation.position
    special = activation.special
    if special is SpecialType.ROW_CLEAR:
        return board.row_positions(row)
    if special is SpecialType.COLUMN_CLEAR:
        return board.column_positions(col)
    if special is SpecialType.COLOR_CLEAR:
        return [pos for pos in board.positions() if board.cell(pos).color == activation.target_color]
    if special is SpecialType.AREA_CLEAR:
        return board.square(activation.position, BOMB_RADIUS)
    if special is SpecialType.HOMING_STRIKE:
        if activation.target is None:
            return []
        return board.square(activation.target, PROPELLER_RADIUS)
    return []


def select_propeller_target(board: Board, cleared: Set[Position]) -> Position:
    """Pick where a homing strike lands, avoiding cells already being cleared.

    Surviving specials win first (by PROPELLER_TARGET_PRIORITY), then the cell
    with the most surviving same-colored neighbours biased towards the bottom,
    then the lowest surviving colored cell, then the board centre.
    """
    best_special: Position | None = None
    best_priority = 0
    for pos in board.positions():
        if pos in cleared:
            continue
        priority = PROPELLER_TARGET_PRIORITY.get(board.cell(pos).special, 0)
        if priority > best_priority:
            best_special, best_priority = pos, priority
    if best_special is not None:
        return best_special

    best_cluster: Position | None = None
    best_score = 0.0
    for pos in board.positions():
        if pos in cleared:
            continue
        color = board.cell(pos).color
        if color is None:
            continue
        score = sum(
            1
            for neighbour in board.neighbours(pos)
            if neighbour not in cleared and board.cell(neighbour).color == color
        )
        score += pos[0] * PROPELLER_ROW_BONUS
        if score > best_score:
            best_cluster, best_score = pos, score
    if best_cluster is not None:
        return best_cluster

    for row in range(board.rows - 1, -1, -1):
        for pos in board.row_positions(row):
            if pos not in cleared and board.cell(pos).color is not None:
                return pos
    return board.center


def claim_propeller_target(board: Board, cleared: Set[Position]) -> Position:
    """Select a target and reserve its strike area so later strikes look elsewhere."""
    target = select_propeller_target(board, cleared)
    cleared.update(board.square(target, PROPELLER_RADIUS))
    return target


def _obstacle_damage(board: Board, matches: List[Match]) -> List[ObstacleDamage]:
    damage: List[ObstacleDamage] = []
    damaged: Set[Position] = set()

    def queue(pos: Position) -> None:
        obstacle = board.cell(pos).obstacle
        if obstacle is None or obstacle.kind is ObstacleKind.BLOCKER or pos in damaged:
            return
        damaged.add(pos)
        damage.append(ObstacleDamage(position=pos, kind=obstacle.kind, destroyed=obstacle.health <= 1))

    for match in matches:
        for pos in match.cells:
            queue(pos)
    # Ice also cracks when a match happens next to it.
    for match in matches:
        for pos in match.cells:
            for neighbour in board.neighbours(pos):
                obstacle = board.cell(neighbour).obstacle
                if obstacle is not None and obstacle.kind is ObstacleKind.ICE:
                    queue(neighbour)
    return damage


def _creations(board: Board, horizontal: List[Match], vertical: List[Match], matches: List[Match]) -> List[Creation]:
    creations: List[Creation] = []
    rainbow_sites: Set[Position] = set()

    # L and T shapes: a horizontal and a vertical run crossing at one cell.
    for h_match in horizontal:
        for v_match in vertical:
            v_cells = set(v_match.cells)
            for pos in h_match.cells:
                if pos in v_cells and pos not in rainbow_sites:
                    rainbow_sites.add(pos)
                    creations.append(Creation(pos, SpecialType.COLOR_CLEAR, h_match.color))

    for match in matches:
        if len(match) >= RAINBOW_RUN_LENGTH and match.middle not in rainbow_sites:
            rainbow_sites.add(match.middle)
            creations.append(Creation(match.middle, SpecialType.COLOR_CLEAR, match.color))

    rocket_sites: Set[Position] = set()
    for match in matches:
        if len(match) != ROCKET_RUN_LENGTH:
            continue
        pos = match.middle
        if pos in rainbow_sites or pos in rocket_sites:
            continue
        rocket_sites.add(pos)
        special = SpecialType.ROW_CLEAR if match.direction is Direction.HORIZONTAL else SpecialType.COLUMN_CLEAR
        creations.append(Creation(pos, special, match.color))
    return creations


def find_matches(board: Board) -> MatchResult:
    """Detect every match on a settled board and what it sets off.

    Only specials that sit inside a match activate. Specials caught in another
    activation's sweep are destroyed without firing.
    """
    horizontal, vertical = find_runs(board)
    matches = horizontal + vertical
    if not matches:
        return MatchResult()

    activations: List[Activation] = []
    activated: Set[Position] = set()
    for match in matches:
        for pos in match.cells:
            special = board.cell(pos).special
            if not special.is_special or special is SpecialType.HOMING_STRIKE or pos in activated:
                continue
            activated.add(pos)
            target_color = match.color if special is SpecialType.COLOR_CLEAR else None
            activations.append(Activation(position=pos, special=special, target_color=target_color))

    cleared: Set[Position] = set()
    for match in matches:
        cleared.update(match.cells)
    for activation in activations:
        cleared.update(activation_area(board, activation))

    # Homing strikes resolve last so they can avoid everything already doomed.
    for match in matches:
        for pos in match.cells:
            if board.cell(pos).special is not SpecialType.HOMING_STRIKE or pos in activated:
                continue
            activated.add(pos)
            target = claim_propeller_target(board, cleared)
            activations.append(Activation(position=pos, special=SpecialType.HOMING_STRIKE, target=target))

    result = MatchResult(
        matches=matches,
        activations=activations,
        creations=_creations(board, horizontal, vertical, matches),
        obstacle_damage=_obstacle_damage(board, matches),
    )
    logger.debug(
        "found %d matches, %d activations, %d creations",
        len(result.matches),
        len(result.activations),
        len(result.creations),
    )
    return result


def activation_counts(result: MatchResult) -> Dict[SpecialType, int]:
    counts: Dict[SpecialType, int] = {}
    for activation in result.activations:
        counts[activation.special] = counts.get(activation.special, 0) + 1
    return counts
