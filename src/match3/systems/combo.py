"""Fusion effects for a swap of two special tokens."""
from __future__ import annotations

import logging
import random
from typing import Dict, FrozenSet, List, Optional, Set

from match3.components.board import Board, Position
from match3.components.cell import SpecialType
from match3.components.combo import ComboResult, ComboType
from match3.components.match_result import Activation, ObstacleDamage
from match3.constants import (
    BIG_BOMB_RADIUS,
    BOMB_RADIUS,
    FUSION_BASE_SCORE,
    FUSION_PROPELLER_COUNT,
    FUSION_SCORE_PER_CELL,
    PROPELLER_RADIUS,
)
from match3.systems.match import claim_propeller_target, select_propeller_target
from match3.systems.match_resolution import clear_positions, sweep

logger = logging.getLogger(__name__)

ROCKET = 'rocket'
BOMB = 'bomb'
RAINBOW = 'rainbow'
PROPELLER = 'propeller'

_CATEGORY: Dict[SpecialType, str] = {
    SpecialType.ROW_CLEAR: ROCKET,
    SpecialType.COLUMN_CLEAR: ROCKET,
    SpecialType.AREA_CLEAR: BOMB,
    SpecialType.COLOR_CLEAR: RAINBOW,
    SpecialType.HOMING_STRIKE: PROPELLER,
}

COMBO_TABLE: Dict[FrozenSet[str], ComboType] = {
    frozenset({ROCKET}): ComboType.ROCKET_ROCKET,
    frozenset({ROCKET, BOMB}): ComboType.ROCKET_BOMB,
    frozenset({ROCKET, RAINBOW}): ComboType.ROCKET_RAINBOW,
    frozenset({BOMB}): ComboType.BOMB_BOMB,
    frozenset({BOMB, RAINBOW}): ComboType.BOMB_RAINBOW,
    frozenset({RAINBOW}): ComboType.RAINBOW_RAINBOW,
    frozenset({PROPELLER, ROCKET}): ComboType.PROPELLER_ROCKET,
    frozenset({PROPELLER, BOMB}): ComboType.PROPELLER_BOMB,
    frozenset({PROPELLER, RAINBOW}): ComboType.PROPELLER_RAINBOW,
    frozenset({PROPELLER}): ComboType.PROPELLER_PROPELLER,
}


def detect_combo_type(first: SpecialType, second: SpecialType) -> Optional[ComboType]:
    """Return the fusion for two specials, or None unless both are special."""
    if first not in _CATEGORY or second not in _CATEGORY:
        return None
    return COMBO_TABLE.get(frozenset({_CATEGORY[first], _CATEGORY[second]}))


def fusion_score(cleared_count: int) -> int:
    return FUSION_BASE_SCORE + FUSION_SCORE_PER_CELL * cleared_count


def _rows(board: Board, rows: range) -> List[Position]:
    return [pos for row in rows if 0 <= row < board.rows for pos in board.row_positions(row)]


def _cross(board: Board, pos: Position) -> List[Position]:
    return list(board.row_positions(pos[0])) + list(board.column_positions(pos[1]))


def execute_combo(
    board: Board,
    combo_type: ComboType,
    origin: Position,
    color: Optional[str],
    rng: random.Random,
) -> ComboResult:
    """Resolve a fusion centred on ``origin`` against a copy of ``board``.

    ``origin`` is always cleared and is the only cell homing strikes start out
    avoiding. Strikes launched together reserve each other's areas, so they
    never land on the same spot.
    """
    new_board = board.clone()
    area: Dict[Position, None] = {origin: None}
    activations: List[Activation] = []
    targets: List[Position] = []

    def add(positions) -> None:
        for pos in positions:
            area.setdefault(pos, None)

    if combo_type is ComboType.ROCKET_ROCKET:
        add(_cross(new_board, origin))
        activations.append(Activation(origin, SpecialType.ROW_CLEAR))
        activations.append(Activation(origin, SpecialType.COLUMN_CLEAR))
    elif combo_type is ComboType.ROCKET_BOMB:
        add(_rows(new_board, range(origin[0] - 1, origin[0] + 2)))
        activations.append(Activation(origin, SpecialType.ROW_CLEAR))
        activations.append(Activation(origin, SpecialType.AREA_CLEAR))
    elif combo_type is ComboType.BOMB_BOMB:
        add(new_board.square(origin, BIG_BOMB_RADIUS))
        activations.append(Activation(origin, SpecialType.AREA_CLEAR))
    elif combo_type is ComboType.RAINBOW_RAINBOW:
        add(new_board.positions())
        activations.append(Activation(origin, SpecialType.COLOR_CLEAR))
    elif combo_type is ComboType.ROCKET_RAINBOW:
        for pos in list(new_board.positions()):
            if color is None or new_board.cell(pos).color != color:
                continue
            special = SpecialType.ROW_CLEAR if rng.random() > 0.5 else SpecialType.COLUMN_CLEAR
            seeded = Activation(pos, special)
            activations.append(seeded)
            add([pos])
            add(new_board.row_positions(pos[0]) if special is SpecialType.ROW_CLEAR else new_board.column_positions(pos[1]))
    elif combo_type is ComboType.BOMB_RAINBOW:
        for pos in list(new_board.positions()):
            if color is None or new_board.cell(pos).color != color:
                continue
            activations.append(Activation(pos, SpecialType.AREA_CLEAR))
            add(new_board.square(pos, BOMB_RADIUS))
    elif combo_type is ComboType.PROPELLER_BOMB:
        reserved: Set[Position] = set(area)
        target = select_propeller_target(new_board, reserved)
        targets.append(target)
        add(new_board.square(target, BIG_BOMB_RADIUS))
        activations.append(Activation(origin, SpecialType.HOMING_STRIKE, target=target))
        activations.append(Activation(target, SpecialType.AREA_CLEAR))
    else:
        # rocket, propeller and rainbow partners all launch three strikes
        reserved = set(area)
        for _ in range(FUSION_PROPELLER_COUNT):
            target = claim_propeller_target(new_board, reserved)
            targets.append(target)
            add(new_board.square(target, PROPELLER_RADIUS))
            activations.append(Activation(origin, SpecialType.HOMING_STRIKE, target=target))

    to_remove: Set[Position] = set()
    obstacles_cleared: List[ObstacleDamage] = []
    sweep(new_board, list(area), to_remove, obstacles_cleared)
    cleared_cells = clear_positions(new_board, to_remove)
    score = fusion_score(len(cleared_cells))
    logger.debug("%s at %s cleared %d cells for %d", combo_type.value, origin, len(cleared_cells), score)
    return ComboResult(
        combo_type=combo_type,
        origin=origin,
        target_color=color,
        board=new_board,
        score=score,
        cleared_cells=cleared_cells,
        targets=targets,
        activations=activations,
        obstacles_cleared=obstacles_cleared,
    )
