from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from match3.components.board import Board, Position
from match3.components.match_result import Activation, ClearedCell, ObstacleDamage


class ComboType(Enum):
    """Fusion effect chosen by the unordered pair of swapped specials."""

    ROCKET_ROCKET = 'rocket-rocket'          # giant cross
    ROCKET_BOMB = 'rocket-bomb'              # three rows
    ROCKET_RAINBOW = 'rocket-rainbow'        # every cell of a color fires a rocket
    BOMB_BOMB = 'bomb-bomb'                  # 5x5 blast
    BOMB_RAINBOW = 'bomb-rainbow'            # every cell of a color explodes
    RAINBOW_RAINBOW = 'rainbow-rainbow'      # whole board
    PROPELLER_ROCKET = 'propeller-rocket'    # three homing strikes
    PROPELLER_BOMB = 'propeller-bomb'        # one strike with a 5x5 blast
    PROPELLER_RAINBOW = 'propeller-rainbow'  # three homing strikes
    PROPELLER_PROPELLER = 'propeller-propeller'


@dataclass(slots=True)
class ComboResult:
    combo_type: ComboType
    origin: Position
    target_color: Optional[str]
    board: Board
    score: int
    cleared_cells: List[ClearedCell] = field(default_factory=list)
    targets: List[Position] = field(default_factory=list)
    activations: List[Activation] = field(default_factory=list)
    obstacles_cleared: List[ObstacleDamage] = field(default_factory=list)

    @property
    def cleared_count(self) -> int:
        return len(self.cleared_cells)
