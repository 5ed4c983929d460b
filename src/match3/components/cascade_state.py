from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from match3.components.board import Position
from match3.components.combo import ComboResult
from match3.components.match_result import ClearedCell, MatchResult, ObstacleDamage


class CascadePhase(Enum):
    IDLE = 'idle'
    ANIMATING = 'animating'
    CHECKING = 'checking'
    REMOVING = 'removing'
    FALLING = 'falling'
    FILLING = 'filling'


@dataclass(slots=True)
class RoundReport:
    """What one cascade round cleared and earned, for objective tracking."""

    cleared_cells: List[ClearedCell]
    score_delta: int
    combo_count: int
    obstacles_cleared: List[ObstacleDamage] = field(default_factory=list)
    combo: Optional[ComboResult] = None

    @property
    def cleared_positions(self) -> List[Position]:
        return [(row, col) for row, col, _ in self.cleared_cells]


@dataclass(slots=True)
class CascadeState:
    """Tracks the move currently being resolved; only one at a time."""

    phase: CascadePhase = CascadePhase.IDLE
    combo_count: int = 0
    depth: int = 0
    pending_swap: Optional[Tuple[Position, Position]] = None
    pending_result: Optional[MatchResult] = None
    pending_combo: Optional[ComboResult] = None
    revert_pending: bool = False
    awaiting_animation: Optional[str] = None

    @property
    def idle(self) -> bool:
        return self.phase is CascadePhase.IDLE
