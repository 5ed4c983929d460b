from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from match3.components.board import Board, Position
from match3.components.cell import ObstacleKind, SpecialType


class Direction(Enum):
    HORIZONTAL = 'horizontal'
    VERTICAL = 'vertical'


@dataclass(slots=True)
class Match:
    """Maximal run of three or more same-colored matchable cells."""

    cells: List[Position]
    direction: Direction
    color: str

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def middle(self) -> Position:
        return self.cells[len(self.cells) // 2]


@dataclass(slots=True)
class Activation:
    """A special token that took part in a match and fires this round.

    ``target_color`` is set for color clears, ``target`` for homing strikes.
    """

    position: Position
    special: SpecialType
    target_color: Optional[str] = None
    target: Optional[Position] = None


@dataclass(slots=True)
class Creation:
    """Special token to place at ``position`` instead of emptying it."""

    position: Position
    special: SpecialType
    color: str


@dataclass(slots=True)
class ObstacleDamage:
    position: Position
    kind: ObstacleKind
    destroyed: bool


@dataclass(slots=True)
class MatchResult:
    matches: List[Match] = field(default_factory=list)
    activations: List[Activation] = field(default_factory=list)
    creations: List[Creation] = field(default_factory=list)
    obstacle_damage: List[ObstacleDamage] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.matches)

    def activations_of(self, *specials: SpecialType) -> List[Activation]:
        return [activation for activation in self.activations if activation.special in specials]

    def creation_at(self, pos: Position) -> Optional[Creation]:
        """Creation for pos, color clears first."""
        found: Optional[Creation] = None
        for creation in self.creations:
            if creation.position != pos:
                continue
            if creation.special is SpecialType.COLOR_CLEAR:
                return creation
            if found is None:
                found = creation
        return found

    def matched_positions(self) -> List[Position]:
        seen: set[Position] = set()
        ordered: List[Position] = []
        for match in self.matches:
            for pos in match.cells:
                if pos not in seen:
                    seen.add(pos)
                    ordered.append(pos)
        return ordered


ClearedCell = Tuple[int, int, Optional[str]]


@dataclass(slots=True)
class RemovalResult:
    """Board after one resolution round plus what it cost."""

    board: Board
    cleared_count: int
    obstacles_cleared: List[ObstacleDamage] = field(default_factory=list)
    cleared_cells: List[ClearedCell] = field(default_factory=list)
