from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SpecialType(Enum):
    """Power token carried by a cell."""

    NONE = 'none'
    ROW_CLEAR = 'rocket-h'
    COLUMN_CLEAR = 'rocket-v'
    AREA_CLEAR = 'bomb'
    HOMING_STRIKE = 'propeller'
    COLOR_CLEAR = 'rainbow'

    @property
    def is_special(self) -> bool:
        return self is not SpecialType.NONE

    @property
    def is_rocket(self) -> bool:
        return self in (SpecialType.ROW_CLEAR, SpecialType.COLUMN_CLEAR)


# Homing strike preference when several specials survive the round.
# Propellers never target other propellers.
PROPELLER_TARGET_PRIORITY = {
    SpecialType.COLOR_CLEAR: 3,
    SpecialType.AREA_CLEAR: 2,
    SpecialType.ROW_CLEAR: 1,
    SpecialType.COLUMN_CLEAR: 1,
}


class ObstacleKind(Enum):
    BOX = 'box'
    ICE = 'ice'
    CHAIN = 'chain'
    GRASS = 'grass'
    BLOCKER = 'blocker'


@dataclass(slots=True)
class Obstacle:
    """Hit-point overlay sitting on a cell.

    Blockers are the exception: they occupy the cell entirely, carry no color
    and are never damaged.
    """

    kind: ObstacleKind
    health: int = 1


@dataclass(slots=True)
class Cell:
    """Single grid slot. ``color`` is None while the slot is empty."""

    color: Optional[str] = None
    special: SpecialType = SpecialType.NONE
    obstacle: Optional[Obstacle] = None

    @classmethod
    def empty(cls) -> 'Cell':
        return cls()

    @classmethod
    def blocker(cls) -> 'Cell':
        return cls(obstacle=Obstacle(ObstacleKind.BLOCKER, 1))

    @property
    def is_empty(self) -> bool:
        return self.color is None and not self.is_blocker

    @property
    def is_blocker(self) -> bool:
        return self.obstacle is not None and self.obstacle.kind is ObstacleKind.BLOCKER

    @property
    def is_special(self) -> bool:
        return self.special.is_special

    def copy(self) -> 'Cell':
        obstacle = None
        if self.obstacle is not None:
            obstacle = Obstacle(self.obstacle.kind, self.obstacle.health)
        return Cell(color=self.color, special=self.special, obstacle=obstacle)


def can_match(cell: Cell) -> bool:
    """A cell matches when it has a color and is not a blocker."""
    return cell.color is not None and not cell.is_blocker


def can_swap(cell: Cell) -> bool:
    return can_match(cell)
