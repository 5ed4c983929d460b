"""Level configuration and objective bookkeeping consumed by the session layer."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from match3.components.cell import ObstacleKind


class Difficulty(Enum):
    EASY = 'easy'
    MEDIUM = 'medium'


@dataclass(slots=True)
class ObstaclePlacement:
    kind: ObstacleKind
    row: int
    col: int
    health: int = 1


@dataclass(slots=True)
class ClearColor:
    color: str
    count: int

    @property
    def target(self) -> int:
        return self.count


@dataclass(slots=True)
class ReachScore:
    score: int

    @property
    def target(self) -> int:
        return self.score


@dataclass(slots=True)
class ClearObstacle:
    kind: ObstacleKind
    count: int

    @property
    def target(self) -> int:
        return self.count


Objective = Union[ClearColor, ReachScore, ClearObstacle]


@dataclass(slots=True)
class ObjectiveProgress:
    objective: Objective
    current: int = 0
    completed: bool = False

    @property
    def target(self) -> int:
        return self.objective.target


@dataclass(slots=True)
class LevelConfig:
    id: int
    moves: int
    objectives: List[Objective] = field(default_factory=list)
    name: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    obstacles: List[ObstaclePlacement] = field(default_factory=list)
