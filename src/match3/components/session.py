"""Session resources: play mode, remaining budget, score and objectives."""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from match3.components.level import ObjectiveProgress


class GameMode(Enum):
    """Classic levels count moves, arcade runs against the clock."""
    CLASSIC = auto()
    ARCADE = auto()


@dataclass
class SessionState:
    """Singleton component storing the session budget and outcome."""
    mode: GameMode = GameMode.CLASSIC
    moves_remaining: Optional[int] = None
    time_remaining: Optional[float] = None
    score: int = 0
    level_id: Optional[int] = None
    game_over: bool = False
    level_complete: bool = False

    @property
    def finished(self) -> bool:
        return self.game_over or self.level_complete

    @property
    def out_of_budget(self) -> bool:
        if self.mode is GameMode.ARCADE:
            return self.time_remaining is not None and self.time_remaining <= 0
        return self.moves_remaining is not None and self.moves_remaining <= 0


@dataclass
class ObjectiveTracker:
    progress: List[ObjectiveProgress] = field(default_factory=list)

    @property
    def all_complete(self) -> bool:
        return bool(self.progress) and all(entry.completed for entry in self.progress)
