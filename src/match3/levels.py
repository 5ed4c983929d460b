from __future__ import annotations

from typing import Iterable, List, Mapping

from match3.components.cell import ObstacleKind
from match3.components.level import (
    ClearColor,
    ClearObstacle,
    Difficulty,
    LevelConfig,
    ObstaclePlacement,
    ReachScore,
)
from match3.constants import COLORS


def _place(kind: ObstacleKind, cells: Iterable[tuple], health: int = 1) -> List[ObstaclePlacement]:
    return [ObstaclePlacement(kind=kind, row=row, col=col, health=health) for row, col in cells]


_LEVELS: Mapping[int, LevelConfig] = {
    1: LevelConfig(
        id=1,
        name="First Steps",
        moves=25,
        objectives=[ClearColor(COLORS[0], 20)],
    ),
    4: LevelConfig(
        id=4,
        name="Score Rush",
        moves=20,
        objectives=[ReachScore(5000)],
    ),
    5: LevelConfig(
        id=5,
        name="Box Breaker",
        moves=22,
        objectives=[ClearObstacle(ObstacleKind.BOX, 3)],
        obstacles=_place(ObstacleKind.BOX, [(2, 3), (2, 4), (5, 3)], health=2),
    ),
    6: LevelConfig(
        id=6,
        name="Ice Cold",
        moves=20,
        objectives=[ClearColor(COLORS[2], 30)],
        obstacles=_place(ObstacleKind.ICE, [(3, 2), (3, 3), (3, 4), (3, 5)]),
    ),
    7: LevelConfig(
        id=7,
        name="Garden Path",
        moves=24,
        objectives=[ClearObstacle(ObstacleKind.GRASS, 5)],
        obstacles=_place(ObstacleKind.GRASS, [(0, 0), (0, 7), (7, 0), (7, 7), (3, 3)]),
    ),
    10: LevelConfig(
        id=10,
        name="Garden Boss",
        moves=30,
        objectives=[
            ClearColor(COLORS[3], 40),
            ClearObstacle(ObstacleKind.BOX, 4),
            ReachScore(8000),
        ],
        obstacles=_place(ObstacleKind.BOX, [(1, 3), (1, 4), (6, 3), (6, 4)], health=3),
    ),
    12: LevelConfig(
        id=12,
        name="Ice & Chain",
        moves=24,
        objectives=[
            ClearObstacle(ObstacleKind.ICE, 6),
            ClearObstacle(ObstacleKind.CHAIN, 4),
        ],
        obstacles=(
            _place(ObstacleKind.ICE, [(1, 3), (1, 4), (6, 3), (6, 4), (3, 1), (4, 6)])
            + _place(ObstacleKind.CHAIN, [(3, 3), (3, 4), (4, 3), (4, 4)])
        ),
    ),
    14: LevelConfig(
        id=14,
        name="Stone Wall",
        moves=25,
        objectives=[ClearColor(COLORS[0], 30), ClearColor(COLORS[2], 30)],
        obstacles=_place(ObstacleKind.BLOCKER, [(3, 0), (4, 0), (3, 7), (4, 7)]),
    ),
    17: LevelConfig(
        id=17,
        name="High Score",
        moves=18,
        difficulty=Difficulty.EASY,
        objectives=[ReachScore(10000)],
    ),
}


def all_levels() -> Iterable[LevelConfig]:
    return _LEVELS.values()


def get_level(level_id: int) -> LevelConfig:
    try:
        return _LEVELS[level_id]
    except KeyError as exc:
        raise ValueError(f"Unknown level '{level_id}'") from exc
