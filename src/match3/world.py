from __future__ import annotations

import random

from esper import World

from match3.events.bus import EventBus
from match3.components.board import Board, BoardState
from match3.components.cascade_state import CascadeState
from match3.components.level import Difficulty, LevelConfig, ObjectiveProgress
from match3.components.session import GameMode, ObjectiveTracker, SessionState
from match3.constants import DEFAULT_MOVES, DEFAULT_TIME_LIMIT
from match3.systems.board_ops import create_initial_board


def create_world(
    event_bus: EventBus,
    *,
    difficulty: Difficulty = Difficulty.MEDIUM,
    level_config: LevelConfig | None = None,
    game_mode: GameMode = GameMode.CLASSIC,
    max_moves: int = DEFAULT_MOVES,
    time_limit: float = DEFAULT_TIME_LIMIT,
    board: Board | None = None,
    rng: random.Random | None = None,
) -> World:
    """Build a world holding one board plus the session resources around it.

    ``event_bus`` is accepted for symmetry with the systems that get attached
    afterwards; the world itself does not subscribe to anything.
    """
    world = World()
    setattr(world, "random", rng or random.Random())

    if board is None:
        board = create_initial_board(difficulty, level_config, world.random)
    world.create_entity(BoardState(board=board))
    world.create_entity(CascadeState())

    moves = level_config.moves if level_config is not None else max_moves
    session = SessionState(
        mode=game_mode,
        moves_remaining=None if game_mode is GameMode.ARCADE else moves,
        time_remaining=time_limit if game_mode is GameMode.ARCADE else None,
        level_id=level_config.id if level_config is not None else None,
    )
    objectives = level_config.objectives if level_config is not None else []
    world.create_entity(
        session,
        ObjectiveTracker(progress=[ObjectiveProgress(objective=objective) for objective in objectives]),
    )
    return world
