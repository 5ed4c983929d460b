from __future__ import annotations

from esper import World

from match3.components.board import BoardState
from match3.components.cascade_state import CascadeState
from match3.components.session import ObjectiveTracker, SessionState


def get_board_state(world: World) -> BoardState:
    for _, state in world.get_component(BoardState):
        return state
    raise RuntimeError("BoardState not found")


def get_or_create_cascade_state(world: World) -> CascadeState:
    """Return the shared CascadeState component, creating it if absent."""
    existing = list(world.get_component(CascadeState))
    if existing:
        return existing[0][1]
    world.create_entity(CascadeState())
    return list(world.get_component(CascadeState))[0][1]


def get_session_state(world: World) -> SessionState | None:
    for _, state in world.get_component(SessionState):
        return state
    return None


def get_objective_tracker(world: World) -> ObjectiveTracker | None:
    for _, tracker in world.get_component(ObjectiveTracker):
        return tracker
    return None
