"""Move/time budget, score and end-of-level decisions for a single session."""
from __future__ import annotations

import logging

from esper import World

from match3.components.session import GameMode
from match3.events.bus import (
    EVENT_BOARD_RESHUFFLED,
    EVENT_CASCADE_COMPLETE,
    EVENT_GAME_OVER,
    EVENT_LEVEL_COMPLETE,
    EVENT_MATCH_CLEARED,
    EVENT_MOVES_CHANGED,
    EVENT_NO_MOVES,
    EVENT_SCORE_CHANGED,
    EVENT_SWAP_ACCEPTED,
    EVENT_TICK,
    EventBus,
)
from match3.systems.board_ops import reshuffle_board
from match3.systems.state_utils import (
    get_board_state,
    get_objective_tracker,
    get_or_create_cascade_state,
    get_session_state,
)

logger = logging.getLogger(__name__)


class SessionSystem:
    """Spends the budget on accepted swaps and decides the session outcome.

    Outcomes are only evaluated once a cascade has finished so a move that
    clears the last objective on the final move still wins.
    """

    def __init__(self, world: World, event_bus: EventBus, *, auto_reshuffle: bool = True) -> None:
        self.world = world
        self.event_bus = event_bus
        self.auto_reshuffle = auto_reshuffle
        self.event_bus.subscribe(EVENT_SWAP_ACCEPTED, self.on_swap_accepted)
        self.event_bus.subscribe(EVENT_MATCH_CLEARED, self.on_match_cleared)
        self.event_bus.subscribe(EVENT_TICK, self.on_tick)
        self.event_bus.subscribe(EVENT_CASCADE_COMPLETE, self.on_cascade_complete)

    def on_swap_accepted(self, sender, **kwargs):
        session = get_session_state(self.world)
        if session is None or session.finished or session.moves_remaining is None:
            return
        session.moves_remaining = max(0, session.moves_remaining - 1)
        self.event_bus.emit(EVENT_MOVES_CHANGED, moves_remaining=session.moves_remaining)

    def on_match_cleared(self, sender, **kwargs):
        report = kwargs.get('report')
        session = get_session_state(self.world)
        if report is None or session is None:
            return
        delta = report.score_delta
        if not delta:
            return
        session.score += delta
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=session.score, delta=delta)

    def on_tick(self, sender, **kwargs):
        session = get_session_state(self.world)
        if session is None or session.mode is not GameMode.ARCADE or session.finished:
            return
        if session.time_remaining is None:
            return
        dt = float(kwargs.get('dt', 0.0))
        session.time_remaining = max(0.0, session.time_remaining - dt)
        # A running cascade reports through on_cascade_complete instead.
        if session.out_of_budget and get_or_create_cascade_state(self.world).idle:
            self._evaluate(has_valid_move=True)

    def on_cascade_complete(self, sender, **kwargs):
        self._evaluate(has_valid_move=kwargs.get('has_valid_move', True))

    def _evaluate(self, *, has_valid_move: bool) -> None:
        session = get_session_state(self.world)
        if session is None or session.finished:
            return
        tracker = get_objective_tracker(self.world)
        if tracker is not None and tracker.all_complete:
            session.level_complete = True
            logger.info("level %s complete with score %d", session.level_id, session.score)
            self.event_bus.emit(
                EVENT_LEVEL_COMPLETE, score=session.score, moves_remaining=session.moves_remaining
            )
            return
        if session.out_of_budget:
            session.game_over = True
            reason = 'out_of_time' if session.mode is GameMode.ARCADE else 'out_of_moves'
            logger.info("game over (%s) with score %d", reason, session.score)
            self.event_bus.emit(EVENT_GAME_OVER, score=session.score, reason=reason)
            return
        if not has_valid_move:
            self.event_bus.emit(EVENT_NO_MOVES)
            if self.auto_reshuffle:
                self._reshuffle()

    def _reshuffle(self) -> None:
        board_state = get_board_state(self.world)
        rng = getattr(self.world, "random", None)
        board_state.board = reshuffle_board(board_state.board, rng)
        logger.debug("board reshuffled after running out of moves")
        self.event_bus.emit(EVENT_BOARD_RESHUFFLED, reason='no_moves')
