"""Move resolution: swap, fuse or match, then settle the board round by round."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from esper import World

from match3.components.board import Board, Position
from match3.components.cascade_state import CascadePhase, CascadeState, RoundReport
from match3.components.combo import ComboResult
from match3.components.match_result import MatchResult
from match3.events.bus import (
    EVENT_ANIMATION_COMPLETE,
    EVENT_ANIMATION_START,
    EVENT_CASCADE_COMPLETE,
    EVENT_CASCADE_STEP,
    EVENT_COMBO_TRIGGERED,
    EVENT_GRAVITY_APPLIED,
    EVENT_MATCH_CLEARED,
    EVENT_MATCH_FOUND,
    EVENT_REFILL_COMPLETED,
    EVENT_SWAP_ACCEPTED,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REQUEST,
    EVENT_SWAP_REVERTED,
    EventBus,
)
from match3.systems.board_ops import (
    apply_gravity,
    fill_empty_spaces,
    has_valid_move,
    is_swap_allowed,
    swap_cells,
)
from match3.systems.combo import detect_combo_type, execute_combo
from match3.systems.match import find_matches
from match3.systems.match_resolution import remove_matches, round_score
from match3.systems.state_utils import get_board_state, get_or_create_cascade_state, get_session_state

logger = logging.getLogger(__name__)

# Upper bound on rounds per move; a real cascade settles long before this.
MAX_CASCADE_ROUNDS = 100


@dataclass(slots=True)
class SwapOutcome:
    board: Board
    match_result: Optional[MatchResult] = None
    combo_result: Optional[ComboResult] = None
    is_reverted: bool = False
    rejected: bool = False


@dataclass(slots=True)
class CascadeOutcome:
    board: Board
    rounds: List[RoundReport] = field(default_factory=list)

    @property
    def total_score(self) -> int:
        return sum(report.score_delta for report in self.rounds)


@dataclass(slots=True)
class MoveOutcome:
    swap: SwapOutcome
    board: Board
    rounds: List[RoundReport] = field(default_factory=list)
    has_valid_move: bool = True

    @property
    def total_score(self) -> int:
        return sum(report.score_delta for report in self.rounds)


def apply_swap(board: Board, src: Position, dst: Position, rng: random.Random | None = None) -> SwapOutcome:
    """Validate and perform a swap without settling the board.

    Out-of-bounds, non-adjacent or blocker swaps come back ``rejected`` with the
    input board. Two specials fuse immediately and the returned board is the
    post-fusion board. Any other swap that matches nothing comes back
    ``is_reverted`` with the input board.
    """
    if not is_swap_allowed(board, src, dst):
        logger.warning("rejected swap %s -> %s", src, dst)
        return SwapOutcome(board=board, rejected=True)
    first, second = board.cell(src), board.cell(dst)
    combo_type = detect_combo_type(first.special, second.special)
    swapped = swap_cells(board, src, dst)
    if combo_type is not None:
        combo = execute_combo(swapped, combo_type, dst, first.color or second.color, rng or random.Random())
        return SwapOutcome(board=combo.board, combo_result=combo)
    result = find_matches(swapped)
    if not result:
        return SwapOutcome(board=board, match_result=result, is_reverted=True)
    return SwapOutcome(board=swapped, match_result=result)


def settle(board: Board, rng: random.Random | None = None) -> Board:
    """Gravity followed by refill."""
    return fill_empty_spaces(apply_gravity(board), rng)


def combo_report(combo: ComboResult, combo_count: int) -> RoundReport:
    return RoundReport(
        cleared_cells=combo.cleared_cells,
        score_delta=combo.score,
        combo_count=combo_count,
        obstacles_cleared=combo.obstacles_cleared,
        combo=combo,
    )


def resolve_round(board: Board, result: MatchResult, combo_count: int) -> tuple[Board, RoundReport]:
    """Remove one round of matches; the returned board still has holes."""
    score = round_score(result, combo_count)
    removal = remove_matches(board, result)
    report = RoundReport(
        cleared_cells=removal.cleared_cells,
        score_delta=score,
        combo_count=combo_count,
        obstacles_cleared=removal.obstacles_cleared,
    )
    return removal.board, report


def resolve_cascade(board: Board, rng: random.Random | None = None, combo_count: int = 0) -> CascadeOutcome:
    """Run detect, remove, gravity and refill until a check finds nothing."""
    rng = rng or random.Random()
    rounds: List[RoundReport] = []
    for _ in range(MAX_CASCADE_ROUNDS):
        result = find_matches(board)
        if not result:
            break
        board, report = resolve_round(board, result, combo_count)
        rounds.append(report)
        combo_count += 1
        board = settle(board, rng)
    else:
        logger.warning("cascade stopped after %d rounds", MAX_CASCADE_ROUNDS)
    return CascadeOutcome(board=board, rounds=rounds)


def play_move(board: Board, src: Position, dst: Position, rng: random.Random | None = None) -> MoveOutcome:
    """Swap and settle completely; the speculative entry point for move pickers."""
    rng = rng or random.Random()
    swap = apply_swap(board, src, dst, rng)
    if swap.rejected or swap.is_reverted:
        return MoveOutcome(swap=swap, board=swap.board, has_valid_move=has_valid_move(swap.board))
    rounds: List[RoundReport] = []
    current = swap.board
    combo_count = 0
    if swap.combo_result is not None:
        rounds.append(combo_report(swap.combo_result, combo_count))
        combo_count += 1
        current = settle(current, rng)
    cascade = resolve_cascade(current, rng, combo_count)
    rounds.extend(cascade.rounds)
    return MoveOutcome(
        swap=swap,
        board=cascade.board,
        rounds=rounds,
        has_valid_move=has_valid_move(cascade.board),
    )


class CascadeSystem:
    """Owns the live board for the duration of a move and drives its phases.

    With ``paced`` set, every phase announces an animation and waits for the
    matching EVENT_ANIMATION_COMPLETE before moving on; otherwise phases run
    back to back inside the swap request handler.
    """

    def __init__(self, world: World, event_bus: EventBus, *, paced: bool = False):
        self.world = world
        self.event_bus = event_bus
        self.paced = paced
        self.event_bus.subscribe(EVENT_SWAP_REQUEST, self.on_swap_request)
        self.event_bus.subscribe(EVENT_ANIMATION_COMPLETE, self.on_animation_complete)

    @property
    def rng(self) -> random.Random:
        rng = getattr(self.world, "random", None)
        if not isinstance(rng, random.Random):
            rng = random.Random()
            setattr(self.world, "random", rng)
        return rng

    def on_swap_request(self, sender, **kwargs):
        src = kwargs.get('src')
        dst = kwargs.get('dst')
        if not src or not dst:
            return
        state = get_or_create_cascade_state(self.world)
        if not state.idle:
            self.event_bus.emit(EVENT_SWAP_REJECTED, src=src, dst=dst, reason='busy')
            return
        session = get_session_state(self.world)
        if session is not None and session.finished:
            self.event_bus.emit(EVENT_SWAP_REJECTED, src=src, dst=dst, reason='session_over')
            return
        board_state = get_board_state(self.world)
        outcome = apply_swap(board_state.board, src, dst, self.rng)
        if outcome.rejected:
            self.event_bus.emit(EVENT_SWAP_REJECTED, src=src, dst=dst, reason='invalid')
            return
        state.phase = CascadePhase.ANIMATING
        state.pending_swap = (src, dst)
        state.depth = 0
        if outcome.is_reverted:
            state.revert_pending = True
        else:
            state.pending_combo = outcome.combo_result
            # The swap is only committed when it matched or fused.
            if outcome.combo_result is None:
                board_state.board = outcome.board
            else:
                board_state.board = swap_cells(board_state.board, src, dst)
            self.event_bus.emit(
                EVENT_SWAP_ACCEPTED, src=src, dst=dst, combo=outcome.combo_result is not None
            )
        self._animate(state, 'swap', [src, dst])
        self._run()

    def on_animation_complete(self, sender, **kwargs):
        state = get_or_create_cascade_state(self.world)
        kind = kwargs.get('kind')
        if state.awaiting_animation is None or kind != state.awaiting_animation:
            return
        state.awaiting_animation = None
        self._run()

    def _animate(self, state: CascadeState, kind: str, items: list) -> None:
        if not self.paced:
            return
        state.awaiting_animation = kind
        self.event_bus.emit(EVENT_ANIMATION_START, kind=kind, items=items)

    def _run(self) -> None:
        state = get_or_create_cascade_state(self.world)
        while state.awaiting_animation is None and not state.idle:
            self._step(state)

    def _step(self, state: CascadeState) -> None:
        board_state = get_board_state(self.world)
        phase = state.phase
        if phase is CascadePhase.ANIMATING:
            if state.revert_pending:
                src, dst = state.pending_swap
                state.revert_pending = False
                state.pending_swap = None
                state.phase = CascadePhase.IDLE
                self.event_bus.emit(EVENT_SWAP_REVERTED, src=src, dst=dst)
                return
            if state.pending_combo is not None:
                state.depth += 1
                self.event_bus.emit(EVENT_COMBO_TRIGGERED, combo=state.pending_combo)
                state.phase = CascadePhase.REMOVING
                self._animate(state, "combo", [state.pending_combo.origin, *state.pending_combo.targets])
                return
            state.phase = CascadePhase.CHECKING
        elif phase is CascadePhase.CHECKING:
            result = find_matches(board_state.board)
            if not result:
                self._finish(state)
                return
            if state.depth >= MAX_CASCADE_ROUNDS:
                logger.warning("cascade stopped after %d rounds", MAX_CASCADE_ROUNDS)
                self._finish(state)
                return
            state.depth += 1
            state.pending_result = result
            positions = sorted(result.matched_positions())
            self.event_bus.emit(EVENT_CASCADE_STEP, depth=state.depth, positions=positions)
            self.event_bus.emit(EVENT_MATCH_FOUND, result=result, positions=positions, depth=state.depth)
            state.phase = CascadePhase.REMOVING
            self._animate(state, 'fade', positions)
        elif phase is CascadePhase.REMOVING:
            if state.pending_combo is not None:
                combo = state.pending_combo
                board_state.board = combo.board
                report = combo_report(combo, state.combo_count)
                state.pending_combo = None
            else:
                board_state.board, report = resolve_round(board_state.board, state.pending_result, state.combo_count)
                state.pending_result = None
            state.combo_count += 1
            self.event_bus.emit(EVENT_MATCH_CLEARED, report=report)
            state.phase = CascadePhase.FALLING
            self._animate(state, 'clear', report.cleared_positions)
        elif phase is CascadePhase.FALLING:
            board_state.board = apply_gravity(board_state.board)
            self.event_bus.emit(EVENT_GRAVITY_APPLIED, board=board_state.board)
            state.phase = CascadePhase.FILLING
            self._animate(state, 'fall', [])
        elif phase is CascadePhase.FILLING:
            before = board_state.board
            board_state.board = fill_empty_spaces(before, self.rng)
            new_tiles = [pos for pos in before.positions() if before.cell(pos).is_empty]
            self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=new_tiles)
            state.phase = CascadePhase.CHECKING
            self._animate(state, 'refill', new_tiles)

    def _finish(self, state: CascadeState) -> None:
        depth = state.depth
        state.phase = CascadePhase.IDLE
        state.combo_count = 0
        state.depth = 0
        state.pending_swap = None
        board = get_board_state(self.world).board
        movable = has_valid_move(board)
        logger.debug("cascade complete after %d rounds, valid move left: %s", depth, movable)
        self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth, has_valid_move=movable)
