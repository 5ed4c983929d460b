import random

import pytest

from match3.components.cascade_state import CascadePhase
from match3.components.cell import Cell, Obstacle, ObstacleKind, SpecialType
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
from match3.systems.cascade import CascadeSystem, apply_swap, play_move, resolve_cascade
from match3.systems.match import has_any_match
from match3.systems.state_utils import get_board_state, get_or_create_cascade_state
from match3.world import create_world

from tests.helpers import filler_board, swappable_board

ALL_EVENTS = [
    EVENT_SWAP_ACCEPTED,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_REVERTED,
    EVENT_COMBO_TRIGGERED,
    EVENT_MATCH_FOUND,
    EVENT_MATCH_CLEARED,
    EVENT_GRAVITY_APPLIED,
    EVENT_REFILL_COMPLETED,
    EVENT_CASCADE_STEP,
    EVENT_CASCADE_COMPLETE,
]


def record(bus, events=ALL_EVENTS):
    log = []
    for name in events:
        bus.subscribe(name, lambda sender, _name=name, **payload: log.append((_name, payload)))
    return log


def names(log):
    return [name for name, _ in log]


def test_rejected_swaps_leave_board_alone():
    board = filler_board()
    board.set_cell((5, 5), Cell.blocker())
    for src, dst in [((0, 0), (0, 2)), ((0, 0), (-1, 0)), ((7, 7), (7, 8)), ((5, 4), (5, 5)), ((1, 1), (2, 2))]:
        outcome = apply_swap(board, src, dst, random.Random(0))
        assert outcome.rejected
        assert outcome.board is board


def test_swap_without_match_is_reverted():
    board = filler_board()
    outcome = apply_swap(board, (0, 0), (0, 1), random.Random(0))
    assert outcome.is_reverted
    assert not outcome.rejected
    assert outcome.board is board
    assert outcome.board == filler_board()


def test_matching_swap_returns_swapped_board():
    outcome = apply_swap(swappable_board(), (6, 2), (7, 2), random.Random(0))
    assert not outcome.is_reverted
    assert outcome.match_result.matches[0].cells == [(7, 0), (7, 1), (7, 2)]
    assert outcome.board.cell((7, 2)).color == 'green'


def test_play_move_settles_the_board():
    outcome = play_move(swappable_board(), (6, 2), (7, 2), random.Random(4))
    assert outcome.rounds
    assert outcome.rounds[0].score_delta == 30
    assert outcome.rounds[0].combo_count == 0
    assert [report.combo_count for report in outcome.rounds] == list(range(len(outcome.rounds)))
    assert outcome.total_score >= 30
    assert not has_any_match(outcome.board)
    assert all(not outcome.board.cell(pos).is_empty for pos in outcome.board.positions())


@pytest.mark.parametrize("seed", range(30))
def test_play_move_never_moves_or_damages_blockers(seed):
    board = swappable_board()
    blockers = [(0, 3), (3, 3), (5, 0), (7, 6)]
    for pos in blockers:
        board.set_cell(pos, Cell.blocker())
    board.cell((7, 1)).special = SpecialType.ROW_CLEAR
    board.cell((6, 0)).obstacle = Obstacle(ObstacleKind.ICE, 2)
    outcome = play_move(board, (6, 2), (7, 2), random.Random(seed))
    assert outcome.rounds
    for pos in blockers:
        assert outcome.board.cell(pos) == Cell.blocker()


def test_play_move_counts_fusion_as_first_round():
    board = filler_board()
    board.cell((3, 3)).special = SpecialType.ROW_CLEAR
    board.cell((3, 4)).special = SpecialType.COLUMN_CLEAR
    outcome = play_move(board, (3, 4), (3, 3), random.Random(2))
    first = outcome.rounds[0]
    assert first.combo is not None
    assert first.score_delta == 425
    assert all(report.combo_count == index for index, report in enumerate(outcome.rounds))
    assert not has_any_match(outcome.board)


def test_cascade_on_settled_board_does_nothing():
    board = filler_board()
    outcome = resolve_cascade(board, random.Random(0))
    assert outcome.rounds == []
    assert outcome.board is board
    assert outcome.total_score == 0


def test_cascade_starting_combo_count_scales_first_round():
    board = swappable_board()
    swapped = apply_swap(board, (6, 2), (7, 2), random.Random(0)).board
    outcome = resolve_cascade(swapped, random.Random(0), combo_count=2)
    assert outcome.rounds[0].score_delta == 60


def test_cascade_system_resolves_a_move_through_events():
    bus = EventBus()
    world = create_world(bus, board=swappable_board(), rng=random.Random(8))
    CascadeSystem(world, bus)
    log = record(bus)
    bus.emit(EVENT_SWAP_REQUEST, src=(6, 2), dst=(7, 2))
    sequence = names(log)
    assert sequence[0] == EVENT_SWAP_ACCEPTED
    assert sequence[1:6] == [
        EVENT_CASCADE_STEP,
        EVENT_MATCH_FOUND,
        EVENT_MATCH_CLEARED,
        EVENT_GRAVITY_APPLIED,
        EVENT_REFILL_COMPLETED,
    ]
    assert sequence[-1] == EVENT_CASCADE_COMPLETE
    assert sequence.count(EVENT_CASCADE_COMPLETE) == 1
    cleared = [payload['report'] for name, payload in log if name == EVENT_MATCH_CLEARED]
    assert cleared[0].score_delta == 30
    complete = log[-1][1]
    assert complete['depth'] == len(cleared)
    assert 'has_valid_move' in complete
    assert get_or_create_cascade_state(world).phase is CascadePhase.IDLE
    assert not has_any_match(get_board_state(world).board)


def test_cascade_system_reverts_non_matching_swap():
    bus = EventBus()
    world = create_world(bus, board=filler_board(), rng=random.Random(0))
    CascadeSystem(world, bus)
    log = record(bus)
    bus.emit(EVENT_SWAP_REQUEST, src=(0, 0), dst=(0, 1))
    assert names(log) == [EVENT_SWAP_REVERTED]
    assert get_board_state(world).board == filler_board()
    assert get_or_create_cascade_state(world).idle


def test_cascade_system_rejects_invalid_swap():
    bus = EventBus()
    world = create_world(bus, board=filler_board(), rng=random.Random(0))
    CascadeSystem(world, bus)
    log = record(bus)
    bus.emit(EVENT_SWAP_REQUEST, src=(0, 0), dst=(2, 0))
    assert names(log) == [EVENT_SWAP_REJECTED]
    assert log[0][1]['reason'] == 'invalid'


def test_cascade_system_runs_fusions():
    board = filler_board()
    board.cell((3, 3)).special = SpecialType.ROW_CLEAR
    board.cell((3, 4)).special = SpecialType.COLUMN_CLEAR
    bus = EventBus()
    world = create_world(bus, board=board, rng=random.Random(0))
    CascadeSystem(world, bus)
    log = record(bus)
    bus.emit(EVENT_SWAP_REQUEST, src=(3, 4), dst=(3, 3))
    sequence = names(log)
    assert sequence[:3] == [EVENT_SWAP_ACCEPTED, EVENT_COMBO_TRIGGERED, EVENT_MATCH_CLEARED]
    assert log[0][1]['combo'] is True
    report = log[2][1]['report']
    assert report.combo is not None
    assert report.score_delta == 425
    assert sequence[-1] == EVENT_CASCADE_COMPLETE


def test_paced_cascade_waits_for_animations_and_refuses_new_swaps():
    bus = EventBus()
    world = create_world(bus, board=swappable_board(), rng=random.Random(8))
    CascadeSystem(world, bus, paced=True)
    log = record(bus)
    animations = []
    bus.subscribe(EVENT_ANIMATION_START, lambda sender, **payload: animations.append(payload['kind']))

    bus.emit(EVENT_SWAP_REQUEST, src=(6, 2), dst=(7, 2))
    state = get_or_create_cascade_state(world)
    assert animations == ['swap']
    assert state.awaiting_animation == 'swap'
    assert names(log) == [EVENT_SWAP_ACCEPTED]

    bus.emit(EVENT_SWAP_REQUEST, src=(0, 0), dst=(0, 1))
    assert log[-1][0] == EVENT_SWAP_REJECTED
    assert log[-1][1]['reason'] == 'busy'

    # Completions for the wrong kind are ignored.
    bus.emit(EVENT_ANIMATION_COMPLETE, kind='fall')
    assert state.awaiting_animation == 'swap'

    for _ in range(200):
        if state.idle:
            break
        bus.emit(EVENT_ANIMATION_COMPLETE, kind=state.awaiting_animation)
    assert state.idle
    assert animations[:5] == ['swap', 'fade', 'clear', 'fall', 'refill']
    assert names(log)[-1] == EVENT_CASCADE_COMPLETE
    assert not has_any_match(get_board_state(world).board)
