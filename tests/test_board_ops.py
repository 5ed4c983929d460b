import random

import pytest

from match3.components.cell import ObstacleKind, SpecialType
from match3.components.level import Difficulty, LevelConfig, ObstaclePlacement
from match3.levels import all_levels
from match3.systems.board_ops import (
    apply_gravity,
    create_initial_board,
    fill_empty_spaces,
    find_valid_swaps,
    has_valid_move,
    reshuffle_board,
    swap_cells,
)
from match3.systems.match import has_any_match

from tests.helpers import board_from_layout, board_letters, filler_board, swappable_board


@pytest.mark.parametrize("seed", range(20))
def test_initial_board_has_no_matches(seed):
    board = create_initial_board(rng=random.Random(seed))
    assert not has_any_match(board)
    assert all(not board.cell(pos).is_empty for pos in board.positions())
    assert not any(board.cell(pos).is_special for pos in board.positions())


def test_easy_difficulty_seeds_rockets_and_propellers():
    board = create_initial_board(Difficulty.EASY, rng=random.Random(3))
    specials = [board.cell(pos).special for pos in board.positions() if board.cell(pos).is_special]
    assert len(specials) == 6
    assert sum(1 for special in specials if special.is_rocket) == 4
    assert specials.count(SpecialType.HOMING_STRIKE) == 2


def test_level_obstacles_are_placed():
    config = LevelConfig(
        id=99,
        moves=10,
        obstacles=[
            ObstaclePlacement(ObstacleKind.BOX, 1, 1, health=3),
            ObstaclePlacement(ObstacleKind.BLOCKER, 2, 2),
        ],
    )
    board = create_initial_board(level_config=config, rng=random.Random(0))
    assert board.cell((1, 1)).obstacle.kind is ObstacleKind.BOX
    assert board.cell((1, 1)).obstacle.health == 3
    assert board.cell((1, 1)).color is not None
    assert board.cell((2, 2)).is_blocker
    assert board.cell((2, 2)).color is None


@pytest.mark.parametrize("level", list(all_levels()), ids=lambda level: str(level.id))
def test_builtin_levels_build_playable_boards(level):
    board = create_initial_board(level_config=level, rng=random.Random(level.id))
    assert not has_any_match(board)
    for placement in level.obstacles:
        assert board.cell((placement.row, placement.col)).obstacle.kind is placement.kind


def test_swap_cells_returns_new_board():
    board = board_from_layout(["RG", "BY"])
    swapped = swap_cells(board, (0, 0), (0, 1))
    assert board_letters(swapped) == ["GR", "BY"]
    assert board_letters(board) == ["RG", "BY"]


def test_gravity_compacts_columns_in_order():
    board = board_from_layout(["R", "G", ".", "B"])
    assert board_letters(apply_gravity(board)) == [".", "R", "G", "B"]


def test_gravity_treats_blockers_as_floors():
    board = board_from_layout(["R", ".", "#", "."])
    assert board_letters(apply_gravity(board)) == [".", "R", "#", "."]
    board = board_from_layout(["RG.", "..B", "#.Y", ".O."])
    assert board_letters(apply_gravity(board)) == ["...", "R..", "#GB", ".OY"]


def test_fill_leaves_no_empty_cells_and_keeps_blockers():
    board = board_from_layout(["R.#", "...", "GB."])
    filled = fill_empty_spaces(board, random.Random(1))
    assert filled.cell((0, 2)).is_blocker
    assert all(not filled.cell(pos).is_empty for pos in filled.positions())
    assert filled.cell((0, 0)).color == 'red'
    assert board.cell((1, 1)).is_empty


@pytest.mark.parametrize("seed", range(20))
def test_refill_of_run_free_board_creates_no_matches(seed):
    rng = random.Random(seed)
    board = filler_board()
    for pos in rng.sample(list(board.positions()), 20):
        board.cell(pos).color = None
    filled = fill_empty_spaces(board, rng)
    assert all(not filled.cell(pos).is_empty for pos in filled.positions())
    assert not has_any_match(filled)


def test_find_valid_swaps():
    board = swappable_board()
    assert ((6, 2), (7, 2)) in find_valid_swaps(board)
    assert has_valid_move(board)


def test_two_adjacent_specials_are_a_valid_move():
    board = filler_board(3, 3)
    assert not has_valid_move(board)
    board.cell((0, 0)).special = SpecialType.ROW_CLEAR
    board.cell((0, 1)).special = SpecialType.AREA_CLEAR
    assert find_valid_swaps(board) == [((0, 0), (0, 1))]


def test_stuck_diagonal_pattern_has_no_moves():
    layout = ["RGBRGB", "GBRGBR", "BRGBRG", "RGBRGB", "GBRGBR", "BRGBRG"]
    board = board_from_layout(layout)
    assert not has_any_match(board)
    assert not has_valid_move(board)


def test_reshuffle_keeps_tokens_and_finds_a_move():
    board = filler_board()
    before = sorted(board.cell(pos).color for pos in board.positions())
    shuffled = reshuffle_board(board, random.Random(11))
    assert sorted(shuffled.cell(pos).color for pos in shuffled.positions()) == before
    assert not has_any_match(shuffled)
    assert has_valid_move(shuffled)


def test_reshuffle_gives_up_on_hopeless_board():
    board = board_from_layout(["RG"])
    with pytest.raises(RuntimeError):
        reshuffle_board(board, random.Random(0), max_attempts=5)
