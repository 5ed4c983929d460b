from match3.components.board import Board, are_adjacent
from match3.components.cell import Cell, Obstacle, ObstacleKind, SpecialType, can_match, can_swap

from tests.helpers import board_from_layout, filler_board


def test_default_board_is_empty_8x8():
    board = Board()
    assert (board.rows, board.cols) == (8, 8)
    assert all(board.cell(pos).is_empty for pos in board.positions())
    assert len(list(board.positions())) == 64


def test_bounds_and_adjacency():
    board = Board(rows=3, cols=4)
    assert board.in_bounds(0, 0)
    assert board.in_bounds(2, 3)
    assert not board.in_bounds(3, 0)
    assert not board.in_bounds(0, -1)
    assert are_adjacent((1, 1), (1, 2))
    assert are_adjacent((1, 1), (0, 1))
    assert not are_adjacent((1, 1), (2, 2))
    assert not are_adjacent((1, 1), (1, 1))
    assert not are_adjacent((0, 0), (0, 2))


def test_neighbours_and_square_are_clipped():
    board = Board()
    assert sorted(board.neighbours((0, 0))) == [(0, 1), (1, 0)]
    assert len(list(board.neighbours((3, 3)))) == 4
    assert len(list(board.square((0, 0), 1))) == 4
    assert len(list(board.square((3, 3), 1))) == 9
    assert len(list(board.square((3, 3), 2))) == 25
    assert board.center == (4, 4)


def test_blocker_never_matches_or_swaps():
    blocker = Cell.blocker()
    assert blocker.is_blocker
    assert not blocker.is_empty
    assert not can_match(blocker)
    assert not can_swap(blocker)
    assert not can_match(Cell.empty())
    iced = Cell(color='red', obstacle=Obstacle(ObstacleKind.ICE))
    assert can_match(iced)


def test_clone_is_deep():
    board = board_from_layout(["RGB", "BYM"], obstacles={(0, 0): (ObstacleKind.BOX, 2)})
    copy = board.clone()
    assert copy == board
    copy.cell((0, 0)).obstacle.health = 1
    copy.cell((1, 1)).special = SpecialType.AREA_CLEAR
    copy.set_cell((0, 2), Cell.empty())
    assert board.cell((0, 0)).obstacle.health == 2
    assert board.cell((1, 1)).special is SpecialType.NONE
    assert board.cell((0, 2)).color == 'blue'


def test_filler_board_layout_helper():
    board = filler_board(2, 3)
    assert board.cell((0, 0)).color == 'red'
    assert board.cell((1, 0)).color == 'blue'
    assert SpecialType.ROW_CLEAR.is_rocket
    assert not SpecialType.AREA_CLEAR.is_rocket
    assert not SpecialType.NONE.is_special
