"""Tests for board.py: grid, adjacency graph, and DFS targets."""

from pathlib import Path

import pytest

from clue_engine.board import DoorDirection, calc_adjacency, calc_targets
from clue_engine.loader import load_board, load_layout_config, load_setup_config

DATA_DIR = Path(__file__).resolve().parents[2] / "data"
SETUP_FILE = DATA_DIR / "ClueSetup.txt"
LAYOUT_FILE = DATA_DIR / "ClueLayout.csv"


@pytest.fixture(scope="module")
def board():
    board, _ = load_board(SETUP_FILE, LAYOUT_FILE)
    return board


@pytest.fixture
def fresh_board():
    """A board the test is free to mutate (occupancy)."""
    board, _ = load_board(SETUP_FILE, LAYOUT_FILE)
    return board


def keys(cells):
    return {c.key for c in cells}


# ---------------------------------------------------------------------------
# Grid and rooms
# ---------------------------------------------------------------------------


def test_dimensions(board):
    assert board.num_rows == 11
    assert board.num_columns == 13
    for row in board.grid:
        assert len(row) == board.num_columns


def test_every_cell_has_known_room(board):
    for cell in board.cells():
        assert board.get_room(cell) is not None, cell


def test_room_centers_and_labels(board):
    expected = {"K": (1, 1), "C": (1, 10), "B": (5, 6), "L": (9, 1), "S": (9, 10)}
    for code, center in expected.items():
        room = board.get_room(code)
        assert room.center_cell.key == center
        assert room.center_cell.is_room_center
        assert room.label_cell is not None and room.label_cell.is_label

    assert board.get_room("K").name == "Kitchen"
    assert board.room_by_name("Ballroom").code == "B"
    assert board.get_room("W").is_space
    assert board.get_room("W").center_cell is None


def test_doorways(board):
    cell = board.get_cell(3, 1)
    assert cell.is_doorway
    assert cell.door_direction == DoorDirection.UP
    assert board.get_cell(7, 2).door_direction == DoorDirection.DOWN
    assert board.get_cell(5, 8).door_direction == DoorDirection.LEFT
    assert board.get_cell(1, 8).door_direction == DoorDirection.RIGHT
    assert not board.get_cell(3, 0).is_doorway
    assert len(board.doorways) == 7


def test_secret_passage_cells(board):
    assert board.get_cell(2, 0).secret_passage == "S"
    assert board.get_cell(10, 12).secret_passage == "K"
    assert board.get_room("K").secret_passage_target == "S"
    assert board.get_room("C").secret_passage_target == "L"
    assert board.get_room("L").secret_passage_target is None


def test_get_cell_out_of_bounds(board):
    with pytest.raises(IndexError):
        board.get_cell(11, 0)
    with pytest.raises(IndexError):
        board.get_cell(0, -1)


# ---------------------------------------------------------------------------
# Adjacency
# ---------------------------------------------------------------------------


def test_walkway_adjacency(board):
    assert keys(board.get_adj_list(0, 4)) == {(1, 4), (0, 5)}
    # unused cells are never neighbors
    assert (0, 6) not in board.get_cell(0, 5).adjacent


def test_doorway_adjacency(board):
    assert keys(board.get_adj_list(1, 8)) == {(1, 10), (0, 8), (2, 8), (1, 7)}
    assert keys(board.get_adj_list(7, 6)) == {(5, 6), (8, 6), (7, 5), (7, 7)}


def test_room_center_adjacency(board):
    assert keys(board.get_adj_list(1, 1)) == {(3, 1), (9, 10)}
    assert keys(board.get_adj_list(5, 6)) == {(5, 4), (5, 8), (7, 6)}


def test_room_interiors_have_no_adjacency(board):
    assert board.get_adj_list(0, 0) == set()
    assert board.get_adj_list(0, 1) == set()  # label
    assert board.get_adj_list(2, 0) == set()  # passage marker
    assert board.get_adj_list(0, 6) == set()  # unused


def test_walkway_edges_are_mutual(board):
    for cell in board.cells():
        if not board.is_walkway(cell):
            continue
        for nb in board.get_adj_list(cell.row, cell.col):
            if board.is_walkway(nb):
                assert cell.key in nb.adjacent, (cell, nb)


def test_door_edges_are_mutual(board):
    for door in board.doorways:
        centers = [c for c in board.get_adj_list(door.row, door.col) if c.is_room_center]
        assert len(centers) == 1
        assert door.key in centers[0].adjacent


def test_secret_passages(board):
    kitchen, study = board.get_cell(1, 1), board.get_cell(9, 10)
    assert study.key in kitchen.adjacent
    assert kitchen.key in study.adjacent

    # Conservatory -> Library is only declared one way
    conservatory, library = board.get_cell(1, 10), board.get_cell(9, 1)
    assert library.key in conservatory.adjacent
    assert conservatory.key not in library.adjacent


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


def test_targets_one_step_from_door(board):
    targets = calc_targets(board, board.get_cell(3, 1), 1)
    assert keys(targets) == {(1, 1), (4, 1), (3, 0), (3, 2)}


def test_targets_two_steps_from_door(board):
    start = board.get_cell(3, 1)
    targets = calc_targets(board, start, 2)
    assert keys(targets) == {(1, 1), (5, 1), (4, 2), (3, 3)}
    assert start not in targets


def test_targets_from_room_center(board):
    targets = calc_targets(board, board.get_cell(1, 1), 1)
    assert keys(targets) == {(9, 10), (3, 1)}


def test_targets_never_include_start(board):
    for steps in range(1, 7):
        start = board.get_cell(6, 3)
        assert start not in calc_targets(board, start, steps)


def test_one_step_equals_unoccupied_neighbors(board):
    for cell in board.cells():
        if not cell.adjacent:
            continue
        expected = {
            nb for nb in board.get_adj_list(cell.row, cell.col)
            if nb.is_room_center or not nb.occupied
        }
        assert calc_targets(board, cell, 1) == expected


def test_zero_steps_has_no_targets(board):
    assert calc_targets(board, board.get_cell(3, 1), 0) == set()


def test_occupied_walkway_is_blocked(board):
    # Colonel Mustard starts on (5,12)
    assert board.get_cell(5, 12).occupied
    targets = calc_targets(board, board.get_cell(5, 11), 1)
    assert keys(targets) == {(4, 11), (6, 11), (5, 10)}


def test_occupied_cell_blocks_paths_through_it(fresh_board):
    fresh_board.get_cell(4, 1).occupied = True
    targets = calc_targets(fresh_board, fresh_board.get_cell(3, 1), 2)
    assert keys(targets) == {(1, 1), (4, 2), (3, 3)}


def test_occupied_room_center_is_still_a_target(fresh_board):
    fresh_board.get_cell(1, 1).occupied = True
    targets = calc_targets(fresh_board, fresh_board.get_cell(3, 1), 1)
    assert (1, 1) in keys(targets)


def test_entering_a_room_ends_the_move(board):
    # With three steps from the door the Kitchen is still offered, but nothing
    # beyond it through the secret passage
    targets = calc_targets(board, board.get_cell(3, 1), 3)
    assert (1, 1) in keys(targets)
    assert (9, 10) not in keys(targets)


# ---------------------------------------------------------------------------
# End-to-end on a tiny board
# ---------------------------------------------------------------------------


def test_two_by_two_board():
    setup = load_setup_config(["Room, Rec Room, R", "Space, Walkway, W"], "tiny")
    board = load_layout_config(["R*,R", "W^,W"], setup, "tiny")
    calc_adjacency(board)

    assert board.num_rows == 2
    assert board.num_columns == 2
    assert board.get_room("R").name == "Rec Room"
    assert board.get_room(board.get_cell(0, 1)).name == "Rec Room"

    targets = calc_targets(board, board.get_cell(1, 0), 1)
    assert keys(targets) == {(0, 0), (1, 1)}
    assert keys(calc_targets(board, board.get_cell(1, 1), 2)) == {(0, 0)}
