"""
Clue Board - Grid, Rooms, Adjacency Graph, and DFS Targets

The board is loaded from a legend + layout pair (see loader.py).
Cells are addressed by (row, col); adjacency is stored as sets of those keys.
Layout modifiers:  ^ v < > = doorway   # = room label   * = room center
                   <code>  = secret passage to that room
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional
import logging

logger = logging.getLogger(__name__)


class DoorDirection(Enum):
    UP = "^"
    DOWN = "v"
    LEFT = "<"
    RIGHT = ">"
    NONE = ""


# Row/col offset of the cell a doorway points into
DOOR_OFFSETS = {
    DoorDirection.UP: (-1, 0),
    DoorDirection.DOWN: (1, 0),
    DoorDirection.LEFT: (0, -1),
    DoorDirection.RIGHT: (0, 1),
}

ORTHOGONAL = [(-1, 0), (1, 0), (0, -1), (0, 1)]


@dataclass
class BoardCell:
    row: int
    col: int
    initial: str
    door_direction: DoorDirection = DoorDirection.NONE
    is_label: bool = False
    is_room_center: bool = False
    occupied: bool = False
    secret_passage: Optional[str] = None
    adjacent: set[tuple[int, int]] = field(default_factory=set, repr=False)

    @property
    def key(self) -> tuple[int, int]:
        return (self.row, self.col)

    @property
    def is_doorway(self) -> bool:
        return self.door_direction != DoorDirection.NONE

    def add_adj(self, other: "BoardCell"):
        self.adjacent.add(other.key)

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        return isinstance(other, BoardCell) and self.key == other.key

    def __repr__(self):
        return f"BoardCell({self.row},{self.col}, '{self.initial}')"


@dataclass
class Room:
    name: str
    code: str
    is_space: bool = False
    center_cell: Optional[BoardCell] = field(default=None, repr=False)
    label_cell: Optional[BoardCell] = field(default=None, repr=False)
    secret_passage_target: Optional[str] = None

    def set_center_cell(self, cell: BoardCell):
        if self.center_cell is not None:
            raise ValueError(f"{self.name} already has a center cell")
        self.center_cell = cell

    def set_label_cell(self, cell: BoardCell):
        if self.label_cell is not None:
            raise ValueError(f"{self.name} already has a label cell")
        self.label_cell = cell


class Board:
    """Rectangular grid of cells plus the room registry keyed by code."""

    def __init__(
        self,
        grid: list[list[BoardCell]],
        rooms: dict[str, Room],
        walkway_code: str = "W",
    ):
        self.grid = grid
        self.rooms = rooms
        self.walkway_code = walkway_code
        self.num_rows = len(grid)
        self.num_columns = len(grid[0]) if grid else 0

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.num_rows and 0 <= col < self.num_columns

    def get_cell(self, row: int, col: int) -> BoardCell:
        if not self.in_bounds(row, col):
            raise IndexError(f"({row},{col}) is off the board")
        return self.grid[row][col]

    def get_room(self, cell_or_code: "BoardCell | str") -> Optional[Room]:
        if isinstance(cell_or_code, BoardCell):
            return self.rooms.get(cell_or_code.initial)
        return self.rooms.get(cell_or_code)

    def room_by_name(self, name: str) -> Optional[Room]:
        for room in self.rooms.values():
            if room.name == name:
                return room
        return None

    def cells(self) -> Iterator[BoardCell]:
        for row in self.grid:
            yield from row

    @property
    def doorways(self) -> set[BoardCell]:
        return {cell for cell in self.cells() if cell.is_doorway}

    def is_walkway(self, cell: BoardCell) -> bool:
        return cell.initial == self.walkway_code

    def get_adj_list(self, row: int, col: int) -> set[BoardCell]:
        return {self.grid[r][c] for r, c in self.get_cell(row, col).adjacent}

    def neighbor(self, cell: BoardCell, dr: int, dc: int) -> Optional[BoardCell]:
        r, c = cell.row + dr, cell.col + dc
        if self.in_bounds(r, c):
            return self.grid[r][c]
        return None


# ── Graph Builder ───────────────────────────────────────────


def calc_adjacency(board: Board):
    """Populate every cell's adjacency set. Runs once, after loading."""
    edges = 0
    for cell in board.cells():
        if cell.is_room_center:
            room = board.get_room(cell)
            target_code = room.secret_passage_target if room else None
            if target_code:
                target = board.get_room(target_code)
                if target is None or target.center_cell is None:
                    logger.warning(
                        "[board] Secret passage from %s to '%s' has no center cell",
                        room.name, target_code,
                    )
                else:
                    cell.add_adj(target.center_cell)
                    edges += 1
            continue

        if not board.is_walkway(cell):
            continue

        # Door <-> Room center
        if cell.is_doorway:
            dr, dc = DOOR_OFFSETS[cell.door_direction]
            into = board.neighbor(cell, dr, dc)
            room = board.get_room(into) if into else None
            if room is None or room.center_cell is None:
                logger.warning(
                    "[board] Door at (%d,%d) points %s at no room center",
                    cell.row, cell.col, cell.door_direction.name,
                )
            else:
                cell.add_adj(room.center_cell)
                room.center_cell.add_adj(cell)
                edges += 2

        # Walkway adjacency
        for dr, dc in ORTHOGONAL:
            nb = board.neighbor(cell, dr, dc)
            if nb is not None and board.is_walkway(nb):
                cell.add_adj(nb)
                edges += 1

    logger.info(
        "[board] Adjacency built for %dx%d grid (%d edges)",
        board.num_rows, board.num_columns, edges,
    )


# ── DFS Targets ─────────────────────────────────────────────


def calc_targets(board: Board, start: BoardCell, steps: int) -> set[BoardCell]:
    """
    Every cell reachable from `start` in exactly `steps` moves.
    A path may not revisit a cell, may not cross an occupied walkway, and
    stops as soon as it enters a room center (rooms ignore occupancy).
    """
    targets: set[BoardCell] = set()
    if steps < 1:
        return targets

    def search(cell: BoardCell, remaining: int, visited: frozenset):
        for r, c in cell.adjacent:
            adj = board.grid[r][c]
            if adj in visited:
                continue
            if adj.occupied and not adj.is_room_center:
                continue
            if adj.is_room_center or remaining == 1:
                targets.add(adj)
            else:
                search(adj, remaining - 1, visited | {adj})

    search(start, steps, frozenset({start}))
    return targets


# ── Display ─────────────────────────────────────────────────


def render_grid(board: Board, marks: Optional[dict[tuple, str]] = None) -> str:
    marks = marks or {}
    header = "   " + "".join(f"{i % 10}" for i in range(board.num_columns))
    lines = [header]
    for r, row in enumerate(board.grid):
        chars = []
        for cell in row:
            if cell.key in marks:
                chars.append(marks[cell.key])
            elif cell.occupied:
                chars.append("o")
            elif cell.is_room_center:
                chars.append("*")
            elif cell.is_doorway:
                chars.append(cell.door_direction.value)
            elif board.is_walkway(cell):
                chars.append(".")
            else:
                room = board.get_room(cell)
                chars.append(" " if room and room.is_space else cell.initial)
        lines.append(f"{r:2} " + "".join(chars))
    return "\n".join(lines)


def show_targets(board: Board, start: BoardCell, targets: set[BoardCell]) -> str:
    marks = {t.key: "+" for t in targets}
    marks[start.key] = "@"
    lines = [render_grid(board, marks)]

    rooms = sorted(
        board.get_room(t).name for t in targets if t.is_room_center
    )
    if rooms:
        lines.append("\n  Rooms reachable:")
        for name in rooms:
            lines.append(f"    {name}")
    lines.append(f"  Walkway squares: {sum(1 for t in targets if not t.is_room_center)}")
    return "\n".join(lines)


def room_summary(board: Board) -> str:
    lines = ["=== Rooms ==="]
    for code, room in board.rooms.items():
        if room.is_space:
            lines.append(f"  {code} {room.name:14s}: space")
            continue
        doors = sorted(
            d.key for d in board.doorways
            if room.center_cell is not None and room.center_cell.key in d.adjacent
        )
        parts = [f"doors={doors}"]
        if room.center_cell is not None:
            parts.insert(0, f"center={room.center_cell.key}")
        if room.secret_passage_target:
            target = board.get_room(room.secret_passage_target)
            parts.append(f"passage->{target.name if target else '?'}")
        lines.append(f"  {code} {room.name:14s}: {', '.join(parts)}")
    return "\n".join(lines)
