"""Legend (setup) and layout loading.

Legend lines:  Room, <name>, <code>
               Space, <name>, <code>
               Player, <Human|Computer>, <name>, <color>, <row>, <col>
               Weapon, <name>
               // comment
Layout: comma-separated rows of 1-2 character cells (see board.py).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from .board import Board, BoardCell, DoorDirection, Room, calc_adjacency
from .cards import Card, CardCatalog, CardType, Deck
from .players import PLAYER_TYPES, BasePlayer

logger = logging.getLogger(__name__)

MAX_SETUP_FIELDS = 6
SETUP_FIELD_COUNTS = {"Room": 3, "Space": 3, "Player": 6, "Weapon": 2}
DIRECTION_MODIFIERS = {d.value: d for d in DoorDirection if d != DoorDirection.NONE}
LABEL_MODIFIER = "#"
CENTER_MODIFIER = "*"
WALKWAY_NAME = "Walkway"

_FIELD_SPLIT = re.compile(r",\s*")


class BadConfigFormatError(ValueError):
    """A legend or layout file that cannot be loaded."""

    def __init__(self, source: str | None = None, reason: str | None = None):
        self.source = source
        self.reason = reason or "Something went wrong with the configuration process"
        where = f"Error in {source}" if source else "Error"
        super().__init__(f"{where}: {self.reason}")


@dataclass
class Setup:
    rooms: dict[str, Room] = field(default_factory=dict)
    players: list[BasePlayer] = field(default_factory=list)
    deck: Deck = field(default_factory=Deck)
    catalog: CardCatalog = field(default_factory=CardCatalog)
    walkway_code: str = "W"

    @property
    def space_codes(self) -> set[str]:
        return {code for code, room in self.rooms.items() if room.is_space}


# ---------------------------------------------------------------------------
# Legend
# ---------------------------------------------------------------------------


def _parse_code(value: str, source: str, line_no: int) -> str:
    if len(value) != 1:
        raise BadConfigFormatError(
            source, f"room code must be one character on line {line_no}: '{value}'"
        )
    return value


def load_setup_config(lines: Iterable[str], source: str = "<setup>") -> Setup:
    setup = Setup()
    walkway_code = None

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("//"):
            continue

        fields = _FIELD_SPLIT.split(line)
        kind = fields[0]

        if len(fields) > MAX_SETUP_FIELDS:
            raise BadConfigFormatError(source, f"invalid input format on line {line_no}")
        if kind not in SETUP_FIELD_COUNTS:
            raise BadConfigFormatError(
                source, f"invalid setup type on line {line_no}: {kind}"
            )
        if len(fields) != SETUP_FIELD_COUNTS[kind]:
            raise BadConfigFormatError(
                source,
                f"{kind} record on line {line_no} needs "
                f"{SETUP_FIELD_COUNTS[kind]} fields, got {len(fields)}",
            )

        if kind in ("Room", "Space"):
            name = fields[1]
            code = _parse_code(fields[2], source, line_no)
            if code in setup.rooms:
                raise BadConfigFormatError(
                    source, f"duplicate room code '{code}' on line {line_no}"
                )
            setup.rooms[code] = Room(name=name, code=code, is_space=kind == "Space")
            if kind == "Room":
                _add_card(setup.deck, Card(name, CardType.ROOM), source, line_no)
            elif name == WALKWAY_NAME:
                walkway_code = code

        elif kind == "Player":
            _, behavior, name, color, row, col = fields
            player_cls = PLAYER_TYPES.get(behavior)
            if player_cls is None:
                raise BadConfigFormatError(
                    source, f"invalid player type on line {line_no}: {behavior}"
                )
            try:
                row, col = int(row), int(col)
            except ValueError:
                raise BadConfigFormatError(
                    source, f"invalid start position on line {line_no}: {row}, {col}"
                ) from None
            setup.players.append(player_cls(name, color, row, col))
            _add_card(setup.deck, Card(name, CardType.PERSON), source, line_no)

        else:
            _add_card(setup.deck, Card(fields[1], CardType.WEAPON), source, line_no)

    if walkway_code is None:
        spaces = sorted(setup.space_codes)
        walkway_code = "W" if "W" in spaces or not spaces else spaces[0]
    setup.walkway_code = walkway_code

    setup.catalog = CardCatalog.from_deck(
        setup.deck,
        {code: room.name for code, room in setup.rooms.items() if not room.is_space},
    )
    for player in setup.players:
        player.catalog = setup.catalog

    logger.info(
        "[loader] %s: %d rooms, %d players, %d cards",
        source, len(setup.rooms), len(setup.players), len(setup.deck),
    )
    return setup


def _add_card(deck: Deck, card: Card, source: str, line_no: int):
    try:
        deck.add(card)
    except ValueError as exc:
        raise BadConfigFormatError(source, f"{exc} on line {line_no}") from None


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def load_layout_config(
    lines: Iterable[str], setup: Setup, source: str = "<layout>"
) -> Board:
    rows: list[list[BoardCell]] = []
    num_columns = -1
    spaces = setup.space_codes

    for raw in lines:
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        row_index = len(rows)
        tokens = [t.strip() for t in line.split(",")]

        if num_columns < 0:
            num_columns = len(tokens)
        elif len(tokens) != num_columns:
            raise BadConfigFormatError(
                source,
                f"discrepancy with number of columns in row {row_index}: "
                f"expected {num_columns}, got {len(tokens)}",
            )

        row: list[BoardCell] = []
        for col, token in enumerate(tokens):
            row.append(_parse_cell(token, row_index, col, setup, spaces, source))
        rows.append(row)

    if not rows:
        raise BadConfigFormatError(source, "layout is empty")

    board = Board(rows, setup.rooms, walkway_code=setup.walkway_code)

    for player in setup.players:
        if not board.in_bounds(player.row, player.col):
            raise BadConfigFormatError(
                source,
                f"{player.name} starts off the board at ({player.row},{player.col})",
            )
        board.get_cell(player.row, player.col).occupied = True

    logger.info(
        "[loader] %s: %dx%d grid, %d doorways",
        source, board.num_rows, board.num_columns, len(board.doorways),
    )
    return board


def _parse_cell(
    token: str,
    row: int,
    col: int,
    setup: Setup,
    spaces: set[str],
    source: str,
) -> BoardCell:
    def bad(reason: str) -> BadConfigFormatError:
        return BadConfigFormatError(
            source, f"invalid cell data in row {row}, column {col} ('{token}'): {reason}"
        )

    if len(token) < 1 or len(token) > 2:
        raise bad("cells hold one or two characters")

    initial = token[0]
    room = setup.rooms.get(initial)
    if room is None:
        raise bad(f"unknown room code '{initial}'")

    cell = BoardCell(row, col, initial)
    if len(token) == 1:
        return cell

    modifier = token[1]
    if modifier in DIRECTION_MODIFIERS:
        if initial not in spaces:
            raise bad("doorways belong on walkway cells")
        cell.door_direction = DIRECTION_MODIFIERS[modifier]
    elif modifier in (LABEL_MODIFIER, CENTER_MODIFIER):
        if initial in spaces:
            raise bad(f"{room.name} cannot carry room modifiers")
        try:
            if modifier == LABEL_MODIFIER:
                room.set_label_cell(cell)
                cell.is_label = True
            else:
                room.set_center_cell(cell)
                cell.is_room_center = True
        except ValueError as exc:
            raise bad(str(exc)) from None
    elif modifier in setup.rooms and modifier not in spaces:
        if initial in spaces:
            raise bad(f"{room.name} cannot hold a secret passage")
        cell.secret_passage = modifier
        room.secret_passage_target = modifier
    elif modifier in spaces:
        raise bad(f"secret passage leads to {setup.rooms[modifier].name}, not a room")
    else:
        raise bad(f"unknown modifier '{modifier}'")
    return cell


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def load_board(setup_file: str | Path, layout_file: str | Path) -> tuple[Board, Setup]:
    """Load both files and build the adjacency graph."""
    setup_file, layout_file = Path(setup_file), Path(layout_file)
    setup = _read_config(setup_file, load_setup_config)
    board = _read_config(layout_file, lambda fh, source: load_layout_config(fh, setup, source))

    calc_adjacency(board)
    return board, setup


def _read_config(path: Path, parse):
    source = str(path)
    try:
        with open(path, encoding="utf-8") as fh:
            return parse(fh, source)
    except FileNotFoundError as exc:
        raise BadConfigFormatError(source, "file not found") from exc
    except UnicodeDecodeError as exc:
        raise BadConfigFormatError(source, f"not valid UTF-8 text ({exc.reason})") from exc
    except OSError as exc:
        raise BadConfigFormatError(source, exc.strerror or str(exc)) from exc
