#!/usr/bin/env python3
"""Print a Clue board loaded from a legend + layout pair.

Usage:
    python scripts/show_board.py
    python scripts/show_board.py --from ROW COL --steps N
    python scripts/show_board.py --room CODE --steps N

Examples:
    python scripts/show_board.py --from 3 1 --steps 2
    python scripts/show_board.py --room K --steps 1
    CLUE_LEGEND_FILE=my/Setup.txt python scripts/show_board.py --adjacency
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from clue_engine.board import calc_targets, render_grid, room_summary, show_targets
from clue_engine.loader import BadConfigFormatError, load_board

DEFAULT_LEGEND_FILE = os.getenv("CLUE_LEGEND_FILE", "data/ClueSetup.txt")
DEFAULT_LAYOUT_FILE = os.getenv("CLUE_LAYOUT_FILE", "data/ClueLayout.csv")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show a Clue board, its rooms, and the targets reachable from a cell.",
    )
    parser.add_argument(
        "--legend",
        default=DEFAULT_LEGEND_FILE,
        help=f"Legend (setup) file (default: {DEFAULT_LEGEND_FILE})",
    )
    parser.add_argument(
        "--layout",
        default=DEFAULT_LAYOUT_FILE,
        help=f"Layout CSV file (default: {DEFAULT_LAYOUT_FILE})",
    )
    start = parser.add_mutually_exclusive_group()
    start.add_argument(
        "--from",
        dest="start",
        nargs=2,
        type=int,
        metavar=("ROW", "COL"),
        help="Compute targets from this cell",
    )
    start.add_argument(
        "--room",
        help="Compute targets from the center of the room with this code",
    )
    parser.add_argument("--steps", type=int, default=1, help="Dice roll (default: 1)")
    parser.add_argument(
        "--adjacency",
        action="store_true",
        help="List every cell's adjacency set",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args()


def _print_adjacency(board) -> None:
    print("\n=== Adjacency ===")
    for cell in board.cells():
        if cell.adjacent:
            print(f"  {cell.key}: {sorted(cell.adjacent)}")


def main() -> int:
    args = _parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        board, setup = load_board(args.legend, args.layout)
    except BadConfigFormatError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(f"{board.num_rows} rows x {board.num_columns} columns, "
          f"{len(setup.players)} players, {len(setup.deck)} cards\n")
    print(render_grid(board))
    print()
    print(room_summary(board))

    if args.adjacency:
        _print_adjacency(board)

    start = None
    if args.start:
        row, col = args.start
        if not board.in_bounds(row, col):
            print(f"({row},{col}) is off the board", file=sys.stderr)
            return 1
        start = board.get_cell(row, col)
    elif args.room:
        room = board.get_room(args.room)
        if room is None or room.center_cell is None:
            print(f"No room with a center for code '{args.room}'", file=sys.stderr)
            return 1
        start = room.center_cell

    if start is not None:
        targets = calc_targets(board, start, args.steps)
        print(f"\n=== Targets from {start.key} in {args.steps} ===")
        print(show_targets(board, start, targets))

    return 0


if __name__ == "__main__":
    sys.exit(main())
