"""FastAPI surface over one in-memory ClueGame.

Run with:
    uvicorn clue_engine.main:app --reload
    CLUE_LEGEND_FILE=data/ClueSetup.txt CLUE_LAYOUT_FILE=data/ClueLayout.csv python -m clue_engine.main
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .board import render_grid
from .game import ClueGame
from .loader import BadConfigFormatError
from .models import (
    AccusationRequest,
    ActionResult,
    BoardView,
    MoveRequest,
    RoomView,
    SuggestionRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_LEGEND_FILE = "data/ClueSetup.txt"
DEFAULT_LAYOUT_FILE = "data/ClueLayout.csv"

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

_game: ClueGame | None = None


def _load_game() -> ClueGame:
    legend = os.getenv("CLUE_LEGEND_FILE", DEFAULT_LEGEND_FILE)
    layout = os.getenv("CLUE_LAYOUT_FILE", DEFAULT_LAYOUT_FILE)
    logger.info("Loading board from %s and %s", legend, layout)
    return ClueGame.from_files(legend, layout)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _game
    _game = _load_game()
    yield
    _game = None


def _get_game() -> ClueGame:
    if _game is None:
        raise HTTPException(status_code=503, detail="Game not loaded")
    return _game


def _result(game: ClueGame, accepted: bool, detail: str | None = None) -> dict:
    return ActionResult(accepted=accepted, detail=detail, game=game.snapshot()).model_dump()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(title="Clue Rules Engine", lifespan=lifespan)

_cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Board endpoints
# ---------------------------------------------------------------------------


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


@app.get("/board")
async def get_board():
    game = _get_game()
    board = game.board
    rooms = [
        RoomView(
            code=room.code,
            name=room.name,
            is_space=room.is_space,
            center=list(room.center_cell.key) if room.center_cell else None,
            label=list(room.label_cell.key) if room.label_cell else None,
            secret_passage_target=room.secret_passage_target,
        )
        for room in board.rooms.values()
    ]
    return BoardView(
        rows=board.num_rows,
        columns=board.num_columns,
        rooms=rooms,
        layout=render_grid(board).splitlines()[1:],
    ).model_dump()


@app.get("/board/cells/{row}/{col}")
async def get_cell(row: int, col: int):
    game = _get_game()
    if not game.board.in_bounds(row, col):
        raise HTTPException(status_code=404, detail=f"No cell at ({row},{col})")
    cell = game.board.get_cell(row, col)
    view = game.cell_view(cell).model_dump()
    view["adjacent"] = sorted([r, c] for r, c in cell.adjacent)
    return view


@app.get("/rooms/{code}")
async def get_room(code: str):
    game = _get_game()
    room = game.board.get_room(code)
    if room is None:
        raise HTTPException(status_code=404, detail=f"Unknown room code '{code}'")
    return RoomView(
        code=room.code,
        name=room.name,
        is_space=room.is_space,
        center=list(room.center_cell.key) if room.center_cell else None,
        label=list(room.label_cell.key) if room.label_cell else None,
        secret_passage_target=room.secret_passage_target,
    ).model_dump()


# ---------------------------------------------------------------------------
# Game endpoints
# ---------------------------------------------------------------------------


@app.get("/game")
async def get_game():
    return _get_game().snapshot().model_dump()


@app.get("/game/log")
async def get_log():
    return {"entries": list(_get_game().log)}


@app.get("/players/{name}/cards")
async def get_player_cards(name: str):
    cards = _get_game().player_cards(name)
    if cards is None:
        raise HTTPException(status_code=404, detail=f"Unknown player '{name}'")
    return cards.model_dump()


@app.post("/game/start")
async def start_game():
    global _game
    try:
        _game = _load_game()
    except BadConfigFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except ValueError as exc:
        # Loaded, but the deck cannot be dealt
        logger.warning("Cannot start game: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    _game.do_first_move()
    return _result(_game, True)


@app.post("/game/move")
async def submit_move(req: MoveRequest):
    game = _get_game()
    accepted = game.select_target(req.row, req.col)
    return _result(game, accepted, None if accepted else "Not a valid target")


@app.post("/game/suggest")
async def submit_suggestion(req: SuggestionRequest):
    game = _get_game()
    try:
        accepted = game.submit_suggestion(req.person, req.weapon)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _result(game, accepted, None if accepted else "No suggestion expected")


@app.post("/game/accuse")
async def submit_accusation(req: AccusationRequest):
    game = _get_game()
    if req.cancelled:
        accepted = game.submit_accusation()
    else:
        accepted = game.submit_accusation(req.person, req.room, req.weapon)
    return _result(game, accepted, None if accepted else "Accusation not accepted")


@app.post("/game/next")
async def next_player():
    game = _get_game()
    accepted = game.next_player()
    return _result(game, accepted, None if accepted else "Current player must finish first")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
