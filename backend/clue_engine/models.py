"""Pydantic models for engine views and API requests."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CellView(BaseModel):
    row: int
    col: int
    code: str
    room: str
    door_direction: Optional[str] = None  # "UP" | "DOWN" | "LEFT" | "RIGHT"
    is_room_center: bool = False
    is_label: bool = False
    occupied: bool = False
    secret_passage: Optional[str] = None


class RoomView(BaseModel):
    code: str
    name: str
    is_space: bool
    center: Optional[list[int]] = None
    label: Optional[list[int]] = None
    secret_passage_target: Optional[str] = None


class BoardView(BaseModel):
    rows: int
    columns: int
    rooms: list[RoomView] = Field(default_factory=list)
    layout: list[str] = Field(default_factory=list)


class PlayerView(BaseModel):
    name: str
    color: str
    type: str  # "human" | "computer"
    position: list[int]
    hand_size: int


class PlayerCards(BaseModel):
    name: str
    hand: list[str] = Field(default_factory=list)
    seen: list[str] = Field(default_factory=list)


class GameView(BaseModel):
    phase: str
    current_player: str
    roll: int
    targets: list[list[int]] = Field(default_factory=list)
    awaiting_selection: bool = False
    guess: str
    guess_result: str
    game_over: bool = False
    winner: Optional[str] = None
    message: Optional[str] = None
    players: list[PlayerView] = Field(default_factory=list)


class ActionResult(BaseModel):
    accepted: bool
    detail: Optional[str] = None
    game: Optional[GameView] = None


# ---------------------------------------------------------------------------
# API request models
# ---------------------------------------------------------------------------


class MoveRequest(BaseModel):
    row: int
    col: int


class SuggestionRequest(BaseModel):
    person: str
    weapon: str


class AccusationRequest(BaseModel):
    # All three left empty means the accusation was cancelled
    person: Optional[str] = None
    room: Optional[str] = None
    weapon: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return not (self.person or self.room or self.weapon)
