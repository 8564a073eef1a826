"""Clue game engine: turn order, dice, suggestions and accusations.

One ClueGame owns the board occupancy, the hands and the per-turn state.
Computer turns run to completion inside start_turn(); a human turn stops
at AWAITING_MOVE / ROOM_DECISION until the caller supplies a selection.
"""

import datetime as dt
import logging
import random
from enum import Enum
from pathlib import Path
from typing import Optional

from . import cards as cards_module
from .board import Board, BoardCell, calc_targets
from .cards import Card, CardType, Solution
from .loader import Setup, load_board
from .models import CellView, GameView, PlayerCards, PlayerView
from .players import BasePlayer, HumanPlayer

logger = logging.getLogger(__name__)

MIN_DICE_ROLL = 1
MAX_DICE_ROLL = 6

NO_GUESS = "Waiting For a Guess!"
NOT_DISPROVEN = "Suggestion was not disproven"


class TurnPhase(Enum):
    AWAITING_ROLL = "awaiting_roll"
    TARGETS_COMPUTED = "targets_computed"
    AWAITING_MOVE = "awaiting_move"
    MOVE_APPLIED = "move_applied"
    ROOM_DECISION = "room_decision"
    TURN_COMPLETE = "turn_complete"
    GAME_OVER = "game_over"


# Phases in which the current (human) player still owes the engine a choice
WAITING_PHASES = {TurnPhase.AWAITING_MOVE, TurnPhase.ROOM_DECISION}


class ClueGame:
    def __init__(self, board: Board, setup: Setup):
        if not setup.players:
            raise ValueError("Need at least 1 player to play")
        self.board = board
        self.players: list[BasePlayer] = setup.players
        self.deck = setup.deck
        self.catalog = setup.catalog

        self.solution: Optional[Solution] = None
        self.current_player_index = 0
        self.roll = 0
        self.targets: set[BoardCell] = set()
        self.phase = TurnPhase.AWAITING_ROLL
        self.current_suggestion: Optional[Solution] = None
        self.current_suggestion_result: Optional[Card] = None
        self.disproved_by: Optional[str] = None
        self.game_over = False
        self.winner: Optional[str] = None
        self.outcome_message: Optional[str] = None
        self.log: list[dict] = []

    @classmethod
    def from_files(
        cls, setup_file: str | Path, layout_file: str | Path, deal: bool = True
    ) -> "ClueGame":
        board, setup = load_board(setup_file, layout_file)
        game = cls(board, setup)
        if deal:
            game.deal()
        return game

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _append_log(self, entry: dict):
        entry["timestamp"] = dt.datetime.now(dt.timezone.utc).isoformat()
        self.log.append(entry)

    def _player_cell(self, player: BasePlayer) -> BoardCell:
        return self.board.get_cell(player.row, player.col)

    def _room_card_at(self, cell: BoardCell) -> Card:
        card = self.catalog.rooms.get(cell.initial)
        if card is None:
            raise ValueError(f"No room card for {cell!r}")
        return card

    def _finish_turn(self, player: BasePlayer):
        self.do_accuse()
        if not self.game_over:
            self.phase = TurnPhase.TURN_COMPLETE
            logger.debug("[game] %s finished their turn", player.name)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def deal(self) -> Solution:
        if self.solution is not None:
            raise ValueError("Cards have already been dealt")
        self.solution = cards_module.deal(self.deck, self.players)
        return self.solution

    def set_solution(self, solution: Solution):
        self.solution = solution

    def roll_dice(self) -> int:
        self.roll = random.randint(MIN_DICE_ROLL, MAX_DICE_ROLL)
        return self.roll

    @property
    def current_player(self) -> BasePlayer:
        return self.players[self.current_player_index]

    @property
    def awaiting_selection(self) -> bool:
        return self.phase in WAITING_PHASES

    def get_player(self, name: str) -> Optional[BasePlayer]:
        for player in self.players:
            if player.name == name:
                return player
        return None

    # ------------------------------------------------------------------
    # Turn flow
    # ------------------------------------------------------------------

    def do_first_move(self):
        self.current_player_index = 0
        self.game_over = False
        self.winner = None
        self.outcome_message = None
        self.roll_dice()
        self._append_log({"type": "game_started", "first_player": self.current_player.name})
        self.start_turn()

    def start_turn(self):
        """Compute targets for the current roll and play out what can be
        played without the caller."""
        if self.game_over:
            return
        player = self.current_player
        self.current_suggestion = None
        self.current_suggestion_result = None
        self.disproved_by = None

        self.targets = calc_targets(self.board, self._player_cell(player), self.roll)
        self.phase = TurnPhase.TARGETS_COMPUTED
        logger.info(
            "[game] %s rolled %d from (%d,%d): %d targets",
            player.name, self.roll, player.row, player.col, len(self.targets),
        )

        if not self.targets:
            logger.info("[game] %s is boxed in and cannot move", player.name)
            self._finish_turn(player)
            return

        choice = player.select_target(self.targets)
        if choice is None:
            self.phase = TurnPhase.AWAITING_MOVE
            return
        self._apply_move(player, choice)

    def select_target(self, row: int, col: int) -> bool:
        """Caller-supplied move for the waiting player. False = rejected."""
        if self.phase != TurnPhase.AWAITING_MOVE or self.game_over:
            return False
        if not self.board.in_bounds(row, col):
            return False
        cell = self.board.get_cell(row, col)
        if cell not in self.targets:
            logger.info(
                "[game] Rejected move for %s to (%d,%d): not a target",
                self.current_player.name, row, col,
            )
            return False
        self._apply_move(self.current_player, cell)
        return True

    def _apply_move(self, player: BasePlayer, cell: BoardCell):
        self.move_player_to(player, cell)
        self.phase = TurnPhase.MOVE_APPLIED
        self._append_log(
            {
                "type": "move",
                "player": player.name,
                "dice": self.roll,
                "position": [cell.row, cell.col],
                "room": self.board.get_room(cell).name if cell.is_room_center else None,
            }
        )
        self.do_player_decision(player)

    def move_player_to(self, player: BasePlayer, target: BoardCell):
        current = self._player_cell(player)
        player.move_to(target.row, target.col)
        current.occupied = any(
            p.row == current.row and p.col == current.col for p in self.players
        )
        target.occupied = True

    def do_player_decision(self, player: BasePlayer):
        location = self._player_cell(player)
        if not location.is_room_center:
            self.current_suggestion = None
            logger.debug("[game] %s has not reached a room", player.name)
            self._finish_turn(player)
            return

        suggestion = player.suggest(self._room_card_at(location))
        if suggestion is None:
            self.phase = TurnPhase.ROOM_DECISION
            return
        self._resolve_suggestion(player, suggestion)

    def submit_suggestion(self, person: str, weapon: str) -> bool:
        """Caller-supplied suggestion; the room is where the player stands."""
        if self.phase != TurnPhase.ROOM_DECISION or self.game_over:
            return False
        person_card = self.deck.find(person, CardType.PERSON) if person else None
        weapon_card = self.deck.find(weapon, CardType.WEAPON) if weapon else None
        if person_card is None or weapon_card is None:
            logger.info("[game] Incomplete suggestion (%r, %r) ignored", person, weapon)
            return False
        player = self.current_player
        room_card = self._room_card_at(self._player_cell(player))
        self._resolve_suggestion(
            player, Solution(person=person_card, room=room_card, weapon=weapon_card)
        )
        return True

    def _resolve_suggestion(self, player: BasePlayer, suggestion: Solution):
        self.phase = TurnPhase.ROOM_DECISION
        result = self.handle_suggestion(suggestion, player)
        player.receive_suggestion_result(result, suggestion)
        self._finish_turn(player)

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def handle_suggestion(
        self, suggestion: Solution, suggester: BasePlayer
    ) -> Optional[Card]:
        """Pull the named person into the room, then ask each other player in
        roster order after the suggester; the first matching card is shown
        to the suggester and returned."""
        self.current_suggestion = suggestion
        self.current_suggestion_result = None
        self.disproved_by = None

        suggested_player = self.get_player(suggestion.person.name)
        room = self.board.room_by_name(suggestion.room.name)
        if suggested_player is None or room is None or room.center_cell is None:
            logger.error(
                "[game] Cannot place %s in %s: not on the board",
                suggestion.person, suggestion.room,
            )
        else:
            self.move_player_to(suggested_player, room.center_cell)

        num_players = len(self.players)
        suggester_index = self.players.index(suggester)
        disprover = None
        result = None
        for i in range(1, num_players):
            player = self.players[(suggester_index + i) % num_players]
            if player is suggester:
                continue
            card = player.disprove_suggestion(suggestion)
            if card is not None:
                suggester.update_seen(card)
                disprover = player.name
                result = card
                break

        self.current_suggestion_result = result
        self.disproved_by = disprover
        logger.info(
            "[game] %s suggested %s -> %s",
            suggester.name, suggestion,
            f"disproven by {disprover}" if disprover else "not disproven",
        )
        self._append_log(
            {
                "type": "suggestion",
                "player": suggester.name,
                "person": suggestion.person.name,
                "room": suggestion.room.name,
                "weapon": suggestion.weapon.name,
                "disproven_by": disprover,
            }
        )
        return result

    def current_guess(self) -> str:
        if self.current_suggestion is None:
            return NO_GUESS
        return str(self.current_suggestion)

    def current_guess_result(self) -> str:
        if self.current_suggestion is None:
            return ""
        if self.current_suggestion_result is None:
            return NOT_DISPROVEN
        return f"Disproven by: {self.disproved_by}"

    # ------------------------------------------------------------------
    # Accusations
    # ------------------------------------------------------------------

    def check_accusation(self, accusation: Solution) -> bool:
        return accusation == self.solution

    def submit_accusation(
        self,
        person: Optional[str] = None,
        room: Optional[str] = None,
        weapon: Optional[str] = None,
    ) -> bool:
        """Caller-supplied accusation for the human whose turn it is.

        All three empty means the player cancelled. Returns False when the
        accusation was rejected without touching the game.
        """
        player = self.current_player
        if self.game_over or not isinstance(player, HumanPlayer):
            return False

        if not (person or room or weapon):
            player.start_accusing(None)
        else:
            cards = (
                self.deck.find(person, CardType.PERSON) if person else None,
                self.deck.find(room, CardType.ROOM) if room else None,
                self.deck.find(weapon, CardType.WEAPON) if weapon else None,
            )
            if None in cards:
                return False
            player.start_accusing(Solution(person=cards[0], room=cards[1], weapon=cards[2]))

        self.do_accuse()
        return True

    def do_accuse(self) -> Optional[bool]:
        """Resolve the current player's accusation, if they are making one.

        Returns True/False for a right/wrong accusation, or None when no
        accusation was made.
        """
        player = self.current_player
        if self.game_over or not player.will_accuse():
            return None
        accusation = player.make_accusation()
        if accusation is None:
            return None

        correct = self.check_accusation(accusation)
        if correct:
            self.winner = player.name
            self.outcome_message = (
                f"Congratulations! {player.name} has won the game! "
                f"It was {self.solution}."
            )
        else:
            self.outcome_message = (
                f"{player.name} guessed wrong. The real solution was {self.solution}."
            )
        self.game_over = True
        self.phase = TurnPhase.GAME_OVER
        self.targets = set()
        logger.info("[game] %s accused %s (correct=%s)", player.name, accusation, correct)
        self._append_log(
            {
                "type": "accusation",
                "player": player.name,
                "person": accusation.person.name,
                "room": accusation.room.name,
                "weapon": accusation.weapon.name,
                "correct": correct,
            }
        )
        return correct

    # ------------------------------------------------------------------
    # Turn advance
    # ------------------------------------------------------------------

    def next_player(self) -> bool:
        """Advance to the next player and start their turn.

        Refused while a selection is pending or once the game is over.
        """
        if self.awaiting_selection or self.game_over:
            return False

        previous = self.current_player
        self.current_player_index = (self.current_player_index + 1) % len(self.players)
        self.roll_dice()
        self._append_log(
            {
                "type": "end_turn",
                "player": previous.name,
                "next_player": self.current_player.name,
            }
        )
        self.start_turn()
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def cell_view(self, cell: BoardCell) -> CellView:
        room = self.board.get_room(cell)
        return CellView(
            row=cell.row,
            col=cell.col,
            code=cell.initial,
            room=room.name if room else cell.initial,
            door_direction=cell.door_direction.name if cell.is_doorway else None,
            is_room_center=cell.is_room_center,
            is_label=cell.is_label,
            occupied=cell.occupied,
            secret_passage=cell.secret_passage,
        )

    def player_cards(self, name: str) -> Optional[PlayerCards]:
        player = self.get_player(name)
        if player is None:
            return None
        return PlayerCards(
            name=player.name,
            hand=sorted(c.name for c in player.hand),
            seen=sorted(c.name for c in player.seen_cards),
        )

    def snapshot(self) -> GameView:
        return GameView(
            phase=self.phase.value,
            current_player=self.current_player.name,
            roll=self.roll,
            targets=sorted([c.row, c.col] for c in self.targets),
            awaiting_selection=self.awaiting_selection,
            guess=self.current_guess(),
            guess_result=self.current_guess_result(),
            game_over=self.game_over,
            winner=self.winner,
            message=self.outcome_message,
            players=[
                PlayerView(
                    name=p.name,
                    color=p.color,
                    type=p.player_type,
                    position=[p.row, p.col],
                    hand_size=len(p.hand),
                )
                for p in self.players
            ],
        )
