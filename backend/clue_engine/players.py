"""Clue players: the human seat and the automated player.

BasePlayer holds position, hand and seen cards, and disproves suggestions.
HumanPlayer defers its accusation to whatever the caller supplies.
ComputerPlayer picks targets and suggestions itself and deduces the solution
from unseen cards.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Iterable, Optional, TypeVar

from .board import BoardCell
from .cards import Card, CardCatalog, CardType, Solution

logger = logging.getLogger(__name__)

T = TypeVar("T")


def random_element(items: Iterable[T]) -> Optional[T]:
    """Uniform pick from `items`, or None when empty."""
    pool = list(items)
    if not pool:
        return None
    if len(pool) == 1:
        return pool[0]
    return random.choice(pool)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------


class BasePlayer(ABC):
    """Abstract base for a seat at the table.

    ``hand`` is what the player physically holds; ``seen_cards`` is every
    card the player knows is not the solution (hand + cards shown to it).
    """

    player_type: str = "base"

    def __init__(
        self,
        name: str,
        color: str,
        row: int,
        col: int,
        catalog: Optional[CardCatalog] = None,
    ):
        self.name = name
        self.color = color
        self.row = row
        self.col = col
        self.catalog = catalog or CardCatalog()
        self.hand: set[Card] = set()
        self.seen_cards: set[Card] = set()

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r}, ({self.row},{self.col}))"

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def move_to(self, row: int, col: int):
        self.row = row
        self.col = col

    def update_hand(self, card: Card):
        self.hand.add(card)
        card.holder = self.name
        self.seen_cards.add(card)

    def update_seen(self, card: Card):
        is_new = card not in self.seen_cards
        self.seen_cards.add(card)
        logger.debug(
            "[%s:%s] Saw '%s' (new_info=%s, total_seen=%d)",
            self.player_type, self.name, card, is_new, len(self.seen_cards),
        )

    def clear_hand(self):
        self.hand.clear()

    def unseen_cards(self, card_type: CardType) -> set[Card]:
        return set(self.catalog.category(card_type)) - self.seen_cards

    # ------------------------------------------------------------------
    # Shared decisions
    # ------------------------------------------------------------------

    def disprove_suggestion(self, suggestion: Solution) -> Optional[Card]:
        """Reveal one held card from the suggestion, chosen at random."""
        matches = self.hand & suggestion.cards()
        return random_element(matches)

    # ------------------------------------------------------------------
    # Decision interface
    # ------------------------------------------------------------------

    @abstractmethod
    def will_accuse(self) -> bool:
        ...

    @abstractmethod
    def make_accusation(self) -> Optional[Solution]:
        ...

    @abstractmethod
    def receive_suggestion_result(self, card: Optional[Card], suggestion: Solution):
        ...

    @abstractmethod
    def select_target(self, targets: set[BoardCell]) -> Optional[BoardCell]:
        """Pick a destination, or None when the caller must supply one."""
        ...

    @abstractmethod
    def suggest(self, room: Card) -> Optional[Solution]:
        """Suggestion for `room`, or None when the caller must supply one."""
        ...


# ---------------------------------------------------------------------------
# HumanPlayer
# ---------------------------------------------------------------------------


class HumanPlayer(BasePlayer):
    """A seat driven by the caller: moves, suggestions and accusations all
    arrive from outside the engine."""

    player_type = "human"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._accusation: Optional[Solution] = None
        self.accusing = False

    def start_accusing(self, accusation: Optional[Solution]):
        self.accusing = True
        self._accusation = accusation

    def will_accuse(self) -> bool:
        return self.accusing

    def make_accusation(self) -> Optional[Solution]:
        accusation = self._accusation
        if accusation is None:
            # Cancelled dialog: not accusing this turn
            self.accusing = False
        self._accusation = None
        return accusation

    def receive_suggestion_result(self, card: Optional[Card], suggestion: Solution):
        logger.info(
            "[%s:%s] Suggestion %s -> %s",
            self.player_type, self.name, suggestion,
            card if card is not None else "not disproven",
        )

    def select_target(self, targets: set[BoardCell]) -> Optional[BoardCell]:
        return None

    def suggest(self, room: Card) -> Optional[Solution]:
        return None


# ---------------------------------------------------------------------------
# ComputerPlayer
# ---------------------------------------------------------------------------


class ComputerPlayer(BasePlayer):
    """Rule-based player that tracks seen cards and uses elimination.

    1. **Move** into a room whose card it has not seen, if one is in range.
    2. **Suggest** unseen people/weapons in the room it stands in.
    3. **Accuse** once a suggestion came back undisproven with nothing it
       had seen, or once each category is narrowed to a single card.

    The pending accusation is locked the first time either rule fires and is
    never replaced afterwards.
    """

    player_type = "computer"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.accusation: Optional[Solution] = None

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def create_suggestion(self, room: Card) -> Solution:
        person = self._pick_unseen_or_any(CardType.PERSON)
        weapon = self._pick_unseen_or_any(CardType.WEAPON)
        suggestion = Solution(person=person, room=room, weapon=weapon)
        logger.info("[%s:%s] Suggesting %s", self.player_type, self.name, suggestion)
        return suggestion

    def suggest(self, room: Card) -> Optional[Solution]:
        return self.create_suggestion(room)

    def create_suggestion_for(self, room_code: str) -> Solution:
        room = self.catalog.rooms.get(room_code)
        if room is None:
            raise ValueError(f"No room card for code '{room_code}'")
        return self.create_suggestion(room)

    def select_target(self, targets: set[BoardCell]) -> Optional[BoardCell]:
        unseen_rooms = [
            cell for cell in targets
            if cell.is_room_center
            and self.catalog.rooms.get(cell.initial) not in self.seen_cards
        ]
        if unseen_rooms:
            choice = random_element(unseen_rooms)
            logger.debug(
                "[%s:%s] Target %s (unseen room)", self.player_type, self.name, choice
            )
            return choice
        choice = random_element(targets)
        logger.debug("[%s:%s] Target %s (random)", self.player_type, self.name, choice)
        return choice

    def receive_suggestion_result(self, card: Optional[Card], suggestion: Solution):
        if card is None and suggestion.cards().isdisjoint(self.seen_cards):
            self._lock_accusation(suggestion, "undisproven suggestion")
        self._check_unseen_cards()

    def will_accuse(self) -> bool:
        return self.accusation is not None

    def make_accusation(self) -> Optional[Solution]:
        return self.accusation

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_unseen_cards(self):
        unseen_people = self.unseen_cards(CardType.PERSON)
        unseen_weapons = self.unseen_cards(CardType.WEAPON)
        unseen_rooms = self.unseen_cards(CardType.ROOM)
        if len(unseen_people) == 1 and len(unseen_weapons) == 1 and len(unseen_rooms) == 1:
            self._lock_accusation(
                Solution(
                    person=unseen_people.pop(),
                    room=unseen_rooms.pop(),
                    weapon=unseen_weapons.pop(),
                ),
                "eliminated all other cards",
            )

    def _lock_accusation(self, accusation: Solution, reason: str):
        if self.accusation is not None:
            return
        self.accusation = accusation
        logger.info(
            "[%s:%s] Ready to accuse (%s): %s",
            self.player_type, self.name, reason, accusation,
        )

    def _pick_unseen_or_any(self, card_type: CardType) -> Card:
        """Pick a random unseen card, or any card if all are seen."""
        unseen = self.unseen_cards(card_type)
        if unseen:
            return random_element(unseen)
        logger.warning(
            "[%s:%s] Every %s card is seen; picking from the full set",
            self.player_type, self.name, card_type.value,
        )
        choice = random_element(self.catalog.category(card_type))
        if choice is None:
            raise ValueError(f"No {card_type.value} cards to suggest")
        return choice


PLAYER_TYPES = {"Human": HumanPlayer, "Computer": ComputerPlayer}
