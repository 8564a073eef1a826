"""Cards, the three-card solution, and dealing."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .players import BasePlayer

logger = logging.getLogger(__name__)


class CardType(Enum):
    ROOM = "room"
    PERSON = "person"
    WEAPON = "weapon"


@dataclass
class Card:
    name: str
    card_type: CardType
    holder: Optional[str] = field(default=None, compare=False, repr=False)

    def __hash__(self):
        return hash((self.name, self.card_type))

    def __eq__(self, other):
        if isinstance(other, Card):
            return self.name == other.name and self.card_type == other.card_type
        return False

    def __str__(self):
        return self.name


@dataclass(frozen=True)
class Solution:
    person: Card
    room: Card
    weapon: Card

    def cards(self) -> set[Card]:
        return {self.person, self.room, self.weapon}

    def __str__(self):
        return f"{self.person} in the {self.room} with the {self.weapon}"


class Deck:
    """Every card in the game, in load order. Membership never changes."""

    def __init__(self, cards: Iterable[Card] = ()):
        self._cards: list[Card] = list(cards)

    def add(self, card: Card):
        if card in self._cards:
            raise ValueError(f"Duplicate {card.card_type.value} card: {card.name}")
        self._cards.append(card)

    def __iter__(self):
        return iter(self._cards)

    def __len__(self):
        return len(self._cards)

    def __contains__(self, card):
        return card in self._cards

    def by_type(self, card_type: CardType) -> list[Card]:
        return [c for c in self._cards if c.card_type == card_type]

    def find(self, name: str, card_type: CardType) -> Optional[Card]:
        for card in self._cards:
            if card.name == name and card.card_type == card_type:
                return card
        return None

    def room_card(self, room_name: str) -> Optional[Card]:
        return self.find(room_name, CardType.ROOM)


@dataclass
class CardCatalog:
    """Per-category card universe the players deduce against."""

    people: frozenset[Card] = frozenset()
    weapons: frozenset[Card] = frozenset()
    # room code -> room card (Space rooms have none)
    rooms: dict[str, Card] = field(default_factory=dict)

    @classmethod
    def from_deck(cls, deck: Deck, room_codes: dict[str, str]) -> "CardCatalog":
        """`room_codes` maps room code -> room name for every non-Space room."""
        rooms = {}
        for code, name in room_codes.items():
            card = deck.room_card(name)
            if card is None:
                logger.error("[cards] No room card for %s (%s)", name, code)
                continue
            rooms[code] = card
        return cls(
            people=frozenset(deck.by_type(CardType.PERSON)),
            weapons=frozenset(deck.by_type(CardType.WEAPON)),
            rooms=rooms,
        )

    def category(self, card_type: CardType) -> frozenset[Card]:
        if card_type == CardType.PERSON:
            return self.people
        if card_type == CardType.WEAPON:
            return self.weapons
        return frozenset(self.rooms.values())


def deal(deck: Deck, players: list["BasePlayer"]) -> Solution:
    """Pick the solution and deal the remaining cards round-robin.

    The deck is shuffled and the first card of each category becomes the
    solution; everything else goes to the players one at a time in roster
    order, so hand sizes differ by at most one.
    """
    cards = list(deck)
    random.shuffle(cards)

    picks: dict[CardType, Card] = {}
    for card in cards:
        if card.card_type not in picks:
            picks[card.card_type] = card
        if len(picks) == len(CardType):
            break

    missing = [t.value for t in CardType if t not in picks]
    if missing:
        raise ValueError(f"Deck has no {', '.join(missing)} card to form a solution")

    solution = Solution(
        person=picks[CardType.PERSON],
        room=picks[CardType.ROOM],
        weapon=picks[CardType.WEAPON],
    )
    for card in solution.cards():
        card.holder = None
        cards.remove(card)

    if cards and not players:
        raise ValueError("No players to deal to")

    for i, card in enumerate(cards):
        players[i % len(players)].update_hand(card)

    logger.info(
        "[cards] Dealt %d cards to %d players (solution fixed)",
        len(cards), len(players),
    )
    return solution
