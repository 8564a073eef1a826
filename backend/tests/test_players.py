"""Tests for players.py: disproving, computer targets/suggestions, accusations."""

from collections import Counter

import pytest

from clue_engine.board import BoardCell
from clue_engine.cards import Card, CardCatalog, CardType, Deck, Solution
from clue_engine.players import ComputerPlayer, HumanPlayer, random_element

PEOPLE = ["Miss Scarlet", "Colonel Mustard", "Mrs. Peacock"]
WEAPONS = ["Rope", "Knife", "Wrench"]
ROOMS = {"K": "Kitchen", "L": "Library", "S": "Study"}


@pytest.fixture
def deck():
    d = Deck()
    for name in ROOMS.values():
        d.add(Card(name, CardType.ROOM))
    for name in PEOPLE:
        d.add(Card(name, CardType.PERSON))
    for name in WEAPONS:
        d.add(Card(name, CardType.WEAPON))
    return d


@pytest.fixture
def catalog(deck):
    return CardCatalog.from_deck(deck, ROOMS)


@pytest.fixture
def computer(catalog):
    return ComputerPlayer("Colonel Mustard", "yellow", 0, 0, catalog)


def person(name):
    return Card(name, CardType.PERSON)


def weapon(name):
    return Card(name, CardType.WEAPON)


def room(name):
    return Card(name, CardType.ROOM)


def suggestion(p="Miss Scarlet", r="Kitchen", w="Rope"):
    return Solution(person=person(p), room=room(r), weapon=weapon(w))


def center(row, col, code):
    return BoardCell(row, col, code, is_room_center=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_random_element():
    assert random_element([]) is None
    assert random_element({"only"}) == "only"
    assert random_element(["a", "b"]) in {"a", "b"}


# ---------------------------------------------------------------------------
# Hands and disproving
# ---------------------------------------------------------------------------


def test_update_hand_marks_seen_and_holder(computer):
    card = weapon("Knife")
    computer.update_hand(card)
    assert card in computer.hand
    assert card in computer.seen_cards
    assert card.holder == "Colonel Mustard"

    computer.clear_hand()
    assert not computer.hand
    assert card in computer.seen_cards


def test_disprove_single_match(computer):
    computer.update_hand(weapon("Rope"))
    computer.update_hand(person("Mrs. Peacock"))
    for _ in range(20):
        assert computer.disprove_suggestion(suggestion()) == weapon("Rope")


def test_disprove_no_match(computer):
    computer.update_hand(weapon("Wrench"))
    computer.update_hand(room("Study"))
    assert computer.disprove_suggestion(suggestion()) is None


def test_disprove_multiple_matches_all_appear(computer):
    computer.update_hand(weapon("Rope"))
    computer.update_hand(person("Miss Scarlet"))
    computer.update_hand(room("Kitchen"))
    counts = Counter(computer.disprove_suggestion(suggestion()) for _ in range(200))
    assert set(counts) == {weapon("Rope"), person("Miss Scarlet"), room("Kitchen")}


def test_human_disproves_too(catalog):
    human = HumanPlayer("Miss Scarlet", "red", 0, 0, catalog)
    human.update_hand(room("Kitchen"))
    assert human.disprove_suggestion(suggestion()) == room("Kitchen")


def test_unseen_cards(computer):
    computer.update_seen(person("Miss Scarlet"))
    assert computer.unseen_cards(CardType.PERSON) == {
        person("Colonel Mustard"), person("Mrs. Peacock")
    }
    assert len(computer.unseen_cards(CardType.ROOM)) == 3


# ---------------------------------------------------------------------------
# Computer decisions
# ---------------------------------------------------------------------------


def test_computer_suggests_only_unseen(computer):
    computer.update_seen(person("Miss Scarlet"))
    computer.update_seen(person("Colonel Mustard"))
    computer.update_seen(weapon("Rope"))
    computer.update_seen(weapon("Knife"))
    for _ in range(20):
        s = computer.create_suggestion(room("Library"))
        assert s.person == person("Mrs. Peacock")
        assert s.weapon == weapon("Wrench")
        assert s.room == room("Library")


def test_computer_suggestion_for_room_code(computer):
    s = computer.create_suggestion_for("S")
    assert s.room == room("Study")
    with pytest.raises(ValueError):
        computer.create_suggestion_for("W")


def test_computer_suggests_when_everything_seen(computer):
    for name in PEOPLE:
        computer.update_seen(person(name))
    s = computer.suggest(room("Kitchen"))
    assert s.person.name in PEOPLE


def test_computer_prefers_unseen_room(computer):
    kitchen, study = center(1, 1, "K"), center(9, 10, "S")
    walk = BoardCell(3, 1, "W")
    computer.update_seen(room("Kitchen"))
    for _ in range(20):
        assert computer.select_target({kitchen, study, walk}) == study


def test_computer_random_target_without_unseen_room(computer):
    kitchen = center(1, 1, "K")
    walks = {BoardCell(3, 1, "W"), BoardCell(3, 2, "W")}
    computer.update_seen(room("Kitchen"))
    picks = {computer.select_target(walks | {kitchen}) for _ in range(200)}
    assert picks == walks | {kitchen}


def test_computer_locks_undisproven_unseen_suggestion(computer):
    s = suggestion("Mrs. Peacock", "Study", "Wrench")
    computer.receive_suggestion_result(None, s)
    assert computer.will_accuse()
    assert computer.make_accusation() == s


def test_computer_ignores_undisproven_suggestion_with_seen_card(computer):
    computer.update_hand(weapon("Wrench"))
    computer.receive_suggestion_result(None, suggestion("Mrs. Peacock", "Study", "Wrench"))
    assert not computer.will_accuse()


def test_computer_ignores_disproven_suggestion(computer):
    computer.receive_suggestion_result(person("Mrs. Peacock"), suggestion("Mrs. Peacock"))
    assert not computer.will_accuse()


def test_computer_accuses_by_elimination(computer):
    for card in [person("Miss Scarlet"), person("Colonel Mustard"),
                 weapon("Rope"), weapon("Knife"),
                 room("Kitchen"), room("Library")]:
        computer.update_seen(card)
    computer.receive_suggestion_result(room("Library"), suggestion(r="Library"))
    assert computer.make_accusation() == suggestion("Mrs. Peacock", "Study", "Wrench")


def test_computer_accusation_is_never_overwritten(computer):
    first = suggestion("Mrs. Peacock", "Study", "Wrench")
    computer.receive_suggestion_result(None, first)
    computer.receive_suggestion_result(None, suggestion("Colonel Mustard", "Library", "Knife"))
    assert computer.make_accusation() == first


# ---------------------------------------------------------------------------
# Human decisions
# ---------------------------------------------------------------------------


def test_human_waits_for_caller(catalog):
    human = HumanPlayer("Miss Scarlet", "red", 0, 0, catalog)
    assert human.select_target({center(1, 1, "K")}) is None
    assert human.suggest(room("Kitchen")) is None
    assert not human.will_accuse()


def test_human_accusation(catalog):
    human = HumanPlayer("Miss Scarlet", "red", 0, 0, catalog)
    accusation = suggestion()
    human.start_accusing(accusation)
    assert human.will_accuse()
    assert human.make_accusation() == accusation


def test_human_cancelled_accusation(catalog):
    human = HumanPlayer("Miss Scarlet", "red", 0, 0, catalog)
    human.start_accusing(None)
    assert human.will_accuse()
    assert human.make_accusation() is None
    assert not human.will_accuse()
