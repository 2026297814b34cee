import random
from dataclasses import FrozenInstanceError

import pytest

from cardroom.services.game import Card, DeckEmpty, create_deck, deal_one, shuffle
from cardroom.services.game.cards import RANKS, SUITS


def test_create_deck_has_one_card_per_suit_and_rank():
    deck = create_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52
    assert set(deck) == {Card(s, r) for s in SUITS for r in RANKS}
    # deterministic
    assert deck == create_deck()


def test_card_color_and_wire_form():
    assert Card('♥', 'Q').color == 'red'
    assert Card('♦', '2').color == 'red'
    assert Card('♣', 'A').color == 'black'
    assert Card('♠', '10').to_dict() == {'suit': '♠', 'value': '10', 'color': 'black'}


def test_card_is_immutable():
    card = Card('♥', 'A')
    with pytest.raises(FrozenInstanceError):
        card.rank = 'K'


def test_shuffle_walks_from_the_end(scripted_rng):
    rng = scripted_rng()
    deck = create_deck()
    shuffle(deck, rng)
    assert rng.calls == list(range(52, 1, -1))
    # n - 1 every time is the identity permutation
    assert deck == create_deck()


def test_shuffle_follows_the_scripted_swaps(scripted_rng):
    items = ['a', 'b', 'c']
    # i=2 swaps with 0 -> c b a; i=1 swaps with 0 -> b c a
    shuffle(items, scripted_rng([0, 0]))
    assert items == ['b', 'c', 'a']


def test_shuffle_is_a_permutation():
    deck = create_deck()
    result = shuffle(deck, random.Random(42))
    assert result is deck
    assert sorted(deck, key=repr) == sorted(create_deck(), key=repr)
    assert deck != create_deck()


def test_deal_one_takes_the_top_card():
    deck = create_deck()
    top = deck[-1]
    assert deal_one(deck) == top
    assert len(deck) == 51
    assert top not in deck


def test_deal_one_on_empty_deck_raises():
    with pytest.raises(DeckEmpty):
        deal_one([])
