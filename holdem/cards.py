from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional

RANKS = "23456789TJQKA"
SUITS = "CDHS"


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def code(self) -> str:
        return f"{self.rank}{self.suit}"


def new_deck() -> List[Card]:
    """Unshuffled 52-card deck, deuces first."""
    return [Card(rank, suit) for rank in RANKS for suit in SUITS]


def shuffle(deck: List[Card], rng: random.Random) -> None:
    rng.shuffle(deck)


def build_deck(rng: Optional[random.Random] = None) -> List[Card]:
    deck = new_deck()
    shuffle(deck, rng or random.Random())
    return deck


def deal(deck: List[Card], count: int) -> List[Card]:
    if len(deck) < count:
        raise ValueError("Not enough cards left in deck")
    cards = deck[:count]
    del deck[:count]
    return cards


def burn(deck: List[Card]) -> Card:
    return deal(deck, 1)[0]


def cards_to_codes(cards: List[Card]) -> List[str]:
    return [card.code for card in cards]


def parse_code(code: str) -> Card:
    if len(code) != 2:
        raise ValueError(f"Invalid card code: {code}")
    return Card(code[0].upper(), code[1].upper())
