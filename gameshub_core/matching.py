from __future__ import annotations

from dataclasses import dataclass, replace
from itertools import islice, cycle
from typing import List, Sequence, Tuple

from .errors import IllegalFlipError
from .grid import InvalidGridError
from .rng import RandomSource, shuffled

SYMBOLS: Tuple[str, ...] = (
    "🍎", "🍌", "🍒", "🍇", "🍉", "🥝", "🍓", "🥥",
    "🍍", "🍑", "🍋", "🍊", "🍐", "🥭", "🍈", "🍏",
)
ALLOWED_PAIRS = (4, 6, 8, 10)
DEFAULT_PAIRS = 8
MAX_OPEN = 2


@dataclass(frozen=True)
class Card:
    symbol: str
    face_up: bool = False
    matched: bool = False


Deck = Tuple[Card, ...]


def make_deck(rng: RandomSource, pairs: int = DEFAULT_PAIRS, symbols: Sequence[str] = SYMBOLS) -> Deck:
    """Builds ``pairs`` matching pairs, shuffled face down."""
    if pairs not in ALLOWED_PAIRS:
        raise InvalidGridError(f'pairs must be one of {ALLOWED_PAIRS}, got {pairs!r}')
    chosen = list(islice(cycle(symbols), pairs))
    return tuple(Card(symbol=s) for s in shuffled(chosen + chosen, rng))


def flip_card(deck: Deck, open_indices: Sequence[int], index: int) -> Tuple[Deck, Tuple[int, ...]]:
    """Turns one card face up. At most two cards may be open and unresolved at once."""
    if not 0 <= index < len(deck):
        raise IllegalFlipError(f'no card at index {index}')
    if len(open_indices) >= MAX_OPEN:
        raise IllegalFlipError('two cards are already open')
    card = deck[index]
    if card.matched:
        raise IllegalFlipError('card is already matched')
    if card.face_up or index in open_indices:
        raise IllegalFlipError('card is already face up')
    cards: List[Card] = list(deck)
    cards[index] = replace(card, face_up=True)
    return tuple(cards), tuple(open_indices) + (index,)


def resolve_pair(deck: Deck, open_indices: Sequence[int]) -> Tuple[Deck, bool]:
    """Settles two open cards: equal symbols stay matched, others turn back face down."""
    if len(open_indices) != MAX_OPEN:
        raise IllegalFlipError('two open cards are needed to resolve')
    a, b = open_indices
    if a == b:
        raise IllegalFlipError('a card cannot be paired with itself')
    cards: List[Card] = list(deck)
    matched = cards[a].symbol == cards[b].symbol
    for i in (a, b):
        if matched:
            cards[i] = replace(cards[i], face_up=True, matched=True)
        else:
            cards[i] = replace(cards[i], face_up=False)
    return tuple(cards), matched


def reveal_all(deck: Deck) -> Deck:
    """Turns every card face up; matched flags are untouched."""
    return tuple(replace(card, face_up=True) for card in deck)


def hide_unmatched(deck: Deck) -> Deck:
    return tuple(replace(card, face_up=card.matched) for card in deck)


def is_deck_complete(deck: Deck) -> bool:
    return all(card.matched for card in deck)


def matched_pairs(deck: Deck) -> int:
    return sum(1 for card in deck if card.matched) // 2
