"""Standard 52-card deck and the provably fair Fisher-Yates shuffle shared by Blackjack and HiLo."""
from dataclasses import dataclass

from tools.fair_rng import SeedState, derive_int

SUITS = ["hearts", "diamonds", "clubs", "spades"]
SUIT_SYMBOLS = {"hearts": "♥", "diamonds": "♦", "clubs": "♣", "spades": "♠"}

# (face, blackjack value, hilo rank); aces score 11 until that would bust
FACES = [
    ("A", 1, 1), ("2", 2, 2), ("3", 3, 3), ("4", 4, 4), ("5", 5, 5),
    ("6", 6, 6), ("7", 7, 7), ("8", 8, 8), ("9", 9, 9), ("10", 10, 10),
    ("J", 10, 11), ("Q", 10, 12), ("K", 10, 13),
]


@dataclass(frozen=True)
class Card:
    suit: str
    face: str
    value: int
    rank: int

    def __str__(self) -> str:
        return f"{self.face}{SUIT_SYMBOLS[self.suit]}"

    def to_dict(self) -> dict:
        return {"suit": self.suit, "face": self.face, "value": self.value, "rank": self.rank}


def card(face: str, suit: str = "spades") -> Card:
    """Build a single card by face label, e.g. card("A") or card("10", "hearts")."""
    for f, value, rank in FACES:
        if f == face:
            return Card(suit=suit, face=f, value=value, rank=rank)
    raise ValueError(f"Invalid card face: {face}")


def make_deck() -> list[Card]:
    return [Card(suit=s, face=f, value=v, rank=r) for s in SUITS for f, v, r in FACES]


def shuffle_deck(seed: SeedState, deck: list[Card] = None) -> list[Card]:
    """Fisher-Yates from the last index down to 1; swap index i with derive_int(cursor=i, 0, i)."""
    shuffled = list(deck if deck is not None else make_deck())
    params = seed.params()
    for i in range(len(shuffled) - 1, 0, -1):
        j = derive_int(params.with_cursor(i), 0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def draw(deck: list[Card]) -> Card:
    """Deal from the top of the prepared stack (the end of the list)."""
    if not deck:
        raise IndexError("Deck is empty")
    return deck.pop()
