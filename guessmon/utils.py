"""
Utility functions
"""
import random
from typing import List, Sequence, TypeVar

T = TypeVar("T")

SPRITE_BASE_URL = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"

ROMAN_NUMERALS = ["", "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX", "X", "XI", "XII"]


def sprite_url(creature_id: int) -> str:
    """Full-art image URL for a creature id"""
    return f"{SPRITE_BASE_URL}/other/official-artwork/{creature_id}.png"


def icon_url(creature_id: int) -> str:
    """Small icon image URL for a creature id"""
    return f"{SPRITE_BASE_URL}/{creature_id}.png"


def roman_numeral(number: int) -> str:
    """
    Numeral used in cohort labels

    Example:
        >>> roman_numeral(10)
        'X'
        >>> roman_numeral(14)
        '14'
    """
    if 0 < number < len(ROMAN_NUMERALS):
        return ROMAN_NUMERALS[number]
    return str(number)


def shuffled(items: Sequence[T], rng: random.Random) -> List[T]:
    """
    Return a shuffled copy of `items` (Fisher-Yates)

    Walks from the end, swapping each slot with a uniformly chosen index at or
    below it, so every permutation is equally likely for a fair `rng`.

    Args:
        items: Sequence to shuffle (left untouched)
        rng: Random source; inject a seeded one for reproducible draws

    Returns:
        New list with the same elements
    """
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result
