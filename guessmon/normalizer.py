"""
Name normalization for answers and synced records
"""
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_answer(text: str) -> str:
    """
    Normalize a guess or a creature name for comparison

    Lower-cases, then drops every character that is not an ASCII letter or digit.

    Example:
        >>> normalize_answer("Mr. Mime")
        'mrmime'
    """
    return _NON_ALNUM.sub("", text.lower())


def answers_match(guess: str, name: str) -> bool:
    """Exact match after normalization"""
    return normalize_answer(guess) == normalize_answer(name)


def format_species_name(raw: str, separator: str = "-") -> str:
    """
    Turn an API slug into a display name

    Splits on `separator`, upper-cases the first letter of each segment and
    rejoins with the same separator.

    Example:
        >>> format_species_name("iron-crown")
        'Iron-Crown'
    """
    return separator.join(part[:1].upper() + part[1:] for part in raw.split(separator))
