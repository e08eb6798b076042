"""Infer gender and role from speaker tags using lexical heuristics."""

import re

from kahani_producer.constants import NARRATOR_TAG
from kahani_producer.models import Gender

# Female keywords are checked first, so a tag matching both lists is FEMALE.
FEMALE_KEYWORDS = (
    "female", "girl", "woman", "lady", "mother", "mom", "sister", "wife",
    "aunt", "grandma", "daughter", "queen", "princess", "madam", "miss",
    "she", "her",
)
MALE_KEYWORDS = (
    "male", "boy", "man", "guy", "father", "dad", "brother", "husband",
    "uncle", "grandpa", "son", "king", "prince", "sir", "mr", "he", "him",
)
ELDER_WORDS = {"old", "elder", "elderly", "grandpa", "grandma", "grandfather", "grandmother"}

_DIGITS_RE = re.compile(r"\d+")
_WORD_SPLIT_RE = re.compile(r"[\W_]+")


def _normalize(tag: str) -> str:
    return tag.strip().lower()


def classify_speaker(tag: str) -> Gender:
    """Classify a speaker tag as MALE, FEMALE or NEUTRAL.

    "hero" and "heroine" are matched exactly; anything else is a substring
    scan over the keyword lists. Unrecognized tags (e.g. "Narrator") are
    NEUTRAL.
    """
    t = _normalize(tag)

    if t == "hero":
        return Gender.MALE
    if t == "heroine":
        return Gender.FEMALE

    if any(k in t for k in FEMALE_KEYWORDS):
        return Gender.FEMALE
    if any(k in t for k in MALE_KEYWORDS):
        return Gender.MALE

    return Gender.NEUTRAL


def speaker_index(tag: str) -> int:
    """Zero-based index from the first number in a tag ("Male_2" → 1).

    Tags without digits map to 0. "Male_0" yields -1, which wraps to the
    last pool entry under modulo selection.
    """
    match = _DIGITS_RE.search(tag)
    if not match:
        return 0
    return int(match.group(0)) - 1


def is_narrator(tag: str) -> bool:
    return _normalize(tag) == NARRATOR_TAG


def is_elder(tag: str) -> bool:
    """True when the tag contains an age word such as "old" or "grandpa"."""
    words = set(_WORD_SPLIT_RE.split(_normalize(tag)))
    return bool(words & ELDER_WORDS)
