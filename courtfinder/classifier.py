import re
from typing import Iterable, Tuple

from courtfinder.models import Sport

# Tested in this order; pickleball precedes tennis so "paddle tennis" style names resolve to pickleball
SPORT_KEYWORDS: Tuple[Tuple[Sport, Tuple[str, ...]], ...] = (
    (Sport.PICKLEBALL, ("pickleball", "paddle")),
    (Sport.TENNIS, ("tennis", "racquet")),
    (Sport.BASKETBALL, ("basketball", "hoop", "hoops")),
    (Sport.VOLLEYBALL, ("volleyball",)),
)

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def _tokens(text: str) -> set:
    return {t for t in _TOKEN_SPLIT.split(text.lower()) if t}


def classify(name: str, category_hints: Iterable[str] = ()) -> Sport:
    """
    Map raw venue metadata to a canonical Sport.

    Category hints (Google place types such as "tennis_court", Foursquare category
    names such as "Basketball Court") are matched first on exact tokens; the venue
    name is then searched for the same keywords as substrings.

    Args:
        name (str): Venue display name.
        category_hints (Iterable[str]): Provider category identifiers or labels.

    Returns:
        Sport: Classified sport, MULTI_SPORT when nothing matches.
    """
    hint_tokens = set()
    for hint in category_hints or ():
        if hint:
            hint_tokens |= _tokens(str(hint))

    for sport, keywords in SPORT_KEYWORDS:
        if any(k in hint_tokens for k in keywords):
            return sport

    lowered = (name or "").lower()
    for sport, keywords in SPORT_KEYWORDS:
        if any(k in lowered for k in keywords):
            return sport

    return Sport.MULTI_SPORT
