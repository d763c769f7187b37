"""Plain-text checks shared by the readiness components."""

import re
from collections.abc import Iterable
from functools import lru_cache


@lru_cache(maxsize=32)
def _placeholder_pattern(tokens: tuple[str, ...]) -> re.Pattern[str]:
    parts = []
    for token in tokens:
        escaped = re.escape(token)
        # Alphanumeric tokens must stand alone ("TK" is not in "OUTKAST")
        if token[:1].isalnum():
            escaped = r"(?<![A-Za-z0-9])" + escaped
        if token[-1:].isalnum():
            escaped = escaped + r"(?![A-Za-z0-9])"
        parts.append(escaped)
    return re.compile("|".join(parts), re.IGNORECASE)


def has_placeholders(text: str | None, tokens: Iterable[str]) -> bool:
    """Case-insensitive scan for placeholder tokens like TBD, TK, ???."""
    tokens = tuple(t for t in tokens if t)
    if not text or not tokens:
        return False
    return _placeholder_pattern(tokens).search(text) is not None


def missing_keywords(text: str | None, keywords: Iterable[str]) -> list[str]:
    """Keywords with no case-insensitive substring match in ``text``, in keyword order."""
    lowered = (text or "").lower()
    return [k for k in keywords if k.lower() not in lowered]


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, float(value)))
