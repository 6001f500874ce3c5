"""
============================================================================
FILE: content_filter.py
LOCATION: gateway/content_filter.py
============================================================================

PURPOSE:
    Reject contact-form submissions that contain profanity, common spam
    phrases or links.

KEY COMPONENTS:
    - ContentFilter.is_profane(): Word-boundary, case-insensitive match
    - ContentFilter.contains_link(): http://, https:// or www. anywhere
    - content_filter: Default instance with the built-in word lists

DEPENDENCIES:
    - External: None
    - Internal: None
============================================================================
"""

import re
from typing import Iterable, Optional


PROFANITY_WORDS = (
    "ass", "asshole", "bastard", "bitch", "bollocks", "bullshit", "crap",
    "cunt", "damn", "dick", "fuck", "fucker", "fucking", "motherfucker",
    "piss", "prick", "shit", "slut", "twat", "wanker", "whore",
)

SPAM_WORDS = (
    "bitcoin", "crypto", "viagra", "loan", "casino",
    "forex", "porn", "betting", "telegram", "whatsapp",
    "click here", "earn money", "win big", "cheap pills",
)

LINK_PATTERN = re.compile(r"(http://|https://|www\.)", re.IGNORECASE)


class ContentFilter:
    def __init__(self, words: Iterable[str] = PROFANITY_WORDS + SPAM_WORDS):
        self._words = set()
        self._pattern: Optional[re.Pattern] = None
        self.add_words(*words)

    def add_words(self, *words: str) -> None:
        self._words.update(w.strip().lower() for w in words if w.strip())
        # Longest first so "click here" wins over a shorter overlapping entry
        alternatives = sorted(self._words, key=len, reverse=True)
        body = "|".join(r"\s+".join(map(re.escape, w.split())) for w in alternatives)
        self._pattern = re.compile(rf"\b(?:{body})\b", re.IGNORECASE) if body else None

    def is_profane(self, text: Optional[str]) -> bool:
        if not text or self._pattern is None:
            return False
        return self._pattern.search(text) is not None

    @staticmethod
    def contains_link(text: Optional[str]) -> bool:
        return bool(text) and LINK_PATTERN.search(text) is not None


content_filter = ContentFilter()
