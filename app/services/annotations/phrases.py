"""Heuristics for pulling searchable phrases and page numbers out of tutor answers."""

import re

# Phrases inside straight or curly double quotes
QUOTED_PATTERN = re.compile(r"\"([^\"\n]+)\"|“([^”\n]+)”")
EMPHASIS_PATTERN = re.compile(r"\*\*([^*\n]+)\*\*")
PAGE_REFERENCE_PATTERN = re.compile(r"page\s+(\d+)", re.IGNORECASE)

# Two-word windows must be longer than this to be worth searching for
MIN_WINDOW_LENGTH = 6
MAX_KEY_PHRASES = 10

_EDGE_PUNCTUATION = "\"'`*_.,;:!?()[]{}<>“”‘’"


def _clean_word(word: str) -> str:
    return word.strip(_EDGE_PUNCTUATION)


def extract_key_phrases(text: str, max_phrases: int = MAX_KEY_PHRASES) -> list[str]:
    """
    Extract candidate phrases to look up in the document.

    Priority order: quoted substrings, **emphasized** substrings, then
    two-word windows longer than MIN_WINDOW_LENGTH characters. Duplicates
    (case-insensitive) keep their first position.

    Args:
        text: Full tutor response
        max_phrases: Maximum number of candidates returned

    Returns:
        Candidate phrases in priority order
    """
    phrases: list[str] = []
    seen: set[str] = set()

    def add(candidate: str) -> None:
        candidate = " ".join(candidate.split())
        key = candidate.lower()
        if candidate and key not in seen:
            seen.add(key)
            phrases.append(candidate)

    for match in QUOTED_PATTERN.finditer(text):
        add(match.group(1) or match.group(2))

    for match in EMPHASIS_PATTERN.finditer(text):
        add(match.group(1))

    words = [w for w in (_clean_word(word) for word in text.split()) if w]
    for first, second in zip(words, words[1:]):
        if len(phrases) >= max_phrases:
            break
        window = f"{first} {second}"
        if len(window) > MIN_WINDOW_LENGTH:
            add(window)

    return phrases[:max_phrases]


def extract_page_references(text: str) -> list[int]:
    """Extract page numbers mentioned as "page N", in order of appearance."""
    return [int(n) for n in PAGE_REFERENCE_PATTERN.findall(text) if int(n) > 0]
