"""Text normalization for transcript and target comparison.

Normalized text is lowercase and contains only characters from the target
script block plus ASCII letters, digits and underscore. Everything else,
whitespace included, is dropped.
"""

import re
from functools import lru_cache

# Telugu Unicode block
TELUGU_BLOCK = ("\u0c00", "\u0c7f")


@lru_cache(maxsize=8)
def _strip_pattern(block: tuple[str, str]) -> re.Pattern[str]:
    start, end = block
    return re.compile(f"[^{re.escape(start)}-{re.escape(end)}a-z0-9_]+")


@lru_cache(maxsize=8)
def _script_pattern(block: tuple[str, str]) -> re.Pattern[str]:
    start, end = block
    return re.compile(f"[{re.escape(start)}-{re.escape(end)}]")


def normalize(text: str, block: tuple[str, str] = TELUGU_BLOCK) -> str:
    """Normalize a token for comparison.

    Args:
        text: Raw transcript fragment or target token.
        block: Inclusive (first, last) code points of the script to keep.

    Returns:
        Lowercased text with everything outside the whitelist removed.
        Never raises; ``normalize(normalize(x)) == normalize(x)``.
    """
    if not text:
        return ""
    return _strip_pattern(block).sub("", text.lower()).strip()


def split_candidates(transcript: str) -> list[str]:
    """Split a transcript into whitespace-delimited candidate words."""
    return [word for word in transcript.lower().split() if word]


def contains_script(token: str, block: tuple[str, str] = TELUGU_BLOCK) -> bool:
    """Check whether a token has at least one character from the script."""
    return _script_pattern(block).search(token) is not None


def extract_targets(text: str, block: tuple[str, str] = TELUGU_BLOCK) -> list[str]:
    """Build a target sequence from paragraph text.

    Example: "నేను బడికి (school) వెళ్తున్నాను." ->
    ["నేను", "బడికి", "వెళ్తున్నాను."]

    Tokens without any script character (punctuation, English glosses) are
    skipped. Tokens are otherwise kept verbatim; comparison normalizes them.
    """
    return [
        word.strip()
        for word in re.split(r"\s+", text)
        if word.strip() and contains_script(word, block)
    ]
