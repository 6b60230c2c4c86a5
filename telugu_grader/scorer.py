"""Similarity scoring between a spoken fragment and an expected token.

The policy is tiered and evaluated in order, first match wins:

1. Exact equality after normalization.
2. Large length gap: only containment counts, penalised by length ratio.
3. Containment at similar length.
4. Prefix or suffix match at small length difference.
5. Index-aligned character overlap at small length difference.
6. Nothing matched.

Streaming recognizers often return partial or over-captured words, which is
what the containment and prefix/suffix tiers absorb.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .normalize import TELUGU_BLOCK, normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScorerConfig:
    """Tier constants for the similarity scorer."""

    large_gap: int = 4  # length difference above which only containment counts
    min_length_ratio: float = 0.6
    short_containment_score: float = 0.2
    long_containment_score: float = 0.7
    containment_score: float = 0.8
    affix_max_gap: int = 3
    affix_score: float = 0.7
    overlap_max_gap: int = 3
    overlap_cutoff: float = 0.4
    loose_overlap_max_gap: int = 2
    loose_overlap_cutoff: float = 0.3
    loose_overlap_bonus: float = 0.1


DEFAULT_CONFIG = ScorerConfig()


def _contains_either(a: str, b: str) -> bool:
    return a in b or b in a


def _affix_either(a: str, b: str) -> bool:
    return a.startswith(b) or b.startswith(a) or a.endswith(b) or b.endswith(a)


def char_overlap(a: str, b: str) -> float:
    """Index-aligned equal characters over the longer length."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    matching = sum(1 for x, y in zip(a, b) if x == y)
    return matching / longest


def score(
    spoken: str,
    expected: str,
    config: ScorerConfig = DEFAULT_CONFIG,
    block: tuple[str, str] = TELUGU_BLOCK,
) -> float:
    """Score how well a spoken fragment matches the expected token.

    Args:
        spoken: Transcript fragment (raw or normalized).
        expected: Target token (raw or normalized).
        config: Tier constants.
        block: Script block kept by the normalizer.

    Returns:
        Similarity in [0, 1]. Total and deterministic.
    """
    a = normalize(spoken, block)
    b = normalize(expected, block)

    # An empty string is contained in everything; never let it match.
    if not a or not b:
        return 0.0

    if a == b:
        return 1.0

    gap = abs(len(a) - len(b))

    if gap > config.large_gap:
        if not _contains_either(a, b):
            return 0.0
        ratio = min(len(a), len(b)) / max(len(a), len(b))
        if ratio < config.min_length_ratio:
            return config.short_containment_score
        return config.long_containment_score

    if _contains_either(a, b):
        return config.containment_score

    if gap <= config.affix_max_gap and _affix_either(a, b):
        return config.affix_score

    similarity = char_overlap(a, b)
    if gap <= config.overlap_max_gap and similarity > config.overlap_cutoff:
        return similarity
    if gap <= config.loose_overlap_max_gap and similarity > config.loose_overlap_cutoff:
        return min(1.0, similarity + config.loose_overlap_bonus)

    return 0.0


def best_score(
    candidates: Iterable[str],
    expected: str,
    config: ScorerConfig = DEFAULT_CONFIG,
) -> float:
    """Return the highest score any candidate reaches against ``expected``."""
    best = 0.0
    for candidate in candidates:
        value = score(candidate, expected, config)
        logger.debug(f"{candidate!r} vs {expected!r} = {value:.2f}")
        best = max(best, value)
    return best
