from typing import Dict
import numpy as np

# Phrases commonly found in click-bait or fabricated stories
SUSPICIOUS_PHRASES = (
    "click here",
    "amazing",
    "shocking",
    "unbelievable",
    "miracle",
    "secret",
)

PHRASE_POINTS = 10
CAPS_RATIO_THRESHOLD = 0.3
CAPS_POINTS = 15
EXCLAMATION_THRESHOLD = 3
EXCLAMATION_POINTS = 10


def compute_suspicion_score(title: str, content: str) -> int:
    """
    Compute the heuristic suspicion score for a news report

    Scoring system:
    - Each suspicious phrase present (case-insensitive): +10, once per phrase
    - More than 30% of characters are uppercase letters: +15
    - More than 3 exclamation marks: +10
    - Total clamped to 0-100

    Args:
        title: Report headline
        content: Report body

    Returns:
        Integer score between 0 and 100

    Example:
        >>> compute_suspicion_score("URGENT!!!! SHOCKING MIRACLE CLICK HERE", "...")
        55
    """
    breakdown = score_breakdown(title, content)
    total = sum(breakdown.values())
    return int(np.clip(total, 0, 100))


def score_breakdown(title: str, content: str) -> Dict[str, int]:
    """
    Points contributed by each signal, keyed by signal name
    """
    text = f"{title or ''} {content or ''}"
    lowered = text.lower()

    phrase_points = sum(PHRASE_POINTS for phrase in SUSPICIOUS_PHRASES if phrase in lowered)

    # Guard the ratio against empty text
    caps_ratio = _caps_ratio(text)
    caps_points = CAPS_POINTS if caps_ratio > CAPS_RATIO_THRESHOLD else 0

    exclamation_points = EXCLAMATION_POINTS if text.count("!") > EXCLAMATION_THRESHOLD else 0

    return {
        "phrases": phrase_points,
        "caps": caps_points,
        "exclamations": exclamation_points,
    }


def _caps_ratio(text: str) -> float:
    if not text:
        return 0.0
    uppercase = sum(1 for ch in text if ch.isupper())
    return uppercase / len(text)
