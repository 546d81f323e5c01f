"""
Note Scoring Engine.

Transcript notes get a sentiment score and a deal-quality score; plain notes
get neither.  Both are length proxies (no language analysis): one point per
20 characters for sentiment and one per 15 for deal quality, capped at 100.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from bridgeworks.models.enums import NoteType

SENTIMENT_CHARS_PER_POINT = 20
DEAL_QUALITY_CHARS_PER_POINT = 15
MAX_SCORE = 100


class NoteScores(NamedTuple):
    sentiment_score: int
    deal_quality_score: int


def score_note(content: str, note_type: "NoteType | str") -> Optional[NoteScores]:
    """Return scores for a transcript, ``None`` for any other note type."""
    if NoteType(note_type) != NoteType.TRANSCRIPT:
        return None
    length = len(content)
    return NoteScores(
        sentiment_score=min(length // SENTIMENT_CHARS_PER_POINT, MAX_SCORE),
        deal_quality_score=min(length // DEAL_QUALITY_CHARS_PER_POINT, MAX_SCORE),
    )
