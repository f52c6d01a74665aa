"""Score aggregator — recompute and store the weighted final score.

``finalScore = 0.4 * keyword + 0.4 * relevance + 0.2 * grammar``

Sub-scores arrive as numbers or numeric strings and are parsed to their
leading integer (truncation toward zero).  There is no range validation.
"""

from __future__ import annotations

import logging
import re

from errors import InvalidScoreError, NotFoundError
from models.evaluation import ScoreUpdateResult
from services.record_store import EVALUATIONS, RecordStore

logger = logging.getLogger(__name__)

_LEADING_INT_RE = re.compile(r"^\s*([+-]?[0-9]+)")


def parse_score(field: str, value: int | float | str) -> int:
    """Parse *value* to an int the way a lenient form field would.

    ``"82.7"`` → 82, ``"-3.9"`` → -3, ``"90 pts"`` → 90, ``75.5`` → 75.
    Only ASCII digits count, and floats outside ``[1e-6, 1e21)`` are read
    from their exponent form (``1e21`` → 1).
    Raises :class:`InvalidScoreError` when there is no leading integer.
    """
    if isinstance(value, bool):
        raise InvalidScoreError(field, value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise InvalidScoreError(field, value)
        if value and not 1e-6 <= abs(value) < 1e21:
            # exponent notation: "1e+21" reads as 1
            value = repr(value)
        else:
            return int(value)
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        raise InvalidScoreError(field, value)
    return int(match.group(1))


def compute_final_score(keyword: int, relevance: int, grammar: int) -> float:
    """Weighted 40/40/20 combination, computed in tenths to stay exact."""
    return (4 * keyword + 4 * relevance + 2 * grammar) / 10


class ScoreAggregator:
    """Writes sub-scores and the recomputed final score onto evaluation records."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def update_score(
        self,
        question_id: str,
        keyword_score: int | float | str,
        relevance_score: int | float | str,
        grammar_score: int | float | str,
    ) -> ScoreUpdateResult:
        """Update the first evaluation whose ``questionId`` matches.

        Not scoped to a user or submission: when several students answered
        the question, which record is updated is store-defined.  Prefer
        :meth:`update_evaluation_score`.
        """
        logger.warning(
            "updateScores keyed by questionId=%s is deprecated; "
            "update by evaluation id instead",
            question_id,
        )
        return await self._update(
            {"questionId": question_id},
            f"questionId={question_id}",
            keyword_score, relevance_score, grammar_score,
        )

    async def update_evaluation_score(
        self,
        evaluation_id: str,
        keyword_score: int | float | str,
        relevance_score: int | float | str,
        grammar_score: int | float | str,
    ) -> ScoreUpdateResult:
        """Update exactly the evaluation record with id *evaluation_id*."""
        return await self._update(
            {"id": evaluation_id},
            f"id={evaluation_id}",
            keyword_score, relevance_score, grammar_score,
        )

    async def _update(
        self,
        filter: dict,
        target: str,
        keyword_score: int | float | str,
        relevance_score: int | float | str,
        grammar_score: int | float | str,
    ) -> ScoreUpdateResult:
        keyword = parse_score("keywordScore", keyword_score)
        relevance = parse_score("relevanceScore", relevance_score)
        grammar = parse_score("grammarScore", grammar_score)
        final_score = compute_final_score(keyword, relevance, grammar)

        result = await self._store.update_one(EVALUATIONS, filter, {
            "evaluation.keyword.score": keyword,
            "evaluation.reference.score": relevance,
            "evaluation.grammar.score": grammar,
            "evaluation.finalScore": final_score,
        })
        if not result.matched:
            raise NotFoundError("Evaluation", target)

        logger.info(
            "Scores updated for %s: final=%.2f (modified=%d)",
            target, final_score, result.modified_count,
        )
        return ScoreUpdateResult(matched=True, final_score=final_score)
