# thinkarena/engine/questionnaire.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

LIKERT_MIN = 1
LIKERT_MAX = 6


@dataclass(frozen=True)
class LikertAnswer:
    question_id: int
    value: int


@dataclass(frozen=True)
class ScaleItem:
    id: int
    is_reversed: bool = False


@dataclass(frozen=True)
class ScoreResult:
    score: Optional[int]
    missing: int = 0
    unexpected: int = 0

    @property
    def complete(self) -> bool:
        return self.score is not None


def clamp_likert(value: int) -> int:
    return min(max(int(value), LIKERT_MIN), LIKERT_MAX)


def item_score(value: int, reversed_item: bool) -> int:
    v = clamp_likert(value)
    return (LIKERT_MAX + 1 - v) if reversed_item else v


def score_responses(
    responses: Iterable[LikertAnswer],
    questions: Iterable[ScaleItem],
    strict: bool = False,
) -> ScoreResult:
    """
    Aggregate AOT score.

    Completeness is a count check: the number of distinct answered ids must
    equal the number of questions. With strict=True the answered ids must be
    exactly the question ids. Out-of-range values are clamped into 1..6, and an
    id that is not in `questions` counts as a non-reversed item.

    Returns ScoreResult(score=None, missing=N) instead of raising when
    incomplete. More distinct answers than questions is also incomplete;
    `unexpected` then counts the answered ids that are not questions.
    """
    answers = list(responses)
    items = list(questions)

    answered_ids = {a.question_id for a in answers}
    question_ids = {q.id for q in items}

    if strict:
        missing = len(question_ids - answered_ids)
        unexpected = len(answered_ids - question_ids)
        if missing or unexpected:
            return ScoreResult(score=None, missing=missing, unexpected=unexpected)
    elif len(answered_ids) > len(items):
        return ScoreResult(
            score=None,
            missing=len(question_ids - answered_ids),
            unexpected=len(answered_ids - question_ids),
        )
    elif len(answered_ids) < len(items):
        return ScoreResult(score=None, missing=len(items) - len(answered_ids))

    reversed_by_id = {q.id: bool(q.is_reversed) for q in items}
    total = sum(item_score(a.value, reversed_by_id.get(a.question_id, False)) for a in answers)
    return ScoreResult(score=total, missing=0)


def latest_responses(rows: Iterable) -> List[LikertAnswer]:
    """
    Reduce an answer history to the most recent value per question.

    `rows` are objects with question_id, value, created_at and id (ORM rows
    from user_responses). Ties on created_at are broken by id.
    """
    latest: dict[int, tuple] = {}
    for r in rows:
        key = (r.created_at, r.id or 0)
        current = latest.get(r.question_id)
        if current is None or _newer(key, current[0]):
            latest[r.question_id] = (key, r.value)
    return [LikertAnswer(question_id=qid, value=v) for qid, (_, v) in sorted(latest.items())]


def _newer(a: tuple, b: tuple) -> bool:
    # created_at can be None on rows that were never flushed
    a_ts, a_id = a
    b_ts, b_id = b
    if a_ts is not None and b_ts is not None and a_ts != b_ts:
        return _naive(a_ts) > _naive(b_ts)
    return a_id > b_id


def _naive(ts):
    # SQLite drops tzinfo on read; compare wall-clock values
    return ts.replace(tzinfo=None) if getattr(ts, "tzinfo", None) else ts
