from __future__ import annotations

from datetime import datetime, timedelta
from types import SimpleNamespace

from thinkarena.engine.questionnaire import (
    LikertAnswer,
    ScaleItem,
    latest_responses,
    score_responses,
)


QUESTIONS = [
    ScaleItem(1, is_reversed=True),
    ScaleItem(2),
    ScaleItem(3),
    ScaleItem(4, is_reversed=True),
]


def _answers(values: dict) -> list[LikertAnswer]:
    return [LikertAnswer(qid, v) for qid, v in values.items()]


# -------------------------
# AGGREGATE SCORE
# -------------------------
def test_score_sums_with_reversal():
    out = score_responses(_answers({1: 2, 2: 5, 3: 4, 4: 6}), QUESTIONS)
    # (7-2) + 5 + 4 + (7-6)
    assert out.complete
    assert out.score == 15
    assert out.missing == 0


def test_reversed_item_extremes():
    one = score_responses([LikertAnswer(1, 1)], [ScaleItem(1, is_reversed=True)])
    six = score_responses([LikertAnswer(1, 6)], [ScaleItem(1, is_reversed=True)])
    assert one.score == 6
    assert six.score == 1


def test_score_stays_within_bounds():
    n = len(QUESTIONS)
    lowest = score_responses(_answers({1: 6, 2: 1, 3: 1, 4: 6}), QUESTIONS)
    highest = score_responses(_answers({1: 1, 2: 6, 3: 6, 4: 1}), QUESTIONS)
    assert lowest.score == n
    assert highest.score == 6 * n


def test_out_of_range_values_are_clamped():
    out = score_responses(_answers({1: 0, 2: 9, 3: -3, 4: 7}), QUESTIONS)
    # 1 -> reversed 6, 9 -> 6, -3 -> 1, 7 -> 6 reversed -> 1
    assert out.score == 6 + 6 + 1 + 1


def test_missing_one_question_is_incomplete():
    out = score_responses(_answers({1: 3, 2: 3, 3: 3}), QUESTIONS)
    assert not out.complete
    assert out.score is None
    assert out.missing == 1


def test_no_answers_reports_all_missing():
    out = score_responses([], QUESTIONS)
    assert out.missing == len(QUESTIONS)


def test_unknown_question_counts_as_not_reversed():
    # count-based completeness lets a foreign id through
    out = score_responses(_answers({1: 2, 2: 2, 3: 2, 99: 2}), QUESTIONS)
    assert out.complete
    assert out.score == 5 + 2 + 2 + 2


def test_strict_mode_rejects_foreign_ids():
    out = score_responses(_answers({1: 2, 2: 2, 3: 2, 99: 2}), QUESTIONS, strict=True)
    assert not out.complete
    assert out.missing == 1
    assert out.unexpected == 1


def test_more_answers_than_questions_never_reports_negative_missing():
    out = score_responses(_answers({1: 2, 2: 2, 3: 2, 4: 2, 99: 2}), QUESTIONS)
    assert not out.complete
    assert out.missing == 0
    assert out.unexpected == 1


# -------------------------
# LATEST RESPONSE PER QUESTION
# -------------------------
def test_latest_response_wins():
    t0 = datetime(2025, 3, 1, 9, 0, 0)
    rows = [
        SimpleNamespace(id=1, question_id=1, value=2, created_at=t0),
        SimpleNamespace(id=2, question_id=2, value=4, created_at=t0),
        SimpleNamespace(id=3, question_id=1, value=5, created_at=t0 + timedelta(minutes=2)),
    ]
    out = latest_responses(rows)
    assert out == [LikertAnswer(1, 5), LikertAnswer(2, 4)]


def test_latest_response_tie_broken_by_id():
    t0 = datetime(2025, 3, 1, 9, 0, 0)
    rows = [
        SimpleNamespace(id=7, question_id=3, value=6, created_at=t0),
        SimpleNamespace(id=4, question_id=3, value=1, created_at=t0),
    ]
    assert latest_responses(rows) == [LikertAnswer(3, 6)]
