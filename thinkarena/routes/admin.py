# thinkarena/routes/admin.py
from __future__ import annotations

import csv
import io
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import models
from ..db import get_db
from ..engine.audit import record_event
from ..engine.questionnaire import latest_responses
from .deps import admin_user

router = APIRouter(prefix="/admin", tags=["admin"])


def _badge_counts(db: Session) -> Dict[int, int]:
    rows = (
        db.query(models.BadgeAward.user_id, func.count(models.BadgeAward.id))
        .group_by(models.BadgeAward.user_id)
        .all()
    )
    return {int(uid): int(n) for uid, n in rows}


def _topic_responses_by_user(db: Session, user_ids: Optional[List[int]] = None) -> Dict[int, List[dict]]:
    """Latest answer per topic question, grouped by user."""
    q = db.query(models.UserResponse).filter(
        models.UserResponse.question_type == models.QuestionTypeEnum.TOPIC
    )
    if user_ids is not None:
        q = q.filter(models.UserResponse.user_id.in_(user_ids))

    rows_by_user = defaultdict(list)
    for r in q.all():
        rows_by_user[r.user_id].append(r)

    texts = {t.id: t.text for t in db.query(models.TopicQuestion).all()}
    out: Dict[int, List[dict]] = {}
    for uid, rows in rows_by_user.items():
        out[uid] = [
            {"question_id": a.question_id, "question": texts[a.question_id], "value": a.value}
            for a in latest_responses(rows)
            if a.question_id in texts
        ]
    return out


def _points_over_time(users) -> List[Dict[str, Any]]:
    # points held by users who signed up on each day
    totals: Dict[str, int] = defaultdict(int)
    for u in users:
        if u.total_score > 0 and u.created_at is not None:
            totals[u.created_at.date().isoformat()] += u.total_score
    return [{"date": day, "total": totals[day]} for day in sorted(totals)]


def _csv_response(header: List[str], rows, filename: str) -> StreamingResponse:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    writer.writerows(rows)
    output.seek(0)
    return StreamingResponse(
        output, media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), admin: models.User = Depends(admin_user)) -> Dict[str, Any]:
    users = db.query(models.User).order_by(models.User.total_score.desc(), models.User.id.asc()).all()
    badge_counts = _badge_counts(db)
    topics = _topic_responses_by_user(db)

    rows = [
        {
            "id": u.id,
            "username": u.username,
            "display_name": u.display_name,
            "aot_score": u.aot_score,
            "total_score": u.total_score,
            "has_completed_questionnaire": bool(u.has_completed_questionnaire),
            "has_completed_onboarding": bool(u.has_completed_onboarding),
            "badge_count": badge_counts.get(u.id, 0),
            "topic_responses": topics.get(u.id, []),
        }
        for u in users
    ]
    return {
        "users": rows,
        "points_over_time": _points_over_time(users),
        "summary": {
            "total_users": len(rows),
            "total_active_users": sum(1 for r in rows if r["total_score"] > 0),
            "total_points": sum(r["total_score"] for r in rows),
            "total_badges": sum(badge_counts.values()),
        },
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/aot-scores")
def aot_scores(
    user_id: Optional[int] = Query(None),
    format: str = Query("json", pattern="^(json|csv)$"),
    db: Session = Depends(get_db),
    admin: models.User = Depends(admin_user),
):
    q = db.query(models.User).order_by(models.User.id.asc())
    if user_id is not None:
        q = q.filter(models.User.id == user_id)
    users = q.all()
    topics = _topic_responses_by_user(db, [u.id for u in users])

    data = [
        {
            "id": u.id,
            "username": u.username,
            "aot_score": u.aot_score,
            "has_completed_questionnaire": bool(u.has_completed_questionnaire),
            "topic_responses": topics.get(u.id, []),
        }
        for u in users
    ]

    if format == "csv":
        return _csv_response(
            ["username", "aot_score", "questionnaire_completed", "topic_questions", "topic_responses"],
            (
                [
                    d["username"],
                    "N/A" if d["aot_score"] is None else d["aot_score"],
                    "Yes" if d["has_completed_questionnaire"] else "No",
                    "|".join(t["question"] for t in d["topic_responses"]),
                    "|".join(str(t["value"]) for t in d["topic_responses"]),
                ]
                for d in data
            ),
            "user_scores_and_responses.csv",
        )

    return {"generated_at": datetime.now(timezone.utc).isoformat(), "data": data}


@router.get("/user-responses")
def user_responses_export(db: Session = Depends(get_db), admin: models.User = Depends(admin_user)):
    """Every stored answer, newest first within each question, as CSV."""
    usernames = dict(db.query(models.User.id, models.User.username).all())
    texts = {
        models.QuestionTypeEnum.AOT: dict(db.query(models.ScaleQuestion.id, models.ScaleQuestion.text).all()),
        models.QuestionTypeEnum.TOPIC: dict(db.query(models.TopicQuestion.id, models.TopicQuestion.text).all()),
    }
    responses = (
        db.query(models.UserResponse)
        .order_by(
            models.UserResponse.user_id,
            models.UserResponse.question_type,
            models.UserResponse.question_id,
            models.UserResponse.created_at.desc(),
            models.UserResponse.id.desc(),
        )
        .all()
    )
    rows = [
        [
            usernames.get(r.user_id, ""),
            r.user_id,
            r.question_id,
            texts[r.question_type].get(r.question_id, "Unknown"),
            r.question_type.value,
            r.value,
            r.created_at.isoformat() if r.created_at else "",
        ]
        for r in responses
    ]
    record_event(db, models.ActionEnum.EXPORT_RESPONSES, admin.id, {"rows": len(rows)}, actor_type="ADMIN")

    return _csv_response(
        ["username", "user_id", "question_id", "question", "type", "value", "created_at"],
        rows,
        "all_user_responses.csv",
    )


@router.get("/points-export")
def points_export(
    format: str = Query("json", pattern="^(json|csv)$"),
    db: Session = Depends(get_db),
    admin: models.User = Depends(admin_user),
):
    users = db.query(models.User).order_by(models.User.total_score.desc(), models.User.id.asc()).all()
    record_event(db, models.ActionEnum.EXPORT_POINTS, admin.id, {"rows": len(users), "format": format}, actor_type="ADMIN")

    if format == "csv":
        return _csv_response(
            [
                "user_id", "username", "display_name", "total_score",
                "aot_score", "questionnaire_completed", "created_at",
            ],
            (
                [
                    u.id, u.username, u.display_name or "", u.total_score,
                    "N/A" if u.aot_score is None else u.aot_score,
                    "Yes" if u.has_completed_questionnaire else "No",
                    u.created_at.isoformat() if u.created_at else "",
                ]
                for u in users
            ),
            "points_export.csv",
        )

    total = sum(u.total_score for u in users)
    return {
        "users": [
            {
                "id": u.id,
                "username": u.username,
                "display_name": u.display_name,
                "total_score": u.total_score,
                "aot_score": u.aot_score,
            }
            for u in users
        ],
        "total_users": len(users),
        "total_points": total,
        "average_points": round(total / len(users)) if users else 0,
    }
