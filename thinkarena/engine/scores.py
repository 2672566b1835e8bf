# thinkarena/engine/scores.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import case, func, update
from sqlalchemy.orm import Session

from .. import models


@dataclass
class ScoreUpdate:
    user_id: int
    requested: int
    old_total: int
    new_total: int
    rank: Optional[int]

    @property
    def applied(self) -> int:
        return self.new_total - self.old_total

    @property
    def clamped(self) -> bool:
        return self.applied != self.requested


def rank_of(db: Session, total: int) -> Optional[int]:
    """1 + number of users strictly ahead; None for a zero total."""
    if total <= 0:
        return None
    ahead = db.query(func.count(models.User.id)).filter(models.User.total_score > total).scalar()
    return int(ahead or 0) + 1


def add_points(db: Session, user_id: int, points: int) -> Optional[ScoreUpdate]:
    """
    Atomically add `points` to the user's total, never going below zero.

    One UPDATE ... SET total = CASE WHEN total + p < 0 THEN 0 ELSE total + p END,
    so concurrent updates cannot lose each other. Returns None for an unknown
    user.
    """
    points = int(points)
    old = db.query(models.User.total_score).filter(models.User.id == user_id).scalar()
    if old is None:
        return None

    new_expr = models.User.total_score + points
    db.execute(
        update(models.User)
        .where(models.User.id == user_id)
        .values(total_score=case((new_expr < 0, 0), else_=new_expr))
        .execution_options(synchronize_session=False)
    )
    db.commit()

    # old is a pre-update read, informational only under concurrent writers
    new_total = db.query(models.User.total_score).filter(models.User.id == user_id).scalar()
    return ScoreUpdate(
        user_id=user_id,
        requested=points,
        old_total=int(old),
        new_total=int(new_total),
        rank=rank_of(db, int(new_total)),
    )


def top_scores(db: Session, limit: int = 10) -> List[dict]:
    rows = (
        db.query(models.User)
        .filter(models.User.total_score > 0)
        .order_by(models.User.total_score.desc(), models.User.id.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": u.id,
            "username": u.username,
            "display_name": u.display_name,
            "total_score": u.total_score,
            "rank": i + 1,
        }
        for i, u in enumerate(rows)
    ]
