# thinkarena/routes/scores.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..engine.audit import record_event
from ..engine.scores import add_points, top_scores
from ..logging_config import log_event
from ..settings import get_settings
from .deps import current_user

router = APIRouter(prefix="/scores", tags=["scores"])
settings = get_settings()


@router.post("/update", response_model=schemas.ScoreUpdateOut)
def update_score(
    body: schemas.ScoreUpdateIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
):
    out = add_points(db, user.id, body.points)
    if out is None:
        raise HTTPException(404, "User not found")

    if out.clamped:
        log_event("UPDATE_SCORE", "points clamped to keep total non-negative", {
            "user_id": user.id, "requested": out.requested, "applied": out.applied,
        })
    if out.rank is not None and out.rank <= settings.LEADERBOARD_SIZE:
        log_event("UPDATE_SCORE", "user on leaderboard", {"user_id": user.id, "rank": out.rank})

    record_event(db, models.ActionEnum.UPDATE_SCORE, user.id, {
        "requested": out.requested,
        "old_total": out.old_total,
        "new_total": out.new_total,
    })
    return schemas.ScoreUpdateOut(
        message="Score updated successfully",
        new_total_score=out.new_total,
        applied_points=out.applied,
        rank=out.rank,
    )


@router.get("/top", response_model=list[schemas.LeaderboardEntry])
def leaderboard(db: Session = Depends(get_db)):
    # public, no user required
    return top_scores(db, settings.LEADERBOARD_SIZE)
