# thinkarena/routes/badges.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..engine.audit import record_event
from ..engine.badges import AwardOutcome, badge_payload, list_user_badges, try_award_badge
from .deps import current_user

router = APIRouter(prefix="/badges", tags=["badges"])


@router.post("/award", response_model=schemas.AwardBadgeOut)
def award_badge(
    body: schemas.AwardBadgeIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
):
    result = try_award_badge(db, user.id, body.badge_type, body.game_type)
    if result.outcome == AwardOutcome.UNKNOWN_BADGE:
        raise HTTPException(404, f"Badge type '{body.badge_type}' not found")

    if result.newly_awarded:
        record_event(db, models.ActionEnum.AWARD_BADGE, user.id, {
            "badge": body.badge_type, "context_tag": body.game_type,
        })

    return schemas.AwardBadgeOut(
        success=True,
        already_awarded=result.outcome == AwardOutcome.ALREADY_OWNED,
        badge=badge_payload(result.badge),
    )


@router.get("/mine", response_model=list[schemas.BadgeOut])
def my_badges(db: Session = Depends(get_db), user: models.User = Depends(current_user)):
    return list_user_badges(db, user.id)
