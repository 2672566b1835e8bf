# thinkarena/engine/badges.py
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models

logger = logging.getLogger("thinkarena")


class AwardOutcome(str, enum.Enum):
    NEWLY_AWARDED = "NEWLY_AWARDED"
    ALREADY_OWNED = "ALREADY_OWNED"
    UNKNOWN_BADGE = "UNKNOWN_BADGE"


@dataclass
class AwardResult:
    outcome: AwardOutcome
    badge: Optional[models.Badge] = None

    @property
    def newly_awarded(self) -> bool:
        return self.outcome == AwardOutcome.NEWLY_AWARDED


def badge_payload(badge: models.Badge) -> dict:
    return {
        "id": badge.id,
        "name": badge.name,
        "description": badge.description,
        "image_ref": badge.image_ref,
    }


def find_badge(db: Session, name: str) -> Optional[models.Badge]:
    return db.query(models.Badge).filter(models.Badge.name == name).first()


def has_badge(db: Session, user_id: int, badge_id: int) -> bool:
    return (
        db.query(models.BadgeAward.id)
        .filter(models.BadgeAward.user_id == user_id, models.BadgeAward.badge_id == badge_id)
        .first()
    ) is not None


def try_award_badge(db: Session, user_id: int, badge_name: str, context_tag: str) -> AwardResult:
    """
    Award `badge_name` to the user at most once.

    The (user_id, badge_id) unique constraint is the source of truth: the
    existence check is only a fast path, a concurrent duplicate insert lands in
    the IntegrityError branch and is reported as ALREADY_OWNED.
    """
    badge = find_badge(db, badge_name)
    if not badge:
        logger.info(f"[Badge] Unknown badge type: {badge_name}")
        return AwardResult(AwardOutcome.UNKNOWN_BADGE)

    if has_badge(db, user_id, badge.id):
        logger.info(f"[Badge] User {user_id} already has badge {badge_name}")
        return AwardResult(AwardOutcome.ALREADY_OWNED, badge)

    try:
        db.add(models.BadgeAward(user_id=user_id, badge_id=badge.id, context_tag=context_tag))
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"[Badge] Concurrent award of {badge_name} to user {user_id} ignored")
        return AwardResult(AwardOutcome.ALREADY_OWNED, badge)

    logger.info(f"[Badge] Awarded badge {badge_name} to user {user_id}")
    return AwardResult(AwardOutcome.NEWLY_AWARDED, badge)


def list_user_badges(db: Session, user_id: int) -> List[dict]:
    rows = (
        db.query(models.Badge, models.BadgeAward)
        .join(models.BadgeAward, models.BadgeAward.badge_id == models.Badge.id)
        .filter(models.BadgeAward.user_id == user_id)
        .order_by(models.BadgeAward.earned_at.asc(), models.BadgeAward.id.asc())
        .all()
    )
    return [
        {
            **badge_payload(badge),
            "earned_at": award.earned_at,
            "context_tag": award.context_tag,
        }
        for badge, award in rows
    ]


def count_user_badges(db: Session, user_id: int) -> int:
    return db.query(models.BadgeAward).filter(models.BadgeAward.user_id == user_id).count()
