# thinkarena/engine/audit.py
from __future__ import annotations

import json

from sqlalchemy.orm import Session

from .. import models
from ..settings import get_settings

settings = get_settings()


def record_event(db: Session, action: models.ActionEnum, user_id: int | None, payload: dict, actor_type: str = "USER"):
    evt = models.Event(
        user_id=user_id,
        action=action,
        actor_type=actor_type,
        payload=json.dumps(payload, ensure_ascii=False, default=str),
        app_version=settings.APP_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )
    db.add(evt)
    db.commit()


def record_failure(
    db: Session,
    stage: str,
    error: Exception | str,
    user_id: int | None = None,
    context: dict | None = None,
    error_code: str = "INTERNAL_FALLBACK",
) -> str:
    evt = models.Event(
        user_id=user_id,
        action=models.ActionEnum.FAILURE_LOG,
        actor_type="SYSTEM",
        payload=json.dumps({
            "stage": stage,
            "error": str(error),
            "error_code": error_code,
            "context": context or {},
        }, ensure_ascii=False, default=str),
        app_version=settings.APP_VERSION,
        schema_version=settings.SCHEMA_VERSION,
    )
    db.add(evt)
    db.commit()
    db.refresh(evt)
    return str(evt.id)
