# thinkarena/engine/dialogue.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from .. import models
from ..ai import prompts
from ..ai.providers import TextCompletionProvider
from ..errors import UpstreamUnavailable
from ..logging_config import log_event, log_failure
from .annotations import Annotation, parse, split_speakers
from .audit import record_event, record_failure
from .badges import badge_payload, count_user_badges, find_badge, has_badge, try_award_badge
from .completion import is_complete
from .modes import get_mode_config

logger = logging.getLogger("thinkarena")


@dataclass
class TrainingTurn:
    response: str
    points: Optional[dict]
    badge: Optional[dict]
    is_complete: bool


@dataclass
class HealthNutTurn:
    messages: List[dict]
    points: Optional[dict]
    table: Optional[dict]
    is_complete: bool


@dataclass
class ThoughtZombiesTurn:
    message: str
    score: int
    categories: dict = field(default_factory=dict)
    badge: Optional[dict] = None
    is_complete: bool = False


class DialogueEngine:
    """
    One persona turn: prompt -> provider -> annotations -> badges -> completion.

    The provider is injected so the engine never touches a global client.
    """

    def __init__(self, provider: TextCompletionProvider, db: Session):
        self.provider = provider
        self.db = db

    def _generate(self, mode: str, prompt: str, user_id: int | None) -> str:
        try:
            return self.provider.generate(prompt)
        except UpstreamUnavailable as e:
            log_failure("UPSTREAM_UNAVAILABLE", {"mode": mode, "user_id": user_id, "error": str(e)})
            record_failure(self.db, f"dialogue_{mode}", e, user_id, {"attempts": e.attempts}, "UPSTREAM_UNAVAILABLE")
            raise

    def _annotate(self, mode: str, reply: str, user_id: int) -> Annotation:
        cfg = get_mode_config(mode)
        ann = parse(reply, cfg["grammar"])
        summary = {
            "mode": mode,
            "points": ann.points.as_dict() if ann.points else None,
            "badge": ann.badge,
            "has_table": ann.table is not None,
        }
        log_event("DIALOGUE_TURN", f"{mode} reply annotated", summary)
        record_event(self.db, models.ActionEnum.DIALOGUE_TURN, user_id, summary)
        return ann

    # -------------------------
    # PLATO TRAINING DEBATE
    # -------------------------
    def training_turn(
        self,
        user_id: int,
        question: str,
        user_response: str,
        history: Sequence[Mapping],
        points_so_far: int = 0,
    ) -> TrainingTurn:
        mode = "training"
        cfg = get_mode_config(mode)
        reply = self._generate(mode, prompts.training_prompt(question, user_response, history), user_id)
        ann = self._annotate(mode, reply, user_id)

        badge = None
        if ann.badge and cfg["awards_badges"]:
            result = try_award_badge(self.db, user_id, ann.badge, cfg["context_tag"])
            if result.newly_awarded:
                badge = {**badge_payload(result.badge), "type": ann.badge}
                record_event(self.db, models.ActionEnum.AWARD_BADGE, user_id, {
                    "badge": ann.badge, "context_tag": cfg["context_tag"],
                })

        return TrainingTurn(
            response=ann.display_text,
            points=ann.points.as_dict() if ann.points else None,
            badge=badge,
            is_complete=is_complete(mode, len(history), int(points_so_far) + ann.score),
        )

    # -------------------------
    # HEALTH NUT (QAYLEE / PLATO)
    # -------------------------
    def health_nut_turn(
        self,
        user_id: int,
        user_response: str | None,
        history: Sequence[Mapping],
        points_so_far: int = 0,
    ) -> HealthNutTurn:
        mode = "health_nut"
        reply = self._generate(mode, prompts.health_nut_prompt(user_response, history), user_id)
        ann = self._annotate(mode, reply, user_id)

        return HealthNutTurn(
            messages=split_speakers(ann.display_text, ann.table),
            points=ann.points.as_dict() if ann.points else None,
            table=ann.table,
            is_complete=is_complete(mode, len(history), int(points_so_far) + ann.score),
        )

    # -------------------------
    # THOUGHT ZOMBIES (CATEGORY SCORING)
    # -------------------------
    def thought_zombies_turn(
        self,
        user_id: int,
        ai_stance: str,
        user_stance: str,
        argument: str,
        history: Sequence[Mapping],
        score_so_far: int = 0,
    ) -> ThoughtZombiesTurn:
        mode = "thought_zombies"
        reply = self._generate(
            mode, prompts.thought_zombies_prompt(ai_stance, user_stance, argument, history), user_id
        )
        ann = self._annotate(mode, reply, user_id)

        owned = count_user_badges(self.db, user_id)
        badge = None
        pending = 0
        if ann.badge:
            row = find_badge(self.db, ann.badge)
            if row:
                badge = badge_payload(row)
                # claimed by the client afterwards via /badges/award
                pending = 0 if has_badge(self.db, user_id, row.id) else 1
            else:
                logger.info(f"[Badge] Unknown badge type in thought zombies: {ann.badge}")

        return ThoughtZombiesTurn(
            message=ann.display_text,
            score=ann.score,
            categories=ann.categories,
            badge=badge,
            is_complete=is_complete(mode, 0, int(score_so_far) + ann.score, owned + pending),
        )
