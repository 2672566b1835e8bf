# thinkarena/routes/dialogue.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, schemas
from ..ai.providers import TextCompletionProvider, get_completion_provider
from ..db import get_db
from ..engine.dialogue import DialogueEngine
from .deps import current_user

router = APIRouter(prefix="/dialogue", tags=["dialogue"])


def _history(turns):
    return [t.model_dump() for t in turns]


@router.post("/training", response_model=schemas.TrainingOut)
def training(
    inp: schemas.TrainingIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
    provider: TextCompletionProvider = Depends(get_completion_provider),
):
    out = DialogueEngine(provider, db).training_turn(
        user.id, inp.question, inp.user_response, _history(inp.dialogue_history),
        points_so_far=inp.points_so_far,
    )
    return schemas.TrainingOut(
        response=out.response,
        points=out.points,
        badge=out.badge,
        is_complete=out.is_complete,
    )


@router.post("/health-nut", response_model=schemas.HealthNutOut)
def health_nut(
    inp: schemas.HealthNutIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
    provider: TextCompletionProvider = Depends(get_completion_provider),
):
    out = DialogueEngine(provider, db).health_nut_turn(
        user.id, inp.user_response, _history(inp.dialogue_history),
        points_so_far=inp.points_so_far,
    )
    return schemas.HealthNutOut(messages=out.messages, points=out.points, is_complete=out.is_complete)


@router.post("/thought-zombies", response_model=schemas.ThoughtZombiesOut)
def thought_zombies(
    inp: schemas.ThoughtZombiesIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
    provider: TextCompletionProvider = Depends(get_completion_provider),
):
    out = DialogueEngine(provider, db).thought_zombies_turn(
        user.id,
        inp.ai_stance,
        inp.user_stance,
        inp.user_argument,
        _history(inp.conversation_history),
        score_so_far=inp.score_so_far,
    )
    return schemas.ThoughtZombiesOut(
        message=out.message,
        score=out.score,
        categories=out.categories,
        badge=out.badge,
        is_complete=out.is_complete,
    )
