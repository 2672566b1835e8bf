# thinkarena/routes/questionnaire.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..logging_config import log_event
from ..engine.audit import record_event
from ..engine.questionnaire import ScaleItem, latest_responses, score_responses
from .deps import current_user

router = APIRouter(prefix="/questions", tags=["questionnaire"])


QUESTION_TABLES = {
    models.QuestionTypeEnum.AOT: models.ScaleQuestion,
    models.QuestionTypeEnum.TOPIC: models.TopicQuestion,
}


def _responses_of(db: Session, user_id: int, question_type: models.QuestionTypeEnum):
    return (
        db.query(models.UserResponse)
        .filter(models.UserResponse.user_id == user_id, models.UserResponse.question_type == question_type)
        .all()
    )


@router.get("", response_model=list[schemas.QuestionOut])
def list_questions(db: Session = Depends(get_db), user: models.User = Depends(current_user)):
    aot = db.query(models.ScaleQuestion).order_by(models.ScaleQuestion.id).all()
    topics = db.query(models.TopicQuestion).order_by(models.TopicQuestion.id).all()
    return [
        *[schemas.QuestionOut(id=q.id, text=q.text, type="aot", is_reversed=q.is_reversed) for q in aot],
        *[schemas.QuestionOut(id=q.id, text=q.text, type="topic") for q in topics],
    ]


@router.post("/responses", status_code=201)
def submit_response(
    body: schemas.ResponseIn,
    db: Session = Depends(get_db),
    user: models.User = Depends(current_user),
):
    question_type = models.QuestionTypeEnum(body.question_type)
    table = QUESTION_TABLES[question_type]
    if db.query(table).filter(table.id == body.question_id).first() is None:
        raise HTTPException(404, f"Unknown {question_type.value} question: {body.question_id}")

    db.add(models.UserResponse(
        user_id=user.id,
        question_id=body.question_id,
        question_type=question_type,
        value=body.value,
    ))
    db.commit()
    record_event(db, models.ActionEnum.SUBMIT_RESPONSE, user.id, {
        "question_id": body.question_id, "question_type": question_type.value, "value": body.value,
    })
    return {"message": "Response recorded"}


@router.post("/complete", response_model=schemas.QuestionnaireComplete)
def complete_questionnaire(db: Session = Depends(get_db), user: models.User = Depends(current_user)):
    answers = latest_responses(_responses_of(db, user.id, models.QuestionTypeEnum.AOT))
    items = [ScaleItem(id=q.id, is_reversed=q.is_reversed) for q in db.query(models.ScaleQuestion).all()]

    log_event("COMPLETE_QUESTIONNAIRE", "scoring started", {
        "user_id": user.id, "answered": len(answers), "questions": len(items),
    })

    result = score_responses(answers, items)
    if not result.complete:
        log_event("COMPLETE_QUESTIONNAIRE", "incomplete", {
            "user_id": user.id, "missing": result.missing, "unexpected": result.unexpected,
        })
        if result.missing:
            raise HTTPException(400, f"Please answer all questions. Missing {result.missing} questions.")
        raise HTTPException(400, f"Answers found for {result.unexpected} unknown questions.")

    user.aot_score = result.score
    user.has_completed_questionnaire = True
    db.commit()
    db.refresh(user)

    record_event(db, models.ActionEnum.COMPLETE_QUESTIONNAIRE, user.id, {"aot_score": result.score})
    return schemas.QuestionnaireComplete(
        aot_score=user.aot_score,
        has_completed_questionnaire=user.has_completed_questionnaire,
    )


@router.get("/topic-responses", response_model=list[schemas.TopicResponseOut])
def topic_responses(db: Session = Depends(get_db), user: models.User = Depends(current_user)):
    answers = latest_responses(_responses_of(db, user.id, models.QuestionTypeEnum.TOPIC))
    if not answers:
        return []

    ids = [a.question_id for a in answers]
    texts = {
        q.id: q.text
        for q in db.query(models.TopicQuestion).filter(models.TopicQuestion.id.in_(ids)).all()
    }
    return [
        schemas.TopicResponseOut(question_id=a.question_id, question=texts[a.question_id], value=a.value)
        for a in answers
        if a.question_id in texts
    ]
