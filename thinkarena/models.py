# thinkarena/models.py
from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Enum as SAEnum,
    ForeignKey,
    DateTime,
    Boolean,
    Integer,
    Text,
    UniqueConstraint,
    Index,
)
from sqlalchemy.sql import func

from .db import Base


class QuestionTypeEnum(str, enum.Enum):
    AOT = "aot"
    TOPIC = "topic"


class ActionEnum(str, enum.Enum):
    SUBMIT_RESPONSE = "SUBMIT_RESPONSE"
    COMPLETE_QUESTIONNAIRE = "COMPLETE_QUESTIONNAIRE"
    UPDATE_SCORE = "UPDATE_SCORE"
    AWARD_BADGE = "AWARD_BADGE"
    DIALOGUE_TURN = "DIALOGUE_TURN"
    EXPORT_POINTS = "EXPORT_POINTS"
    EXPORT_RESPONSES = "EXPORT_RESPONSES"
    FAILURE_LOG = "FAILURE_LOG"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(String, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)

    has_completed_onboarding = Column(Boolean, nullable=False, default=False)
    has_completed_questionnaire = Column(Boolean, nullable=False, default=False)

    # AOT aggregate, only set once every item is answered
    aot_score = Column(Integer, nullable=True)
    # Running points total, never below zero
    total_score = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ScaleQuestion(Base):
    __tablename__ = "aot_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    is_reversed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TopicQuestion(Base):
    __tablename__ = "topic_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class UserResponse(Base):
    """Insert-only Likert answers; the latest row per question wins."""

    __tablename__ = "user_responses"
    __table_args__ = (
        Index("ix_user_responses_user_type", "user_id", "question_type"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    question_id = Column(Integer, nullable=False)
    question_type = Column(SAEnum(QuestionTypeEnum), nullable=False)
    value = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Badge(Base):
    __tablename__ = "badges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False)
    image_ref = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class BadgeAward(Base):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_id", name="uq_user_badges_user_badge"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    badge_id = Column(Integer, ForeignKey("badges.id"), nullable=False)
    earned_at = Column(DateTime(timezone=True), default=_utcnow)
    context_tag = Column(String(50), nullable=False)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, nullable=True, index=True)
    action = Column(SAEnum(ActionEnum), nullable=False)
    actor_type = Column(String, default="SYSTEM")
    payload = Column(Text, default="{}")

    app_version = Column(String, default="dev")
    schema_version = Column(String, default="dev")

    created_at = Column(DateTime(timezone=True), default=_utcnow)
