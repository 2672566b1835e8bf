# thinkarena/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, List, Annotated, Any, Literal

from pydantic import BaseModel, Field, StringConstraints, ConfigDict, field_validator


QuestionType = Literal["aot", "topic"]


class DialogueTurnIn(BaseModel):
    role: str = "user"
    content: str = ""


# -------------------------
# QUESTIONNAIRE
# -------------------------
class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    type: QuestionType
    is_reversed: Optional[bool] = None


class ResponseIn(BaseModel):
    question_id: int
    question_type: QuestionType
    value: int = Field(..., ge=1, le=6)


class QuestionnaireComplete(BaseModel):
    aot_score: int
    has_completed_questionnaire: bool


class TopicResponseOut(BaseModel):
    question_id: int
    question: str
    value: int


# -------------------------
# DIALOGUE
# -------------------------
class TrainingIn(BaseModel):
    question: str
    user_response: str
    dialogue_history: List[DialogueTurnIn] = Field(default_factory=list)
    points_so_far: int = Field(0, ge=0)


class PointsOut(BaseModel):
    amount: int
    type: str


class TrainingOut(BaseModel):
    response: str
    points: Optional[PointsOut] = None
    badge: Optional[dict] = None
    is_complete: bool


class HealthNutIn(BaseModel):
    user_response: Optional[str] = None
    dialogue_history: List[DialogueTurnIn] = Field(default_factory=list)
    points_so_far: int = Field(0, ge=0)


class SpeakerSegment(BaseModel):
    speaker: Literal["qaylee", "plato"]
    content: str
    table: Optional[dict] = None


class HealthNutOut(BaseModel):
    messages: List[SpeakerSegment]
    points: Optional[PointsOut] = None
    is_complete: bool


class ThoughtZombiesIn(BaseModel):
    ai_stance: str
    user_stance: str
    user_argument: str
    conversation_history: List[DialogueTurnIn] = Field(default_factory=list)
    score_so_far: int = Field(0, ge=0)


class ThoughtZombiesOut(BaseModel):
    message: str
    score: int
    categories: dict = Field(default_factory=dict)
    badge: Optional[dict] = None
    is_complete: bool


# -------------------------
# SCORES / BADGES / USERS
# -------------------------
class ScoreUpdateIn(BaseModel):
    points: int


class ScoreUpdateOut(BaseModel):
    message: str
    new_total_score: int
    applied_points: int
    rank: Optional[int] = None


class LeaderboardEntry(BaseModel):
    id: int
    username: str
    display_name: Optional[str] = None
    total_score: int
    rank: int


class AwardBadgeIn(BaseModel):
    badge_type: Annotated[str, StringConstraints(min_length=1, max_length=50, pattern=r"^[a-z_]+$")]
    game_type: str = "thought_zombies"


class BadgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    image_ref: Optional[str] = None
    earned_at: Optional[datetime] = None
    context_tag: Optional[str] = None


class AwardBadgeOut(BaseModel):
    success: bool
    already_awarded: bool
    badge: BadgeOut


class DisplayNameIn(BaseModel):
    display_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    display_name: Optional[str] = None
    is_admin: bool = False
    has_completed_onboarding: bool = False
    has_completed_questionnaire: bool = False
    aot_score: Optional[int] = None
    total_score: int = 0

    @field_validator("total_score", mode="before")
    @classmethod
    def _coerce_total(cls, v: Any):
        return 0 if v is None else v
