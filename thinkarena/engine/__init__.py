# thinkarena/engine/__init__.py
from .questionnaire import LikertAnswer, ScaleItem, ScoreResult, score_responses, latest_responses
from .annotations import Annotation, PointAward, parse, split_speakers
from .badges import AwardOutcome, AwardResult, try_award_badge
from .completion import is_complete
from .scores import add_points, top_scores
