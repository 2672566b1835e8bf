# thinkarena/engine/modes.py
from __future__ import annotations

from ..settings import get_settings

settings = get_settings()

# Per-mode wiring: which annotation grammar the persona prompt asks for,
# the badge context tag, and the completion thresholds (config, not code).
MODE_CONFIG = {
    "training": {
        "grammar": "award",
        "context_tag": "thought_zombies",
        "awards_badges": True,
        "completion": {
            "rule": "turns_and_points",
            "min_turns": settings.TRAINING_MIN_TURNS,
            "min_points": settings.TRAINING_MIN_POINTS,
        },
    },

    "health_nut": {
        "grammar": "award_table",
        "context_tag": "health_nut",
        "awards_badges": False,
        "completion": {
            "rule": "turns_and_points",
            "min_turns": settings.HEALTH_NUT_MIN_TURNS,
            "min_points": settings.HEALTH_NUT_MIN_POINTS,
        },
    },

    "thought_zombies": {
        "grammar": "category",
        "context_tag": "thought_zombies",
        # badge is only looked up; the client claims it via /badges/award
        "awards_badges": False,
        "completion": {
            "rule": "points_or_badges",
            "target_points": settings.THOUGHT_ZOMBIES_TARGET_POINTS,
            "target_badges": settings.THOUGHT_ZOMBIES_TARGET_BADGES,
        },
    },
}


def get_mode_config(mode: str):
    return MODE_CONFIG.get(mode)
