# thinkarena/engine/completion.py
from __future__ import annotations

from .modes import get_mode_config


def is_complete(mode: str, turn_count: int, points: int, badge_count: int = 0) -> bool:
    """
    Session-end rule for a dialogue mode.

    turns_and_points: turn_count >= min_turns AND points >= min_points
    points_or_badges: points >= target_points OR badge_count >= target_badges
    """
    cfg = get_mode_config(mode)
    if not cfg:
        raise ValueError(f"Unknown dialogue mode: {mode}")

    rule = cfg["completion"]
    kind = rule.get("rule")

    if kind == "turns_and_points":
        return int(turn_count) >= int(rule["min_turns"]) and int(points) >= int(rule["min_points"])

    if kind == "points_or_badges":
        return int(points) >= int(rule["target_points"]) or int(badge_count) >= int(rule["target_badges"])

    raise ValueError(f"Unknown completion rule: {kind}")
