import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    APP_VERSION: str = "1.0.0"
    SCHEMA_VERSION: str = "v1-arena"

    # --- CONFIG ---
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./thinkarena.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

    # --- GENERATIVE TEXT BACKEND ---
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    GEMINI_BASE_URL = os.getenv(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models"
    )
    LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "30"))
    LLM_MAX_RETRIES = _int_env("LLM_MAX_RETRIES", 2)

    # --- COMPLETION THRESHOLDS (per dialogue mode) ---
    TRAINING_MIN_TURNS = _int_env("TRAINING_MIN_TURNS", 8)
    TRAINING_MIN_POINTS = _int_env("TRAINING_MIN_POINTS", 30)
    HEALTH_NUT_MIN_TURNS = _int_env("HEALTH_NUT_MIN_TURNS", 8)
    HEALTH_NUT_MIN_POINTS = _int_env("HEALTH_NUT_MIN_POINTS", 30)
    THOUGHT_ZOMBIES_TARGET_POINTS = _int_env("THOUGHT_ZOMBIES_TARGET_POINTS", 100)
    THOUGHT_ZOMBIES_TARGET_BADGES = _int_env("THOUGHT_ZOMBIES_TARGET_BADGES", 5)

    # --- LEADERBOARD ---
    LEADERBOARD_SIZE = 10


@lru_cache
def get_settings():
    return Settings()
