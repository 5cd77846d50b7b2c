import os
import math
from dotenv import load_dotenv

from app.utils.exceptions import ConfigurationError

load_dotenv()

def _int_env(key: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(key, str(default))
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{key} must be an integer", config_key=key, config_value=raw, cause=e) from e
    if value < minimum:
        raise ConfigurationError(f"{key} must be at least {minimum}", config_key=key, config_value=raw)
    return value

MONGO_DETAILS = os.getenv("MONGO_DETAILS", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "job_match_db")
# Upstream cap on projects handed to the engine, most starred first
PROJECT_LIMIT = _int_env("PROJECT_LIMIT", 10)
USER_ID_HEADER = os.getenv("USER_ID_HEADER", "X-User-ID")

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (non-negative input)."""
    return int(math.floor(value + 0.5))
