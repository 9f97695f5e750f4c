import json
import os
from typing import Any

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./deep-love.sqlite")
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SEED_ON_STARTUP = int(os.getenv("SEED_ON_STARTUP", "0"))

JWT_SECRET = os.getenv("JWT_SECRET", "")
ACCESS_TOKEN_TTL_MINUTES = int(os.getenv("ACCESS_TOKEN_TTL_MINUTES", "1440"))
MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"

FREE_DAILY_SWIPE_LIMIT = int(os.getenv("FREE_DAILY_SWIPE_LIMIT", "20"))
# Empty means the server's local zone.
SWIPE_TIMEZONE = os.getenv("SWIPE_TIMEZONE", "")

DEFAULT_PROFILE_LIMIT = int(os.getenv("DEFAULT_PROFILE_LIMIT", "50"))
MAX_PROFILE_LIMIT = int(os.getenv("MAX_PROFILE_LIMIT", "200"))

DEFAULT_RELATIONSHIP_GOAL = "casual"
DEFAULT_RELIGION = "none"
DEFAULT_ETHNICITY = "none"
DEFAULT_OCCUPATION = "Unknown"
DEFAULT_AGE = 25

MATCH_SCORING: dict[str, Any] = {
    "AGE_WEIGHT": int(os.getenv("AGE_WEIGHT", "20")),
    "AGE_DECAY_PER_YEAR": int(os.getenv("AGE_DECAY_PER_YEAR", "5")),
    "HOBBIES_WEIGHT": int(os.getenv("HOBBIES_WEIGHT", "30")),
    "RELATIONSHIP_GOAL_WEIGHT": int(os.getenv("RELATIONSHIP_GOAL_WEIGHT", "15")),
    "GENDER_PREFERENCE_WEIGHT": int(os.getenv("GENDER_PREFERENCE_WEIGHT", "15")),
    "RELIGION_WEIGHT": int(os.getenv("RELIGION_WEIGHT", "10")),
    "ETHNICITY_WEIGHT": int(os.getenv("ETHNICITY_WEIGHT", "10")),
    "RANDOM_FACTOR_MIN": -5,
    "RANDOM_FACTOR_MAX": 5,
    "MIN_MATCH_SCORE": 50,
    "MAX_MATCH_SCORE": 99,
}

if os.getenv("MATCH_SCORING_JSON"):
    try:
        MATCH_SCORING.update(json.loads(os.getenv("MATCH_SCORING_JSON", "{}")))
    except json.JSONDecodeError:
        pass
