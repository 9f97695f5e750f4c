from __future__ import annotations

import json
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from ..config import (
    DEFAULT_AGE,
    DEFAULT_ETHNICITY,
    DEFAULT_OCCUPATION,
    DEFAULT_RELATIONSHIP_GOAL,
    DEFAULT_RELIGION,
    MATCH_SCORING,
)

logger = logging.getLogger(__name__)

# jitter(lo, hi) -> int in [lo, hi] inclusive
JitterSource = Callable[[int, int], int]

ANY_GENDER = "any"
NO_PREFERENCE = "none"
# Returned when the configured floor itself cannot be read.
FALLBACK_MIN_SCORE = 50


@dataclass(frozen=True)
class CandidateProfile:
    id: str
    name: str | None = None
    age: int = DEFAULT_AGE
    occupation: str = DEFAULT_OCCUPATION
    bio: str = ""
    photo: str | None = None
    interests: frozenset[str] = field(default_factory=frozenset)
    relationship_goal: str = DEFAULT_RELATIONSHIP_GOAL
    gender: str | None = None
    religion: str = DEFAULT_RELIGION
    ethnicity: str = DEFAULT_ETHNICITY
    height_cm: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CandidateProfile":
        """Build from a ``profiles`` row, applying defaults for absent columns."""
        age = row.get("age")
        return cls(
            id=str(row["id"]),
            name=row.get("display_name"),
            age=int(age) if age is not None else DEFAULT_AGE,
            occupation=row.get("occupation") if row.get("occupation") is not None else DEFAULT_OCCUPATION,
            bio=row.get("bio") if row.get("bio") is not None else "",
            photo=row.get("avatar_url"),
            interests=frozenset(parse_string_list(row.get("interests"))),
            relationship_goal=row.get("relationship_goal") if row.get("relationship_goal") is not None else DEFAULT_RELATIONSHIP_GOAL,
            gender=row.get("gender"),
            religion=row.get("religion") if row.get("religion") is not None else DEFAULT_RELIGION,
            ethnicity=row.get("ethnicity") if row.get("ethnicity") is not None else DEFAULT_ETHNICITY,
            height_cm=row.get("height"),
        )

    def to_public(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "age": self.age,
            "occupation": self.occupation,
            "bio": self.bio,
            "photo": self.photo,
            "interests": sorted(self.interests),
            "relationshipGoal": self.relationship_goal,
            "gender": self.gender,
            "religion": self.religion,
            "ethnicity": self.ethnicity,
            "height": self.height_cm,
        }


@dataclass(frozen=True)
class MatchCriteria:
    age_min: int
    age_max: int
    gender: str = ANY_GENDER
    relationship_goal: str = DEFAULT_RELATIONSHIP_GOAL
    hobbies: frozenset[str] = field(default_factory=frozenset)
    religion: str = NO_PREFERENCE
    ethnicity: str = NO_PREFERENCE
    distance_km: int | None = None
    education: str | None = None
    occupation: str | None = None
    height_cm: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "MatchCriteria":
        return cls(
            age_min=int(row["age_min"]),
            age_max=int(row["age_max"]),
            gender=row.get("gender") if row.get("gender") is not None else ANY_GENDER,
            relationship_goal=row.get("relationship_goal") if row.get("relationship_goal") is not None else DEFAULT_RELATIONSHIP_GOAL,
            hobbies=frozenset(parse_string_list(row.get("hobbies"))),
            religion=row.get("religion") if row.get("religion") is not None else NO_PREFERENCE,
            ethnicity=row.get("ethnicity") if row.get("ethnicity") is not None else NO_PREFERENCE,
            distance_km=row.get("distance_km"),
            education=row.get("education"),
            occupation=row.get("occupation"),
            height_cm=row.get("height_cm"),
        )


@dataclass(frozen=True)
class ScoredCandidate:
    profile: CandidateProfile
    match_percentage: int

    def to_public(self) -> dict[str, Any]:
        out = self.profile.to_public()
        out["matchPercentage"] = self.match_percentage
        return out


def parse_string_list(value: Any) -> list[str]:
    """Accept a list or its JSON-encoded text form; anything else is empty."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, (list, tuple, set, frozenset)):
        return []
    return [str(v) for v in value if v is not None and str(v).strip()]


def _age_points(age: int, age_min: int, age_max: int, weight: float, decay: float) -> float:
    if age_min <= age <= age_max:
        return float(weight)
    distance = age_min - age if age < age_min else age - age_max
    return max(0.0, weight - distance * decay)


def _interest_points(interests: frozenset[str], hobbies: frozenset[str], weight: float) -> float:
    # Ratio is against the requested hobby set, not the candidate's interests.
    overlap = len(interests & hobbies)
    return overlap / max(len(hobbies), 1) * weight


def _wildcard_points(preference: str | None, actual: str | None, wildcard: str, weight: float) -> float:
    if preference == wildcard or preference == actual:
        return float(weight)
    return 0.0


def score_breakdown(
    candidate: CandidateProfile,
    criteria: MatchCriteria,
    weights: dict[str, Any] | None = None,
) -> dict[str, float]:
    w = weights or MATCH_SCORING
    age = _age_points(
        candidate.age,
        criteria.age_min,
        criteria.age_max,
        float(w["AGE_WEIGHT"]),
        float(w["AGE_DECAY_PER_YEAR"]),
    )
    interests = _interest_points(candidate.interests, criteria.hobbies, float(w["HOBBIES_WEIGHT"]))
    goal = float(w["RELATIONSHIP_GOAL_WEIGHT"]) if candidate.relationship_goal == criteria.relationship_goal else 0.0
    gender = _wildcard_points(criteria.gender, candidate.gender, ANY_GENDER, float(w["GENDER_PREFERENCE_WEIGHT"]))
    religion = _wildcard_points(criteria.religion, candidate.religion, NO_PREFERENCE, float(w["RELIGION_WEIGHT"]))
    ethnicity = _wildcard_points(criteria.ethnicity, candidate.ethnicity, NO_PREFERENCE, float(w["ETHNICITY_WEIGHT"]))
    base = age + interests + goal + gender + religion + ethnicity
    return {
        "age": round(age, 6),
        "interests": round(interests, 6),
        "relationship_goal": round(goal, 6),
        "gender": round(gender, 6),
        "religion": round(religion, 6),
        "ethnicity": round(ethnicity, 6),
        "base_score": round(base, 6),
    }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score(
    candidate: CandidateProfile,
    criteria: MatchCriteria,
    jitter: JitterSource | None = None,
    weights: dict[str, Any] | None = None,
) -> int:
    """Match percentage for ``candidate`` under ``criteria``.

    Weighted sum of the per-attribute sub-scores plus an integer jitter,
    clamped to ``[MIN_MATCH_SCORE, MAX_MATCH_SCORE]``. Never raises; a
    defect in the computation is logged and yields the floor value.
    """
    w = weights or MATCH_SCORING
    jitter = jitter or random.randint
    floor_score = FALLBACK_MIN_SCORE
    try:
        floor_score = int(w["MIN_MATCH_SCORE"])
        ceiling_score = int(w["MAX_MATCH_SCORE"])
        base = score_breakdown(candidate, criteria, w)["base_score"]
        noise = int(jitter(int(w["RANDOM_FACTOR_MIN"]), int(w["RANDOM_FACTOR_MAX"])))
        total = min(float(ceiling_score), max(float(floor_score), base + noise))
        return _round_half_up(total)
    except Exception:
        logger.exception("[match] scoring failed for candidate_id=%s; using floor score", getattr(candidate, "id", None))
        return floor_score


def rank(
    candidates: Iterable[CandidateProfile],
    criteria: MatchCriteria,
    jitter: JitterSource | None = None,
    weights: dict[str, Any] | None = None,
) -> list[ScoredCandidate]:
    """Score every candidate and order by score descending, then id ascending."""
    scored = [ScoredCandidate(profile=c, match_percentage=score(c, criteria, jitter=jitter, weights=weights)) for c in candidates]
    scored.sort(key=lambda s: (-s.match_percentage, s.profile.id))
    return scored
