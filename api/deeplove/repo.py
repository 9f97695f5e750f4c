import json
import uuid
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from deeplove.config import DEFAULT_PROFILE_LIMIT
from deeplove.database import SessionLocal

PROFILE_COLUMNS = (
    "display_name",
    "avatar_url",
    "bio",
    "age",
    "occupation",
    "interests",
    "relationship_goal",
    "gender",
    "religion",
    "ethnicity",
    "height",
)

CRITERIA_COLUMNS = (
    "age_min",
    "age_max",
    "gender",
    "distance_km",
    "education",
    "occupation",
    "religion",
    "ethnicity",
    "hobbies",
    "relationship_goal",
    "height_cm",
)


def _encode_list(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return json.dumps(list(value))


def _decode_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    try:
        decoded = json.loads(value)
    except (TypeError, ValueError):
        return []
    return decoded if isinstance(decoded, list) else []


# Users


def create_user(email: str, password_hash: str) -> dict[str, Any] | None:
    user_id = str(uuid.uuid4())
    try:
        with SessionLocal() as db:
            db.execute(
                text("INSERT INTO users (id, email, password_hash) VALUES (:id, :email, :password_hash)"),
                {"id": user_id, "email": email, "password_hash": password_hash},
            )
            db.commit()
    except IntegrityError:
        return None
    return get_user_by_id(user_id)


def get_user_by_email(email: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(text("SELECT * FROM users WHERE email=:email"), {"email": email}).mappings().first()
    return dict(row) if row else None


def get_user_by_id(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(text("SELECT * FROM users WHERE id=:id"), {"id": user_id}).mappings().first()
    return dict(row) if row else None


# Profiles


def get_profile(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(text("SELECT * FROM profiles WHERE id=:id"), {"id": user_id}).mappings().first()
    if not row:
        return None
    out = dict(row)
    out["interests"] = _decode_list(out.get("interests"))
    return out


def upsert_profile(user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    params = {c: fields.get(c) for c in PROFILE_COLUMNS}
    params["interests"] = _encode_list(params["interests"])
    params["id"] = user_id
    with SessionLocal() as db:
        db.execute(
            text(
                """
                INSERT INTO profiles (
                  id, display_name, avatar_url, bio, age, occupation,
                  interests, relationship_goal, gender, religion, ethnicity, height,
                  created_at, updated_at
                ) VALUES (
                  :id, :display_name, :avatar_url, :bio, :age, :occupation,
                  :interests, :relationship_goal, :gender, :religion, :ethnicity, :height,
                  CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
                )
                ON CONFLICT(id) DO UPDATE SET
                  display_name = excluded.display_name,
                  avatar_url = excluded.avatar_url,
                  bio = excluded.bio,
                  age = excluded.age,
                  occupation = excluded.occupation,
                  interests = excluded.interests,
                  relationship_goal = excluded.relationship_goal,
                  gender = excluded.gender,
                  religion = excluded.religion,
                  ethnicity = excluded.ethnicity,
                  height = excluded.height,
                  updated_at = CURRENT_TIMESTAMP
                """
            ),
            params,
        )
        db.commit()
    return get_profile(user_id)


def list_candidate_profiles(user_id: str, limit: int = DEFAULT_PROFILE_LIMIT) -> list[dict[str, Any]]:
    """Profiles other than ``user_id``, at most ``limit`` rows."""
    with SessionLocal() as db:
        rows = db.execute(
            text("SELECT * FROM profiles WHERE id != :user_id ORDER BY created_at, id LIMIT :limit"),
            {"user_id": user_id, "limit": limit},
        ).mappings().all()
    return [dict(r) for r in rows]


def count_profiles() -> int:
    with SessionLocal() as db:
        row = db.execute(text("SELECT COUNT(*) AS n FROM profiles")).mappings().first()
    return int(row["n"]) if row else 0


# Criteria


def get_criteria(user_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(text("SELECT * FROM criteria WHERE user_id=:user_id"), {"user_id": user_id}).mappings().first()
    if not row:
        return None
    out = dict(row)
    out["hobbies"] = _decode_list(out.get("hobbies"))
    return out


def upsert_criteria(user_id: str, fields: dict[str, Any]) -> dict[str, Any] | None:
    params = {c: fields.get(c) for c in CRITERIA_COLUMNS}
    params["hobbies"] = _encode_list(params["hobbies"])
    params["user_id"] = user_id
    with SessionLocal() as db:
        db.execute(
            text(
                """
                INSERT INTO criteria (
                  user_id, age_min, age_max, gender, distance_km, education,
                  occupation, religion, ethnicity, hobbies, relationship_goal, height_cm,
                  created_at, updated_at
                ) VALUES (
                  :user_id, :age_min, :age_max, :gender, :distance_km, :education,
                  :occupation, :religion, :ethnicity, :hobbies, :relationship_goal, :height_cm,
                  CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
                )
                ON CONFLICT(user_id) DO UPDATE SET
                  age_min = excluded.age_min,
                  age_max = excluded.age_max,
                  gender = excluded.gender,
                  distance_km = excluded.distance_km,
                  education = excluded.education,
                  occupation = excluded.occupation,
                  religion = excluded.religion,
                  ethnicity = excluded.ethnicity,
                  hobbies = excluded.hobbies,
                  relationship_goal = excluded.relationship_goal,
                  height_cm = excluded.height_cm,
                  updated_at = CURRENT_TIMESTAMP
                """
            ),
            params,
        )
        db.commit()
    return get_criteria(user_id)


# Swipes and matches


def record_swipe(from_id: str, to_id: str, direction: str) -> bool:
    """Insert the swipe; on a right swipe return whether ``to_id`` already swiped right on ``from_id``."""
    with SessionLocal() as db:
        db.execute(
            text("INSERT INTO swipes (from_id, to_id, direction) VALUES (:from_id, :to_id, :direction)"),
            {"from_id": from_id, "to_id": to_id, "direction": direction},
        )
        is_match = False
        if direction == "right":
            row = db.execute(
                text(
                    """
                    SELECT 1 FROM swipes
                    WHERE from_id=:to_id AND to_id=:from_id AND direction='right'
                    LIMIT 1
                    """
                ),
                {"from_id": from_id, "to_id": to_id},
            ).first()
            is_match = row is not None
        db.commit()
    return is_match


def list_mutual_matches(user_id: str) -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            text(
                """
                SELECT b.from_id AS other_user_id,
                       MAX(CASE WHEN a.created_at > b.created_at THEN a.created_at ELSE b.created_at END) AS matched_at,
                       p.display_name AS other_display_name,
                       p.avatar_url AS other_avatar_url,
                       p.age AS other_age,
                       p.occupation AS other_occupation
                FROM swipes a
                JOIN swipes b
                  ON a.from_id = b.to_id
                 AND a.to_id = b.from_id
                 AND a.direction = 'right'
                 AND b.direction = 'right'
                LEFT JOIN profiles p ON p.id = b.from_id
                WHERE a.from_id = :user_id
                GROUP BY b.from_id, p.display_name, p.avatar_url, p.age, p.occupation
                ORDER BY matched_at DESC
                """
            ),
            {"user_id": user_id},
        ).mappings().all()
    return [dict(r) for r in rows]


# Entitlement


def get_entitlement(user_id: str) -> dict[str, Any]:
    with SessionLocal() as db:
        row = db.execute(
            text("SELECT is_pro, plan, updated_at FROM entitlement WHERE user_id=:user_id"),
            {"user_id": user_id},
        ).mappings().first()
    if not row:
        return {"is_pro": False, "plan": None}
    return {"is_pro": bool(row["is_pro"]), "plan": row.get("plan"), "updated_at": row.get("updated_at")}


def set_entitlement(user_id: str, is_pro: bool, plan: str | None) -> dict[str, Any]:
    with SessionLocal() as db:
        db.execute(
            text(
                """
                INSERT INTO entitlement (user_id, is_pro, plan, updated_at)
                VALUES (:user_id, :is_pro, :plan, CURRENT_TIMESTAMP)
                ON CONFLICT(user_id) DO UPDATE SET
                  is_pro = excluded.is_pro,
                  plan = excluded.plan,
                  updated_at = CURRENT_TIMESTAMP
                """
            ),
            {"user_id": user_id, "is_pro": is_pro, "plan": plan},
        )
        db.commit()
    return get_entitlement(user_id)
