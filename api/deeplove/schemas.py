from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

RelationshipGoal = Literal["casual", "longTerm", "marriage", "friendship"]
Gender = Literal["male", "female", "non-binary", "other"]
GenderPreference = Literal["male", "female", "non-binary", "any"]
SwipeDirection = Literal["left", "right"]
Plan = Literal["monthly", "yearly"]


def _clean_list(values: list[str] | None) -> list[str]:
    out: list[str] = []
    for v in values or []:
        s = str(v).strip()
        if s and s not in out:
            out.append(s)
    return out


class Credentials(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserResponse(BaseModel):
    user: dict[str, Any]


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, max_length=80)
    avatar_url: str | None = None
    bio: str | None = Field(default=None, max_length=2000)
    age: int | None = Field(default=None, ge=0, le=130)
    occupation: str | None = Field(default=None, max_length=120)
    interests: list[str] = Field(default_factory=list)
    relationship_goal: RelationshipGoal | None = None
    gender: Gender | None = None
    religion: str | None = None
    ethnicity: str | None = None
    height: int | None = Field(default=None, gt=0, lt=300)

    @field_validator("interests")
    @classmethod
    def _dedupe_interests(cls, v: list[str]) -> list[str]:
        return _clean_list(v)


class CriteriaInput(BaseModel):
    age_min: int = Field(ge=18)
    age_max: int = Field(ge=18)
    gender: GenderPreference = "any"
    distance_km: int | None = Field(default=None, ge=0)
    education: str | None = None
    occupation: str | None = None
    religion: str = "none"
    ethnicity: str = "none"
    hobbies: list[str] = Field(default_factory=list)
    relationship_goal: RelationshipGoal = "casual"
    height_cm: int | None = Field(default=None, gt=0, lt=300)

    @field_validator("hobbies")
    @classmethod
    def _dedupe_hobbies(cls, v: list[str]) -> list[str]:
        return _clean_list(v)

    @field_validator("religion", "ethnicity")
    @classmethod
    def _blank_is_no_preference(cls, v: str) -> str:
        return v.strip() or "none"

    @model_validator(mode="after")
    def _check_age_range(self) -> "CriteriaInput":
        if self.age_min > self.age_max:
            raise ValueError("age_min must be less than or equal to age_max")
        return self


class SwipeInput(BaseModel):
    to_id: str = Field(min_length=1)
    direction: SwipeDirection


class SwipeResponse(BaseModel):
    success: bool
    isMatch: bool
    swipes_remaining: int | None


class QuotaResponse(BaseModel):
    date: str
    used: int
    limit: int | None
    remaining: int | None
    is_pro: bool


class UpgradeRequest(BaseModel):
    plan: Plan = "monthly"
