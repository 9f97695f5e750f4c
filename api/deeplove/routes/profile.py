from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from .. import repo
from ..auth.deps import get_current_user
from ..schemas import CriteriaInput, ProfileUpdate

router = APIRouter()


@router.get("/profiles/{profile_id}")
def get_profile(profile_id: str, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    profile = repo.get_profile(profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"profile": profile}


@router.put("/profiles/{profile_id}")
def update_profile(
    profile_id: str,
    payload: ProfileUpdate,
    current_user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    if profile_id != str(current_user["id"]):
        raise HTTPException(status_code=403, detail="Forbidden")
    profile = repo.upsert_profile(profile_id, payload.model_dump())
    return {"message": "Profile updated successfully", "profile": profile}


@router.get("/criteria")
def get_criteria(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    criteria = repo.get_criteria(str(current_user["id"]))
    if not criteria:
        raise HTTPException(status_code=404, detail="Criteria not found")
    return {"criteria": criteria}


@router.post("/criteria")
def save_criteria(payload: CriteriaInput, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    criteria = repo.upsert_criteria(str(current_user["id"]), payload.model_dump())
    return {"message": "Criteria saved successfully", "criteria": criteria}
