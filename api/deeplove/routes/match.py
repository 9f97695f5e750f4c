import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from .. import repo
from ..auth.deps import get_current_user
from ..config import DEFAULT_PROFILE_LIMIT, MAX_PROFILE_LIMIT
from ..schemas import QuotaResponse, SwipeInput, SwipeResponse
from ..services import discovery
from ..services.swipe_limit import QuotaUnavailable

logger = logging.getLogger(__name__)

router = APIRouter()

SWIPE_LIMIT_DETAIL = {
    "message": "Daily swipe limit reached",
    "upgrade_url": "/paywall",
}


@router.get("/matches")
def get_discovery_feed(
    limit: int = Query(default=DEFAULT_PROFILE_LIMIT, ge=1, le=MAX_PROFILE_LIMIT),
    current_user: dict[str, Any] = Depends(get_current_user),
) -> dict[str, Any]:
    user_id = str(current_user["id"])
    try:
        feed = discovery.build_feed(user_id, limit=limit)
    except discovery.CriteriaRequired:
        raise HTTPException(status_code=409, detail="criteria required")
    gate = discovery.build_swipe_gate(user_id)
    return {
        "profiles": [s.to_public() for s in feed],
        "swipes_remaining": gate.swipes_remaining(),
        "is_pro": gate.is_pro,
    }


@router.get("/matches/mutual")
def get_mutual_matches(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    rows = repo.list_mutual_matches(str(current_user["id"]))
    return {
        "matches": [
            {
                "user_id": str(r["other_user_id"]),
                "matched_at": r.get("matched_at"),
                "profile": {
                    "id": str(r["other_user_id"]),
                    "name": r.get("other_display_name"),
                    "photo": r.get("other_avatar_url"),
                    "age": r.get("other_age"),
                    "occupation": r.get("other_occupation"),
                },
            }
            for r in rows
        ]
    }


@router.post("/swipes", response_model=SwipeResponse)
def record_swipe(payload: SwipeInput, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    user_id = str(current_user["id"])
    if payload.to_id == user_id:
        raise HTTPException(status_code=400, detail="Cannot swipe on your own profile")
    if not repo.get_profile(payload.to_id):
        raise HTTPException(status_code=404, detail="Profile not found")

    gate = discovery.build_swipe_gate(user_id)
    if gate.is_exhausted():
        raise HTTPException(status_code=402, detail=SWIPE_LIMIT_DETAIL)
    try:
        counted = gate.register_swipe()
    except QuotaUnavailable:
        raise HTTPException(status_code=503, detail="Swipe quota is temporarily unavailable")
    if not counted:
        raise HTTPException(status_code=402, detail=SWIPE_LIMIT_DETAIL)

    # Counted first: a failed insert costs one swipe, never grants an uncounted one.
    is_match = repo.record_swipe(user_id, payload.to_id, payload.direction)
    if is_match:
        logger.info("[swipe] mutual match user_id=%s other_id=%s", user_id, payload.to_id)
    return {"success": True, "isMatch": is_match, "swipes_remaining": gate.swipes_remaining()}


@router.get("/swipes/quota", response_model=QuotaResponse)
def get_swipe_quota(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    return discovery.quota_summary(discovery.build_swipe_gate(str(current_user["id"])))
