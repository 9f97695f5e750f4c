import logging
from typing import Any

from fastapi import APIRouter, Depends

from .. import repo
from ..auth.deps import get_current_user
from ..schemas import UpgradeRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/entitlement")
def get_entitlement(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    ent = repo.get_entitlement(str(current_user["id"]))
    return {"is_pro": ent["is_pro"], "plan": ent.get("plan")}


@router.post("/entitlement/upgrade")
def upgrade(payload: UpgradeRequest, current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    # No payment provider; subscribing grants Pro immediately.
    user_id = str(current_user["id"])
    ent = repo.set_entitlement(user_id, True, payload.plan)
    logger.info("[paywall] upgraded user_id=%s plan=%s", user_id, payload.plan)
    return {"is_pro": ent["is_pro"], "plan": ent.get("plan")}
