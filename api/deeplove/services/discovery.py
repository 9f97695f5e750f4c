from __future__ import annotations

import logging
from typing import Any

from .. import repo
from ..config import DEFAULT_PROFILE_LIMIT, FREE_DAILY_SWIPE_LIMIT
from .matching import CandidateProfile, JitterSource, MatchCriteria, ScoredCandidate, rank
from .swipe_limit import QuotaStore, SqlQuotaStore, SwipeLimitGate

logger = logging.getLogger(__name__)

quota_store: QuotaStore = SqlQuotaStore()


class CriteriaRequired(Exception):
    """The user has not saved matching criteria yet."""


def load_criteria(user_id: str) -> MatchCriteria:
    row = repo.get_criteria(user_id)
    if not row:
        raise CriteriaRequired("criteria required")
    return MatchCriteria.from_row(row)


def build_feed(user_id: str, limit: int = DEFAULT_PROFILE_LIMIT, jitter: JitterSource | None = None) -> list[ScoredCandidate]:
    criteria = load_criteria(user_id)
    candidates = [CandidateProfile.from_row(r) for r in repo.list_candidate_profiles(user_id, limit=limit)]
    feed = rank(candidates, criteria, jitter=jitter)
    logger.debug("[discovery] feed user_id=%s candidates=%s", user_id, len(feed))
    return feed


def is_pro_user(user_id: str) -> bool:
    return bool(repo.get_entitlement(user_id).get("is_pro"))


def build_swipe_gate(user_id: str, *, is_pro: bool | None = None) -> SwipeLimitGate:
    if is_pro is None:
        is_pro = is_pro_user(user_id)
    return SwipeLimitGate(quota_store, user_id, daily_limit=FREE_DAILY_SWIPE_LIMIT, is_pro=is_pro)


def quota_summary(gate: SwipeLimitGate) -> dict[str, Any]:
    return {
        "date": gate.state.quota_date,
        "used": gate.used_count,
        "limit": None if gate.is_pro else gate.daily_limit,
        "remaining": gate.swipes_remaining(),
        "is_pro": gate.is_pro,
    }
