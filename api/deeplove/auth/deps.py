"""
Authentication dependencies for FastAPI.

The session is a signed access token carried either in the httpOnly
session cookie (web client) or in an ``Authorization: Bearer`` header.
"""

import logging
import uuid
from typing import Any

from fastapi import Cookie, Header, HTTPException

from deeplove import repo
from deeplove.auth.security import decode_access_token
from deeplove.config import DEV_MODE

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "deep_love_session"


def _unauthorized(reason: str, trace_id: str, message: str = "Unauthorized") -> HTTPException:
    detail: dict[str, Any] = {"message": message, "trace_id": trace_id}
    if DEV_MODE:
        detail["reason"] = reason
    return HTTPException(status_code=401, detail=detail)


def _log_auth_failure(reason: str, trace_id: str, auth_source: str, token: str | None = None) -> None:
    token_prefix = token[:8] + "..." if token and len(token) > 8 else token
    logger.warning(f"[AUTH_FAILURE] trace_id={trace_id} reason={reason} source={auth_source} token_prefix={token_prefix}")


def _extract_bearer(authorization: str) -> str | None:
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        return None
    return parts[1].strip()


def _user_from_token(token: str, trace_id: str, auth_source: str) -> dict[str, Any]:
    try:
        payload = decode_access_token(token)
    except HTTPException as e:
        if e.status_code != 401:
            raise
        reason = "token_expired" if "expired" in str(e.detail).lower() else "signature_invalid"
        _log_auth_failure(reason, trace_id, auth_source, token)
        raise _unauthorized(reason, trace_id)

    user_id = str(payload.get("sub") or "")
    if not user_id:
        _log_auth_failure("token_missing_subject", trace_id, auth_source, token)
        raise _unauthorized("token_missing_subject", trace_id)

    user = repo.get_user_by_id(user_id)
    if not user:
        _log_auth_failure("token_user_not_found", trace_id, auth_source, token)
        raise _unauthorized("token_user_not_found", trace_id)

    logger.debug(f"[auth] SUCCESS user_id={user_id} source={auth_source}")
    return {"id": str(user["id"]), "email": user["email"]}


def get_current_user(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """Resolve the caller from the session cookie, falling back to a bearer token."""
    trace_id = str(uuid.uuid4())

    if session_token:
        return _user_from_token(session_token, trace_id, "cookie")

    if authorization:
        token = _extract_bearer(authorization)
        if not token:
            _log_auth_failure("malformed_token", trace_id, "bearer")
            raise _unauthorized("malformed_token", trace_id)
        return _user_from_token(token, trace_id, "bearer")

    _log_auth_failure("missing_token", trace_id, "none")
    raise _unauthorized("missing_token", trace_id, message="Authentication required")
