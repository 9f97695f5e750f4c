import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from .. import repo as auth_repo
from ..auth.deps import SESSION_COOKIE_NAME, get_current_user
from ..auth.security import create_access_token, hash_password, verify_password
from ..config import ACCESS_TOKEN_TTL_MINUTES, COOKIE_SECURE, MIN_PASSWORD_LENGTH
from ..schemas import Credentials, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_bearer_mode(request: Request) -> bool:
    """Mobile/API clients ask for the token in the body instead of a cookie."""
    return str(request.headers.get("X-Auth-Mode") or "").strip().lower() == "bearer"


def _set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="lax",
        path="/",
        max_age=ACCESS_TOKEN_TTL_MINUTES * 60,
    )


def _start_session(request: Request, response: Response, user: dict[str, Any]) -> dict[str, Any]:
    token = create_access_token(user_id=str(user["id"]), email=str(user["email"]))
    body: dict[str, Any] = {"user": {"id": str(user["id"]), "email": user["email"]}}
    if _is_bearer_mode(request):
        body["access_token"] = token
        body["token_type"] = "bearer"
    else:
        _set_session_cookie(response, token)
    return body


@router.post("/signup", status_code=201)
def signup(payload: Credentials, request: Request, response: Response) -> dict[str, Any]:
    if "@" not in payload.email:
        raise HTTPException(status_code=400, detail="Invalid email format")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if auth_repo.get_user_by_email(payload.email):
        raise HTTPException(status_code=409, detail="User already exists")

    user = auth_repo.create_user(payload.email, hash_password(payload.password))
    if not user:
        raise HTTPException(status_code=409, detail="User already exists")
    logger.info(f"[signup] created user_id={user['id']}")
    return _start_session(request, response, user)


@router.post("/login")
def login(payload: Credentials, request: Request, response: Response) -> dict[str, Any]:
    user = auth_repo.get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _start_session(request, response, user)


@router.post("/logout")
def logout(response: Response) -> dict[str, str]:
    response.delete_cookie(key=SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out successfully"}


@router.get("/user", response_model=UserResponse)
def get_user(current_user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    return {"user": current_user}
