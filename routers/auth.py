import os
import secrets
from typing import Any, Dict, Optional

import httpx
import structlog
from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse

from dependencies import get_oauth, get_users, require_authenticated
from errors import InventoryError
from oauth import GitHubOAuth, OAuthError
from repositories import UserRepository
from schemas import LoginRequest
from security import clear_token_cookie, issue_token, login_user, register_user, set_token_cookie

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["auth"])

STATE_COOKIE = "oauth_state"
FAILURE_PATH = "/api/auth/github/failure"


@router.post("/register", status_code=201)
async def register(response: Response, payload: Dict[str, Any] = Body(...), users: UserRepository = Depends(get_users)):
    user, token = await register_user(users, payload)
    set_token_cookie(response, token)
    return {"message": "User registered successfully", "user": user, "token": token}


@router.post("/login")
async def login(payload: LoginRequest, response: Response, users: UserRepository = Depends(get_users)):
    user, token = await login_user(users, payload.email, payload.password)
    set_token_cookie(response, token)
    return {"message": "Login successful", "user": user, "token": token}


@router.post("/logout")
def logout(response: Response):
    # Tokens are stateless; logging out only drops the client's copy
    clear_token_cookie(response)
    return {"message": "Logout successful"}


@router.get("/me")
def me(user: Dict[str, Any] = Depends(require_authenticated)):
    return {"user": user}


@router.get("/github")
def github_login(oauth: GitHubOAuth = Depends(get_oauth)):
    state = secrets.token_urlsafe(16)
    resp = RedirectResponse(oauth.authorization_url(state), status_code=302)
    resp.set_cookie(STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax")
    return resp


@router.get("/github/callback")
async def github_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    oauth: GitHubOAuth = Depends(get_oauth),
    users: UserRepository = Depends(get_users),
):
    expected = request.cookies.get(STATE_COOKIE)
    if not code or not state or not expected or not secrets.compare_digest(state, expected):
        logger.info("oauth_callback_rejected", reason="state_mismatch" if code else "missing_code")
        return RedirectResponse(FAILURE_PATH, status_code=302)

    try:
        profile = await oauth.fetch_profile(code)
        user = await users.find_or_create_from_profile(profile)
    except (OAuthError, httpx.HTTPError, InventoryError) as e:
        logger.warning("oauth_callback_failed", reason=type(e).__name__)
        return RedirectResponse(FAILURE_PATH, status_code=302)

    token = issue_token(user)
    frontend_url = os.getenv("FRONTEND_URL")
    if frontend_url:
        resp = RedirectResponse(f"{frontend_url.rstrip('/')}/login/success?token={token}", status_code=302)
    else:
        resp = JSONResponse({"message": "GitHub authentication successful", "user": user, "token": token})
    set_token_cookie(resp, token)
    resp.delete_cookie(STATE_COOKIE)
    return resp


@router.get("/github/failure")
def github_failure():
    return JSONResponse(status_code=401, content={"detail": "GitHub authentication failed"})
