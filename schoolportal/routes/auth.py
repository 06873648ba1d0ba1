from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, Response

from schoolportal.core.config import settings
from schoolportal.core.dependencies import (
    ACCESS_TOKEN_COOKIE,
    extract_token,
    get_auth_service,
    get_current_session
)
from schoolportal.core.logging import logger
from schoolportal.schemas.auth import LoginRequest, LoginResponse, SessionResponse, SessionUser
from schoolportal.services.auth_service import AuthService

router = APIRouter(tags=["Authentication"])


def _cookie_settings() -> Dict[str, Any]:
    return {
        "httponly": True,
        "secure": settings.COOKIE_SECURE,
        "samesite": settings.COOKIE_SAMESITE,
        "path": "/"
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    credentials: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """Check credentials, set the session cookie and return the token"""
    client_ip = request.client.host if request.client else "unknown"
    logger.info(
        "Login attempt initiated",
        extra={
            "ip": client_ip,
            "email_domain": credentials.email.split('@')[1] if '@' in credentials.email else None
        }
    )

    token, session_user = await auth_service.login(credentials.email, credentials.password)
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        **_cookie_settings()
    )
    return LoginResponse(access_token=token, user=session_user)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    session_user: SessionUser = Depends(get_current_session),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, str]:
    """Revoke the current token and clear the cookie"""
    await auth_service.logout(extract_token(request))
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **_cookie_settings())
    return {"message": "Logged out successfully"}


@router.get("/session", response_model=SessionResponse)
async def get_session(
    session_user: SessionUser = Depends(get_current_session)
) -> SessionResponse:
    return SessionResponse(user=session_user)
