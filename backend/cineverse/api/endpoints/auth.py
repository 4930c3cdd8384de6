"""Registration and session endpoints."""

from fastapi import APIRouter, Depends, Header, Request, Response, status
from sqlalchemy.orm import Session

from cineverse.common.timeutils import utcnow
from cineverse.core.app_exceptions import raise_app_error
from cineverse.core.config import settings
from cineverse.core.dependencies import extract_token, get_optional_user
from cineverse.core.permissions import permissions_for
from cineverse.core.security import create_session_token, verify_password, verify_session_token
from cineverse.core.security_logging import log_security_event
from cineverse.db.session import get_db
from cineverse.models.user import User
from cineverse.schemas.auth import (
    RegisterRequest,
    SessionResponse,
    SessionUser,
    SigninRequest,
    SigninResponse,
    StatusResponse,
    UserResponse,
)
from cineverse.services.captcha import RecaptchaVerifier, get_captcha_verifier
from cineverse.services.registration import find_user_by_email, register_user

router = APIRouter()


async def _require_captcha(
    request: Request, verifier: RecaptchaVerifier, token: str | None, event_type: str
) -> None:
    if not await verifier.verify(token):
        log_security_event(request, event_type=event_type, outcome="deny", reason_code="CAPTCHA_FAILED")
        raise_app_error(
            status_code=status.HTTP_400_BAD_REQUEST,
            code="CAPTCHA_FAILED",
            message="CAPTCHA verification failed",
        )


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user account.",
    tags=["Auth"],
)
async def register(
    request_data: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
    verifier: RecaptchaVerifier = Depends(get_captcha_verifier),
) -> UserResponse:
    await _require_captcha(request, verifier, request_data.captcha_token, "auth_register")

    user = register_user(db, request_data.name, request_data.email, request_data.password)

    log_security_event(
        request,
        event_type="auth_register",
        outcome="allow",
        user_id=str(user.id),
        role=user.role,
    )
    return UserResponse.model_validate(user)


@router.post(
    "/auth/signin",
    response_model=SigninResponse,
    summary="Sign in",
    description="Verify credentials and start a session (cookie and bearer token).",
    tags=["Auth"],
)
async def signin(
    request_data: SigninRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    verifier: RecaptchaVerifier = Depends(get_captcha_verifier),
) -> SigninResponse:
    await _require_captcha(request, verifier, request_data.captcha_token, "auth_signin_failed")

    user = find_user_by_email(db, request_data.email)
    password_valid = bool(
        user and user.password_hash and verify_password(request_data.password, user.password_hash)
    )

    # Same error whether or not the email exists
    if not password_valid:
        log_security_event(
            request,
            event_type="auth_signin_failed",
            outcome="deny",
            reason_code="UNAUTHORIZED",
        )
        raise_app_error(
            status_code=status.HTTP_401_UNAUTHORIZED,
            code="UNAUTHORIZED",
            message="Invalid email or password",
        )

    if not user.is_active:
        log_security_event(
            request,
            event_type="auth_signin_failed",
            outcome="deny",
            reason_code="FORBIDDEN",
            user_id=str(user.id),
        )
        raise_app_error(
            status_code=status.HTTP_403_FORBIDDEN,
            code="FORBIDDEN",
            message="User account is inactive",
        )

    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)

    token, expires_at = create_session_token(
        str(user.id), user.role, name=user.name, email=user.email
    )
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )

    log_security_event(request, event_type="auth_signin", outcome="allow", user_id=str(user.id))

    return SigninResponse(
        user=UserResponse.model_validate(user),
        access_token=token,
        expires_at=expires_at,
    )


@router.get(
    "/auth/session",
    response_model=SessionResponse,
    response_model_exclude_none=True,
    summary="Current session",
    description="Returns the signed-in user with role and permissions, or an empty object.",
    tags=["Auth"],
)
async def get_session(
    request: Request,
    authorization: str | None = Header(default=None),
    user: User | None = Depends(get_optional_user),
) -> SessionResponse:
    if user is None:
        return SessionResponse()

    # get_optional_user already accepted this token
    session_data = verify_session_token(extract_token(request, authorization))
    return SessionResponse(
        user=SessionUser(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            permissions=permissions_for(user.role),
        ),
        expires=session_data.expires_at,
    )


@router.post(
    "/auth/signout",
    response_model=StatusResponse,
    summary="Sign out",
    description="Clear the session cookie.",
    tags=["Auth"],
)
async def signout(
    request: Request,
    response: Response,
    user: User | None = Depends(get_optional_user),
) -> StatusResponse:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    if user is not None:
        log_security_event(request, event_type="auth_signout", outcome="allow", user_id=str(user.id))
    return StatusResponse(message="Signed out")
