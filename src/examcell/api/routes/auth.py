"""Signup, login, logout and session endpoints."""

import logging

from fastapi import APIRouter, status

from examcell.api.dependencies import AnySessionDep, SettingsDep, StateStoreDep
from examcell.api.models import (
    APIResponse,
    AuthResponse,
    LoginRequest,
    MeResponse,
    SignupRequest,
    user_to_auth_response,
    user_to_me_response,
)
from examcell.auth import InvalidCredentialsError, Role
from examcell.auth.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from examcell.state_store import UserNotFoundError

logger = logging.getLogger("examcell.api.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=APIResponse[AuthResponse],
    status_code=status.HTTP_201_CREATED,
)
def signup(
    request: SignupRequest, store: StateStoreDep, settings: SettingsDep
) -> APIResponse[AuthResponse]:
    """Create an account (and its student or teacher profile) and log it in."""
    user = store.create_user(
        email=request.email,
        username=request.username,
        password_hash=hash_password(request.password, rounds=settings.bcrypt_rounds),
        full_name=request.full_name,
        role=request.role,
        roll_no=request.roll_no,
        semester=request.semester,
        department=request.department,
        phone_number=request.phone_number,
        address=request.address,
        employee_id=request.employee_id,
        designation=request.designation,
        specialization=request.specialization,
    )
    token = create_access_token(user.id, Role.parse(user.role), settings)
    return APIResponse(data=user_to_auth_response(user, token))


@router.post("/login", response_model=APIResponse[AuthResponse])
def login(
    request: LoginRequest, store: StateStoreDep, settings: SettingsDep
) -> APIResponse[AuthResponse]:
    """Exchange email and password for an access token."""
    try:
        user = store.get_user_by_email(request.email)
    except UserNotFoundError as e:
        raise InvalidCredentialsError("Unknown email") from e

    if not user.active or not verify_password(request.password, user.password_hash):
        logger.info("Failed login for user %s", user.id)
        raise InvalidCredentialsError("Wrong password or inactive account")

    token = create_access_token(user.id, Role.parse(user.role), settings)
    logger.info("User %s logged in", user.id)
    return APIResponse(data=user_to_auth_response(user, token))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(session: AnySessionDep, store: StateStoreDep, settings: SettingsDep) -> None:
    """Revoke the presented access token."""
    claims = decode_access_token(session.token, settings)
    store.revoke_token(claims.jti, session.user_id)
    logger.info("User %s logged out", session.user_id)


@router.get("/me", response_model=APIResponse[MeResponse])
def me(session: AnySessionDep, store: StateStoreDep) -> APIResponse[MeResponse]:
    """The account behind the presented access token."""
    user = store.get_user(session.user_id)
    return APIResponse(data=user_to_me_response(user))
