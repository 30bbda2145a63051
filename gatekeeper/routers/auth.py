"""Authentication API endpoints."""

from fastapi import APIRouter, Depends

from gatekeeper.dependencies import get_auth_service, get_current_user
from gatekeeper.schemas.auth import (
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SignUpRequest,
    SignUpResponse,
    StatusResponse,
    UserResponse,
    ValidateTokenRequest,
    ValidateTokenResponse,
)
from gatekeeper.services.auth import AuthService, TokenValidationResult

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["Authentication"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


@router.post("/signup", response_model=SignUpResponse, status_code=201, responses={409: {"model": ErrorResponse}})
def signup(body: SignUpRequest, auth_service: AuthService = Depends(get_auth_service)) -> SignUpResponse:
    """Register a new user account."""
    result = auth_service.sign_up(body.email, body.password, body.first_name, body.last_name)
    return SignUpResponse(
        success=result.success,
        message=result.message,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)) -> LoginResponse:
    """Authenticate and receive an access/refresh token pair."""
    result = auth_service.login(body.email, body.password)
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=result.expires_in,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/forgot-password", response_model=StatusResponse)
def forgot_password(
    body: ForgotPasswordRequest, auth_service: AuthService = Depends(get_auth_service)
) -> StatusResponse:
    """Request a password reset. Same response whether or not the email is registered."""
    result = auth_service.forgot_password(body.email)
    return StatusResponse(success=result.success, message=result.message)


@router.post("/reset-password", response_model=StatusResponse)
def reset_password(
    body: ResetPasswordRequest, auth_service: AuthService = Depends(get_auth_service)
) -> StatusResponse:
    """Set a new password using a reset token."""
    result = auth_service.reset_password(body.token, body.new_password)
    return StatusResponse(success=result.success, message=result.message)


@router.post("/validate-token", response_model=ValidateTokenResponse)
def validate_token(
    body: ValidateTokenRequest, auth_service: AuthService = Depends(get_auth_service)
) -> ValidateTokenResponse:
    """Verify an access token and return its user."""
    result = auth_service.validate_token(body.access_token)
    return ValidateTokenResponse(
        valid=result.valid,
        user=UserResponse.model_validate(result.user),
        message=result.message,
    )


@router.get("/me", response_model=UserResponse)
def me(current: TokenValidationResult = Depends(get_current_user)) -> UserResponse:
    """Return the user behind the Bearer token."""
    return UserResponse.model_validate(current.user)
