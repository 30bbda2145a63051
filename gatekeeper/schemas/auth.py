"""Pydantic schemas for authentication endpoints."""

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public projection of a user. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    first_name: str
    last_name: str


class SignUpRequest(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str


class SignUpResponse(BaseModel):
    success: bool
    message: str
    user: UserResponse


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


class StatusResponse(BaseModel):
    success: bool
    message: str


class ValidateTokenRequest(BaseModel):
    access_token: str


class ValidateTokenResponse(BaseModel):
    valid: bool
    user: UserResponse
    message: str


class ErrorResponse(BaseModel):
    detail: str
    code: str
