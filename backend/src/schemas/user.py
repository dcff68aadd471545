"""Pydantic schemas for authentication and user endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Email/password pair accepted by register and login."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserPublic(BaseModel):
    """User fields returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: datetime


class LoginUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class RegisterResponse(BaseModel):
    message: str = "Registration successful"
    token: str
    user: UserPublic


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    user: LoginUser
