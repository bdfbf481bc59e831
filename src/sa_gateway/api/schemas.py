"""Pydantic request/response schemas for sa_gateway."""

from pydantic import BaseModel, Field

from src.sa_common.enums import UserRole


class TokenRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64, pattern=r"^[a-zA-Z0-9_.-]+$")
    role: UserRole
    name: str = Field("", max_length=128)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    user_id: str
    role: str
    name: str
