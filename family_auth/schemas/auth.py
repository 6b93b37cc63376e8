from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime


class SignupRequest(BaseModel):
    """Email/password registration request"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class SigninRequest(BaseModel):
    """Email/password login"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class MessageResponse(BaseModel):
    message: str


class SessionCountResponse(BaseModel):
    active_session_count: int


class SessionInfo(BaseModel):
    """A durable refresh-token record as shown to its owner (no hash)."""
    id: str
    device_info: str | None = None
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Principal(BaseModel):
    """Identity carried by a valid access token."""
    user_id: str
    token_id: str | None = None
