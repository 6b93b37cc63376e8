"""User response schemas."""
from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional


class UserResponse(BaseModel):
    id: str
    email: str
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
