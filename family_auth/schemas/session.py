"""Cache-side session records."""
from datetime import datetime
from pydantic import BaseModel


class SessionRecord(BaseModel):
    """Value stored at ``session:{user_id}:{token_hash}``.

    Holds the raw refresh token; it only ever lives in the cache, the durable
    table keeps the hash alone.
    """
    user_id: str
    refresh_token: str
    created_at: datetime
    expires_at: datetime
