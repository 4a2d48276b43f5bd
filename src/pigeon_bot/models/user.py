"""
User records — GET /users/{id}, GET /users/me.
"""

from typing import Optional
from pydantic import BaseModel


class User(BaseModel):
    id: int
    username: str = ""
    name: str = ""
    is_bot: bool = False
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False
    last_seen_at: Optional[str] = None

    model_config = {"extra": "allow", "frozen": True}
