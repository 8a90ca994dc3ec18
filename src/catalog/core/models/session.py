"""Browser session models."""

import time
from typing import Any

from pydantic import BaseModel, Field


class WebSession(BaseModel):
    """Anonymous browser session identified by the session cookie."""

    id: str = Field(description="Session identifier")
    created_at: int = Field(description="Creation timestamp")
    last_accessed_at: int = Field(description="Last access timestamp")
    expires_at: int = Field(description="Session expiration timestamp")

    @classmethod
    def create(cls, session_id: str, session_max_age: int = 7200) -> "WebSession":
        """Create a new browser session with timestamps."""
        now = int(time.time())
        return cls(
            id=session_id,
            created_at=now,
            last_accessed_at=now,
            expires_at=now + session_max_age,
        )

    def is_expired(self) -> bool:
        """Check if session is expired."""
        return time.time() > self.expires_at

    def touch(self, session_max_age: int) -> None:
        """Slide the expiry window forward from now."""
        now = int(time.time())
        self.last_accessed_at = now
        self.expires_at = now + session_max_age


class FlashMessage(BaseModel):
    """One-shot notification shown on the next rendered page."""

    message: str = Field(description="Text shown to the user")
    created_at: int = Field(default_factory=lambda: int(time.time()))


class FormState(BaseModel):
    """Field errors and submitted input kept for redisplaying a rejected form."""

    errors: dict[str, str] = Field(default_factory=dict)
    old: dict[str, Any] = Field(default_factory=dict)
