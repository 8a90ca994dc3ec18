import secrets

from src.catalog.core.models.session import WebSession
from src.catalog.core.storage.session_storage import SessionStorage
from src.catalog.runtime.context import get_config


class WebSessionService:
    """Service for managing anonymous browser sessions."""

    def __init__(self, session_storage: SessionStorage) -> None:
        self._storage = session_storage

    async def create_session(self) -> WebSession:
        """Create and store a fresh browser session."""
        max_age = get_config().app.session_max_age
        web_session = WebSession.create(
            session_id=secrets.token_urlsafe(32), session_max_age=max_age
        )
        await self._storage.set(f"web:{web_session.id}", web_session, max_age)
        return web_session

    async def get_session(self, session_id: str) -> WebSession | None:
        """Get a live browser session by ID, sliding its expiry forward.

        Args:
            session_id: Session identifier from the session cookie

        Returns:
            Browser session or None if not found/expired
        """
        web_session = await self._storage.get(f"web:{session_id}", WebSession)
        if not web_session:
            return None

        if web_session.is_expired():
            await self.delete_session(session_id)
            return None

        max_age = get_config().app.session_max_age
        web_session.touch(max_age)
        await self._storage.set(f"web:{web_session.id}", web_session, max_age)
        return web_session

    async def resolve_session(self, session_id: str | None) -> tuple[WebSession, bool]:
        """Return the session for ``session_id``, creating one if needed.

        Returns:
            The session and whether it was newly created.
        """
        if session_id:
            web_session = await self.get_session(session_id)
            if web_session:
                return web_session, False
        return await self.create_session(), True

    async def delete_session(self, session_id: str) -> None:
        """Delete a browser session together with its pending flash state."""
        await self._storage.delete(f"web:{session_id}")
        await self._storage.delete(f"flash:{session_id}")
        await self._storage.delete(f"form:{session_id}")

    async def purge_expired(self) -> int:
        return await self._storage.cleanup_expired()
