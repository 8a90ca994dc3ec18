"""Read-once session state: flash messages and rejected-form state."""

from typing import Any

from loguru import logger

from src.catalog.core.models.session import FlashMessage, FormState
from src.catalog.core.storage.session_storage import SessionStorage
from src.catalog.runtime.context import get_config


class FlashService:
    """Stores one-shot values per browser session.

    A value set here is returned by exactly one ``take_*`` call and then
    cleared. Keys are namespaced by session id, so sessions never see each
    other's values.
    """

    def __init__(self, session_storage: SessionStorage) -> None:
        self._storage = session_storage

    @staticmethod
    def _ttl() -> int:
        return get_config().app.session_max_age

    async def set_flash(self, session_id: str, message: str) -> None:
        """Store ``message``, overwriting any unread flash for the session."""
        await self._storage.set(
            f"flash:{session_id}", FlashMessage(message=message), self._ttl()
        )
        logger.debug("flash.set", session_flash=message)

    async def take_flash(self, session_id: str) -> str | None:
        """Return the pending flash message and clear it."""
        flash = await self._storage.pop(f"flash:{session_id}", FlashMessage)
        return flash.message if flash else None

    async def set_form_state(
        self, session_id: str, errors: dict[str, str], old: dict[str, Any]
    ) -> None:
        """Keep field errors and submitted input for the next form render."""
        await self._storage.set(
            f"form:{session_id}", FormState(errors=errors, old=old), self._ttl()
        )

    async def take_form_state(self, session_id: str) -> FormState:
        """Return the pending form state (empty when none) and clear it."""
        state = await self._storage.pop(f"form:{session_id}", FormState)
        return state or FormState()
