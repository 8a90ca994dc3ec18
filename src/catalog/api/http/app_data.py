from dataclasses import dataclass

from src.catalog.api.http.pages import PageRenderer
from src.catalog.core.services import (
    DbSessionService,
    FlashService,
    WebSessionService,
)
from src.catalog.core.storage.session_storage import SessionStorage


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    session_storage: SessionStorage
    web_session_service: WebSessionService
    flash_service: FlashService
    pages: PageRenderer
