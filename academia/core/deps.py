from typing import Iterator

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from academia.core.config import Settings
from academia.services.ai import AIService
from academia.services.storage import Storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# every request that needs DB will get a fresh session, and it will always close.
def get_db(request: Request) -> Iterator[Session]:
    with request.app.state.database.session() as db:
        yield db


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)


def get_ai_service(request: Request) -> AIService:
    return request.app.state.ai_service
