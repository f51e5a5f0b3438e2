from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from resumatch.config import get_settings
from resumatch.db.documents import DocumentStore, get_document_store
from resumatch.db.models import Profile
from resumatch.db.repositories import Repository
from resumatch.db.session import get_db_session
from resumatch.errors import ForbiddenError, UnauthorizedError
from resumatch.llm.router import LLMRouter


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_documents() -> DocumentStore:
    return get_document_store()


@lru_cache(maxsize=1)
def get_llm_router() -> LLMRouter:
    return LLMRouter(get_settings())


def get_identity(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    """The caller's id, as asserted by the identity provider in front of the API."""
    identity = (x_user_id or "").strip()
    if not identity:
        raise UnauthorizedError()
    return identity


def get_current_user(identity: str = Depends(get_identity), db: Session = Depends(get_db)) -> Profile:
    profile = Repository(db).get_profile(identity)
    if profile is None:
        raise UnauthorizedError()
    return profile


def require_user_type(user: Profile, user_type: str, message: str) -> None:
    if user.user_type != user_type:
        raise ForbiddenError(message)
