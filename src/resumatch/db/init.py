from __future__ import annotations

from pathlib import Path

from resumatch.config import get_settings
from resumatch.db import models  # noqa: F401
from resumatch.db.base import Base
from resumatch.db.documents import get_document_store
from resumatch.db.session import engine


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [
        settings.data_dir,
        settings.upload_dir,
    ]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, list[str]]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)
    store = get_document_store()
    return {
        "tables": sorted(Base.metadata.tables),
        "document_store": [store.engine.url.render_as_string(hide_password=True)],
    }
