from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileStorage:
    """Uploaded files under a single root directory, addressed by relative path."""

    def __init__(self, root: Path):
        self.root = root

    def save(self, relative_path: str, content: bytes) -> Path:
        target = self.resolve(relative_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return target

    def resolve(self, relative_path: str) -> Path:
        root = self.root.resolve()
        target = (root / relative_path).resolve()
        if not target.is_relative_to(root):
            raise ValueError(f"path escapes storage root: {relative_path}")
        return target

    def delete(self, relative_path: str) -> bool:
        target = self.resolve(relative_path)
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.exception("Failed to delete stored file %s", relative_path)
            return False
        return True
