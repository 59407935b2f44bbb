"""Filesystem Document Storage

Development and test backend (DOCUMENT_STORAGE_BACKEND: local). Writes
documents under a root directory and exposes them below a public base URL
served by the web tier.
"""

import asyncio
import logging
from pathlib import Path

from src.app.services.document_storage import DocumentStorage, DocumentStorageError

logger = logging.getLogger(__name__)


class LocalDocumentStorage(DocumentStorage):
    def __init__(self, root_dir: str, public_base_url: str):
        self.root = Path(root_dir).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def _target(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if self.root != target and self.root not in target.parents:
            raise DocumentStorageError(f"Storage path escapes the document root: {path}")
        return target

    async def save(self, path: str, content: bytes, content_type: str = "application/pdf") -> str:
        target = self._target(path)
        try:
            await asyncio.to_thread(self._write, target, content)
        except OSError as e:
            raise DocumentStorageError(f"Failed to store {path}: {e}") from e

        logger.info(f"Stored {content_type} document {path} ({len(content)} bytes)")
        return f"{self.public_base_url}/{target.relative_to(self.root).as_posix()}"

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
