"""
Binary storage collaborator.

File bytes live outside the database; profiles only hold opaque
references. The engine stores new files and releases references it no
longer needs.
"""

import os
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from onboarding.core.logging import get_logger

logger = get_logger(__name__)


class BlobStore(Protocol):
    def store(self, file_name: str, content: bytes) -> str:
        ...

    def release(self, file_ref: str) -> None:
        ...


class LocalBlobStore:
    """Files under one upload directory, referenced by generated names."""

    def __init__(self, upload_dir: str):
        self.root = Path(upload_dir)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, file_ref: str) -> Path:
        path = (self.root / file_ref).resolve()
        if self.root.resolve() not in path.parents:
            raise ValueError(f"File reference escapes the upload directory: {file_ref}")
        return path

    def store(self, file_name: str, content: bytes) -> str:
        suffix = Path(file_name).suffix.lower()
        file_ref = f"{uuid4().hex}{suffix}"
        self._path(file_ref).write_bytes(content)
        logger.debug("Stored blob", extra={"file_ref": file_ref, "size": len(content)})
        return file_ref

    def release(self, file_ref: str) -> None:
        path = self._path(file_ref)
        if path.exists():
            os.remove(path)
            logger.debug("Released blob", extra={"file_ref": file_ref})
