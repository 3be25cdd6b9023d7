from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path, PurePath

from .errors import BlobDeletionFailed, BlobNotFound


logger = logging.getLogger("article_intake.blobs")


def _safe_name(filename: str) -> str:
    name = PurePath((filename or "").replace("\\", "/")).name.strip()
    return name or "upload"


class BlobStorage:
    """Uploaded documents kept as files in a single directory, addressed by ref."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _path(self, ref: str) -> Path:
        # Refs are plain file names inside root; anything else is unknown.
        if not ref or ref != PurePath(ref).name or ref in (".", "..") or "\\" in ref:
            raise BlobNotFound(ref)
        return self.root / ref

    def put(self, data: bytes, filename: str) -> str:
        self.root.mkdir(parents=True, exist_ok=True)
        ref = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{_safe_name(filename)}"
        self._path(ref).write_bytes(data)
        logger.info("Stored upload %s (%d bytes)", ref, len(data))
        return ref

    def path(self, ref: str) -> Path:
        p = self._path(ref)
        if not p.is_file():
            raise BlobNotFound(ref)
        return p

    def get(self, ref: str) -> bytes:
        return self.path(ref).read_bytes()

    def exists(self, ref: str) -> bool:
        try:
            self.path(ref)
        except BlobNotFound:
            return False
        return True

    def delete(self, ref: str) -> None:
        p = self._path(ref)
        try:
            p.unlink()
        except FileNotFoundError as e:
            raise BlobNotFound(ref) from e
        except OSError as e:
            raise BlobDeletionFailed(ref, e) from e
        logger.info("Deleted upload %s", ref)
