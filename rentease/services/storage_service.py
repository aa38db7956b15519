"""Object storage: named buckets of files addressed by slash-separated paths.

Objects live on disk under ``<root>/<bucket>/<path>`` and are served by the
``media`` blueprint, so ``public_url`` never needs a signed link.
"""
from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Union

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from rentease import config
from rentease.exceptions import StorageError
from rentease.utils.constants import BUCKETS, IMAGE_EXTENSIONS
from rentease.utils.logging import get_logger

LOG = get_logger("rentease.storage")

MEDIA_PREFIX = "/media"

Upload = Union[FileStorage, bytes]


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def is_image_upload(file: Optional[FileStorage]) -> bool:
    return bool(file and file.filename and file_extension(file.filename) in IMAGE_EXTENSIONS)


class StorageService:
    _inst = None
    _inst_lock = threading.Lock()

    def __init__(self, root: Union[str, os.PathLike, None] = None) -> None:
        self.root = Path(root or config.storage_dir())

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, root: Union[str, os.PathLike, None] = None) -> "StorageService":
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = cls(root)
        return cls._inst

    @classmethod
    def reset_instance(cls, storage: Optional["StorageService"] = None) -> None:
        with cls._inst_lock:
            cls._inst = storage

    # ---------- Paths ----------
    @staticmethod
    def _clean_path(path: str) -> str:
        parts = [secure_filename(p) for p in str(path or "").split("/") if p not in ("", ".", "..")]
        parts = [p for p in parts if p]
        if not parts:
            raise StorageError("Invalid object path")
        return "/".join(parts)

    def bucket_dir(self, bucket: str) -> Path:
        if bucket not in BUCKETS:
            raise StorageError(f"Unknown bucket: {bucket}")
        return self.root / bucket

    def object_path(self, bucket: str, path: str) -> Path:
        base = self.bucket_dir(bucket).resolve()
        target = (base / self._clean_path(path)).resolve()
        if base not in target.parents:
            raise StorageError("Invalid object path")
        return target

    # ---------- Operations ----------
    def upload(self, bucket: str, path: str, file: Upload, upsert: bool = False) -> str:
        """Store ``file`` at ``bucket/path``; return the normalized object path."""
        clean = self._clean_path(path)
        target = self.object_path(bucket, clean)
        if target.exists() and not upsert:
            raise StorageError("The resource already exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            if isinstance(file, (bytes, bytearray)):
                target.write_bytes(bytes(file))
            else:
                file.save(str(target))
        except OSError as exc:
            LOG.error("upload failed bucket=%s path=%s err=%s", bucket, clean, exc)
            raise StorageError("Upload failed") from exc
        LOG.info("uploaded bucket=%s path=%s", bucket, clean)
        return clean

    def list(self, bucket: str, prefix: str = "") -> List[str]:
        """Names of the objects directly under ``prefix``."""
        base = self.bucket_dir(bucket)
        folder = self.object_path(bucket, prefix) if prefix else base
        if not folder.is_dir():
            return []
        return sorted(p.name for p in folder.iterdir() if p.is_file())

    def remove(self, bucket: str, paths: Iterable[str]) -> List[str]:
        """Delete objects; return the paths that were actually removed."""
        removed = []
        for path in paths:
            target = self.object_path(bucket, path)
            if target.is_file():
                target.unlink()
                removed.append(self._clean_path(path))
        if removed:
            LOG.info("removed bucket=%s paths=%s", bucket, removed)
        return removed

    def public_url(self, bucket: str, path: str) -> str:
        self.bucket_dir(bucket)
        return f"{MEDIA_PREFIX}/{bucket}/{self._clean_path(path)}"


def _storage() -> StorageService:
    return StorageService.instance()
