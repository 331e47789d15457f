import logging
import os
from functools import lru_cache
from pathlib import Path, PurePosixPath
from typing import Iterable, List

from taskboard.config import STORAGE_BUCKET, STORAGE_DIR


class StorageError(Exception):
    pass


class StorageNotFoundError(StorageError):
    pass


class StorageConflictError(StorageError):
    pass


class FileStorage:
    """
    Bucket-style object storage on local disk.
    Object paths are relative, slash-separated keys inside the bucket.
    """

    def __init__(self, root: str = STORAGE_DIR, bucket: str = STORAGE_BUCKET):
        self.bucket = bucket
        self.base = Path(root).resolve() / bucket
        self.logger = logging.getLogger("taskboard.storage")

    # -------------------------
    # Objects
    # -------------------------

    def upload(self, path: str, data: bytes) -> str:
        target = self._resolve(path)
        if target.exists():
            raise StorageConflictError(f"The resource already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            raise StorageConflictError(f"The resource already exists: {path}") from exc
        except OSError as exc:
            raise StorageError(f"Upload failed: {exc.strerror or exc}") from exc

        self.logger.info("storage_upload", extra={"bucket": self.bucket, "bytes": len(data)})
        return path

    def download(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return target.read_bytes()
        except FileNotFoundError as exc:
            raise StorageNotFoundError(f"Object not found: {path}") from exc
        except OSError as exc:
            raise StorageError(f"Download failed: {exc.strerror or exc}") from exc

    def remove(self, paths: Iterable[str]) -> List[str]:
        """Delete objects; paths that are already gone count as removed."""
        removed: List[str] = []
        for path in paths:
            target = self._resolve(path)
            try:
                target.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                raise StorageError(f"Remove failed: {exc.strerror or exc}") from exc
            removed.append(path)
            self._prune(target.parent)

        self.logger.info("storage_remove", extra={"bucket": self.bucket, "count": len(removed)})
        return removed

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    # -------------------------
    # Helpers
    # -------------------------

    def _resolve(self, path: str) -> Path:
        key = PurePosixPath(path)
        if not path or key.is_absolute() or ".." in key.parts:
            raise StorageError(f"Invalid object path: {path!r}")
        return self.base.joinpath(*key.parts)

    def _prune(self, directory: Path) -> None:
        # drop empty {user}/{task} folders, never the bucket itself
        while directory != self.base and self.base in directory.parents:
            try:
                os.rmdir(directory)
            except OSError:
                return
            directory = directory.parent


@lru_cache(maxsize=1)
def get_storage() -> FileStorage:
    """Singleton FileStorage (FastAPI dependency)."""
    return FileStorage()
