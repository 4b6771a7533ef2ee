"""Local-disk blob storage for uploaded files."""

import logging
from functools import lru_cache
from pathlib import Path

from workhub.core.config import get_settings
from workhub.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Stores blobs as flat files named by their key under ``base_dir``."""

    def __init__(self, base_dir: str | Path) -> None:
        path = Path(base_dir).expanduser()
        if not path.is_absolute():
            path = Path.home() / path
        self.base_dir = path
        if not self.base_dir.exists():
            self.base_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Upload directory created: %s", self.base_dir)

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise BadRequestError("Invalid file key")
        return self.base_dir / key

    def store(self, key: str, data: bytes) -> Path:
        target = self.path_for(key)
        target.write_bytes(data)
        return target

    def fetch(self, key: str) -> bytes:
        return self.path_for(key).read_bytes()

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


@lru_cache
def get_storage() -> LocalFileStorage:
    return LocalFileStorage(get_settings().upload_dir)
