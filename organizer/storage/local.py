import os
import shutil

from organizer import config
from organizer.storage.base import Storage


class LocalStorage(Storage):
    """Files under `base_path`; paths outside it are rejected (path traversal safety)."""

    def __init__(self, base_path: str = config.STORAGE_DIR) -> None:
        self.base_path = os.path.normpath(os.path.abspath(base_path))

    def _ensure_path_within_base(self, path: str) -> None:
        """Raise ValueError if path (after resolving . and ..) is outside base_path."""
        resolved = os.path.normpath(os.path.abspath(path))
        if not (resolved == self.base_path or resolved.startswith(self.base_path + os.sep)):
            raise ValueError("Path is outside allowed storage directory.")

    def save(self, path: str, data: bytes) -> None:
        self._ensure_path_within_base(path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def delete(self, path: str) -> None:
        """Remove the file and its now-empty parent directory."""
        self._ensure_path_within_base(path)
        if os.path.isfile(path):
            os.remove(path)
        parent = os.path.dirname(path)
        if parent != self.base_path and os.path.isdir(parent) and not os.listdir(parent):
            shutil.rmtree(parent, ignore_errors=True)

    def delete_tree(self, path: str) -> None:
        """Remove a directory below base_path and everything in it."""
        self._ensure_path_within_base(path)
        if os.path.normpath(os.path.abspath(path)) == self.base_path:
            raise ValueError("Refusing to remove the storage root.")
        shutil.rmtree(path, ignore_errors=True)
