"""
Local object bucket for uploaded PDFs.
"""

from pathlib import Path
from typing import Union


class LocalBucket:
    """Stores objects as files under a root directory."""

    def __init__(self, root: Union[str, Path], name: str = "local"):
        self.name = name
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, object_name: str) -> Path:
        path = (self.root / object_name).resolve()
        if path != self.root and self.root not in path.parents:
            raise ValueError(f"Object name escapes bucket root: {object_name}")
        return path

    def upload(self, object_name: str, data: bytes) -> None:
        path = self._path(object_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def download(self, object_name: str) -> bytes:
        path = self._path(object_name)
        if not path.is_file():
            raise FileNotFoundError(f"No such object: {object_name}")
        return path.read_bytes()

    def exists(self, object_name: str) -> bool:
        return self._path(object_name).is_file()
