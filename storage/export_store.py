from __future__ import annotations

from functools import lru_cache
from pathlib import Path, PurePosixPath
from threading import Lock
from typing import Dict, Iterable, Optional

from models.errors import require_identifier
from settings import get_settings


class ExportStore:
    """Receives finished export buffers, in memory and optionally on disk."""

    def __init__(self, name: str = "exports", root_path: Optional[Path] = None) -> None:
        self.name = name
        self._objects: Dict[str, bytes] = {}
        self.root_path = root_path
        self._lock = Lock()
        if root_path:
            root_path.mkdir(parents=True, exist_ok=True)

    def put_object(self, key: str, data: bytes) -> None:
        key = self._validate_key(key)
        with self._lock:
            if self.root_path:
                path = self.root_path / key
                path.parent.mkdir(parents=True, exist_ok=True)
                # Write then rename so readers never observe a partial file.
                partial = path.with_name(path.name + ".part")
                partial.write_bytes(data)
                partial.replace(path)
            self._objects[key] = data

    def get_object(self, key: str) -> bytes:
        key = self._validate_key(key)
        with self._lock:
            data = self._objects.get(key)
            if data is not None:
                return data

        if self.root_path:
            path = self.root_path / key
            if path.exists():
                data = path.read_bytes()
                with self._lock:
                    self._objects[key] = data
                return data

        raise KeyError(f"Export {key!r} not found in store {self.name!r}.")

    def list_objects(self) -> Iterable[str]:
        with self._lock:
            keys = set(self._objects)

        if self.root_path:
            for path in self.root_path.rglob("*"):
                if path.is_file() and not path.name.endswith(".part"):
                    keys.add(path.relative_to(self.root_path).as_posix())

        return sorted(keys)

    @staticmethod
    def _validate_key(key: str) -> str:
        require_identifier(key, "export key")
        parts = PurePosixPath(key).parts
        if key.startswith("/") or ".." in parts:
            raise ValueError(f"Export key {key!r} must be a relative path.")
        return key


@lru_cache
def build_default_store(
    name: Optional[str] = None,
    root_path: Optional[str] = None,
) -> ExportStore:
    settings = get_settings()
    store_root = settings.export_output_path if root_path is None else root_path
    path = Path(store_root) if store_root else None
    return ExportStore(name=name or "exports", root_path=path)
