"""Filesystem access used by the document emitter.

The emitter only talks to a :class:`FileSystem`; tests and callers with
unusual storage can substitute their own implementation.
"""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol


class FileSystem(Protocol):
    """UTF-8 text storage addressed by absolute paths."""

    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, content: str) -> None: ...

    def exists(self, path: Path) -> bool: ...

    def modified_at(self, path: Path) -> datetime: ...

    def list_files(self, directory: Path) -> list[str]: ...


class LocalFileSystem:
    """:class:`FileSystem` backed by the local disk.

    ``write_text`` creates missing parent directories; creation is idempotent.
    """

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def modified_at(self, path: Path) -> datetime:
        return datetime.fromtimestamp(Path(path).stat().st_mtime, tz=timezone.utc)

    def list_files(self, directory: Path) -> list[str]:
        """Return files under ``directory`` as sorted POSIX paths relative to it.

        Raises
        ------
        FileNotFoundError
            If ``directory`` does not exist.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Not a directory: {directory}")
        return sorted(
            p.relative_to(directory).as_posix() for p in directory.rglob("*") if p.is_file()
        )
