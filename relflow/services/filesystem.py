"""Project-relative file access used by release tasks."""

from __future__ import annotations

from pathlib import Path

from relflow.core.result import Err, Ok, Result

from .errors import ServiceError

__all__ = ["LocalFileSystem"]


class LocalFileSystem:
    """Reads and writes UTF-8 text files below ``root``.

    Relative paths are resolved against ``root``; absolute paths are used
    as given.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def resolve(self, path: str | Path) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.root / p

    def exists(self, path: str | Path) -> bool:
        return self.resolve(path).is_file()

    def read(self, path: str | Path) -> Result[str, ServiceError]:
        target = self.resolve(path)
        try:
            return Ok(target.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return Err(ServiceError(kind="not_found", message=f"file not found: {target}"))
        except (OSError, UnicodeDecodeError) as e:
            return Err(ServiceError(kind="failed", message=f"failed to read {target}: {e}"))

    def write(self, path: str | Path, content: str) -> Result[None, ServiceError]:
        target = self.resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as e:
            return Err(ServiceError(kind="failed", message=f"failed to write {target}: {e}"))
        return Ok(None)

    def remove(self, path: str | Path) -> Result[None, ServiceError]:
        target = self.resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as e:
            return Err(ServiceError(kind="failed", message=f"failed to remove {target}: {e}"))
        return Ok(None)
