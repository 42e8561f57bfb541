"""Storage exceptions raised by the session and discovery layers.

Every error names the file it concerns and the underlying cause, so the
service layer can surface both without re-deriving them.
"""

from __future__ import annotations

from pathlib import Path


class StorageError(Exception):
    """Base class for storage failures bound to one file."""

    action = "access storage"

    def __init__(self, path: Path | str | None, cause: BaseException | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.cause = cause
        super().__init__(self._format())

    def _format(self) -> str:
        where = str(self.path) if self.path is not None else "<no file>"
        if self.cause is None:
            return f"Failed to {self.action} {where}"
        return f"Failed to {self.action} {where}: {self.cause}"

    @property
    def cause_text(self) -> str | None:
        return str(self.cause) if self.cause is not None else None


class StorageOpenError(StorageError):
    """The storage file could not be opened or its schema prepared."""

    action = "open"


class SaveError(StorageError):
    """A save transaction failed and was rolled back."""

    action = "save graph to"


class LoadError(StorageError):
    """Reading the graph back from storage failed."""

    action = "load graph from"


class SessionClosedError(StorageError):
    """An operation needed an open file but the session has none."""

    action = "use closed session for"

    def __init__(
        self,
        path: Path | str | None = None,
        cause: BaseException | str | None = None,
    ) -> None:
        super().__init__(path, cause or "no storage file is open")


class DeleteError(StorageError):
    """A storage file exists but could not be removed."""

    action = "delete"
