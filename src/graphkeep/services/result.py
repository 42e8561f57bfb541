"""ServiceResult and ServiceError — what every service operation returns.

INVARIANT: service methods never raise for storage failures; they
return a ServiceResult with ``ok=False`` and a coded error. The CLI and
any embedding editor consume this one type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Coded failure (``SAVE_FAILED``, ``INVALID_DOCUMENT``, ...).

    ``detail`` carries machine-readable context, usually the storage
    ``path`` and the underlying ``cause``.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"save_graph"``, ``"load_graph"``, ...).
        data: Operation payload on success, shaped by a contract in
            :mod:`graphkeep.services.contracts`.
        warnings: Non-fatal issues, including any legacy-layout notice
            from opening the storage file.
        error: Set when ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def error_message(self) -> str:
        """The error's message, or ``"Unknown error"`` for a bare failure."""
        return self.error.message if self.error else "Unknown error"
