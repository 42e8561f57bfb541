"""BaseService — foundation for all graphkeep services.

Every service receives a :class:`GraphSession` at construction time and
reports through :class:`ServiceResult`. Storage exceptions are converted
to structured errors here so no service lets one escape.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from graphkeep.infrastructure.errors import StorageError
from graphkeep.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from graphkeep.infrastructure.session import GraphSession

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GraphService(BaseService):
            def load(self) -> ServiceResult:
                snapshot = self._session.load_graph()
                return self._ok("load_graph", {...})
    """

    def __init__(self, session: GraphSession) -> None:
        self._session = session

    def _ok(
        self,
        op: str,
        data: dict[str, Any],
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Successful result carrying the session's standing warnings."""
        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=[*self._session.warnings, *(warnings or [])],
        )

    def _fail(
        self,
        op: str,
        code: str,
        message: str,
        detail: dict[str, Any] | None = None,
    ) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            warnings=list(self._session.warnings),
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )

    def _storage_failure(self, op: str, code: str, exc: StorageError) -> ServiceResult:
        """Map a storage exception to a result naming its file and cause."""
        logger.debug("%s failed: %s", op, exc, exc_info=True)
        return self._fail(
            op,
            code,
            str(exc),
            {
                "path": str(exc.path) if exc.path is not None else None,
                "cause": exc.cause_text,
            },
        )
