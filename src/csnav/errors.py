"""Typed failures raised by navigator queries."""

from __future__ import annotations

from .models import ErrorInfo, ErrorResult


class NavigatorError(Exception):
    """Base class for failures reported back to the caller as structured outcomes."""

    kind = "error"

    def __init__(self, message: str, query: str | None = None):
        super().__init__(message)
        self.message = message
        self.query = query

    def to_result(self, code: str | None = None) -> ErrorResult:
        """Render this failure as an ErrorResult record."""
        return ErrorResult(error=ErrorInfo(code=code or self.kind, message=self.message))


class InvalidQueryError(NavigatorError):
    """A required identifier was missing or blank."""

    kind = "invalid_query"


class SymbolNotFoundError(NavigatorError):
    """The target was absent after a full scan of the workspace."""

    kind = "not_found"


class WorkspaceLoadError(NavigatorError):
    """The solution path itself could not be loaded."""

    kind = "workspace_error"
