"""Workspace loading and caching."""

from .cache import WorkspaceCache
from .loader import find_project_by_name, load_workspace, relative_path, resolve_document_path
from .models import Document, Project, Workspace

__all__ = [
    "Document",
    "Project",
    "Workspace",
    "WorkspaceCache",
    "find_project_by_name",
    "load_workspace",
    "relative_path",
    "resolve_document_path",
]
