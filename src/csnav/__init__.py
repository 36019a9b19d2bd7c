"""csnav - Semantic cross-reference navigation for C# solutions."""

__version__ = "0.1.0"

from .config import Config
from .errors import InvalidQueryError, NavigatorError, SymbolNotFoundError, WorkspaceLoadError
from .navigator import Navigator
from .workspace import WorkspaceCache, load_workspace

__all__ = [
    "Config",
    "InvalidQueryError",
    "Navigator",
    "NavigatorError",
    "SymbolNotFoundError",
    "WorkspaceCache",
    "WorkspaceLoadError",
    "load_workspace",
]
