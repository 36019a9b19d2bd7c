"""Workspace, project and document models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional

from ..frontend.binder import CSharpCompilation
from ..frontend.parser import CSharpParser, SyntaxTree

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass(eq=False)
class Document:
    """A source file owned by one project. The syntax tree is parsed on first access."""

    path: str
    parser: CSharpParser = field(repr=False)
    _tree: object = field(default=_UNSET, repr=False)

    @property
    def name(self) -> str:
        return Path(self.path).name

    @property
    def syntax_tree(self) -> Optional[SyntaxTree]:
        """Parsed tree, or None when the file cannot be read."""
        if self._tree is _UNSET:
            try:
                self._tree = self.parser.parse_file(self.path)
            except OSError as exc:
                logger.debug("Skipping unreadable document %s: %s", self.path, exc)
                self._tree = None
        return self._tree


@dataclass(eq=False)
class Project:
    """A named set of documents with one compilation."""

    name: str
    file_path: Optional[str] = None
    documents: List[Document] = field(default_factory=list)
    reference_paths: List[str] = field(default_factory=list, repr=False)
    references: List[Project] = field(default_factory=list, repr=False)
    _compilation: object = field(default=_UNSET, repr=False)

    @property
    def directory(self) -> Optional[str]:
        return str(Path(self.file_path).parent) if self.file_path else None

    def syntax_trees(self) -> List[SyntaxTree]:
        return [tree for tree in (doc.syntax_tree for doc in self.documents) if tree is not None]

    def referenced_projects(self) -> List[Project]:
        """Transitively referenced projects, nearest first, excluding this one."""
        ordered: List[Project] = []
        seen = {id(self)}
        pending = list(self.references)
        while pending:
            project = pending.pop(0)
            if id(project) in seen:
                continue
            seen.add(id(project))
            ordered.append(project)
            pending.extend(project.references)
        return ordered

    @property
    def compilation(self) -> Optional[CSharpCompilation]:
        """Compilation over this project's trees plus its references' trees, or None if it cannot be built."""
        if self._compilation is _UNSET:
            references = [tree for project in self.referenced_projects() for tree in project.syntax_trees()]
            try:
                self._compilation = CSharpCompilation(self.name, self.syntax_trees(), references)
            except Exception:  # noqa: BLE001 - a broken project must not stop the scan
                logger.debug("Skipping project %s: compilation failed", self.name, exc_info=True)
                self._compilation = None
        return self._compilation


@dataclass(eq=False)
class Workspace:
    """A loaded solution: ordered projects rooted at a directory."""

    path: str
    root: str
    projects: List[Project] = field(default_factory=list)

    def documents(self) -> Iterator[tuple[Project, Document]]:
        """Every document in project order, then document order."""
        for project in self.projects:
            for document in project.documents:
                yield project, document
