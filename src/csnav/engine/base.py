"""Shared traversal for workspace queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

from ..frontend.binder import CSharpCompilation, SemanticModel
from ..frontend.parser import SyntaxTree
from ..workspace.loader import relative_path
from ..workspace.models import Document, Project, Workspace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundTree:
    """A syntax tree together with the compilation and binder it was scanned with."""

    project: Project
    compilation: CSharpCompilation
    tree: SyntaxTree
    model: SemanticModel


class WorkspaceQuery:
    """Base for queries: deterministic iteration over projects, documents and trees.

    Projects whose compilation cannot be built and documents whose tree
    cannot be read are skipped; the scan goes on with the rest.
    """

    def __init__(self, workspace: Workspace):
        self.workspace = workspace

    def relative(self, path: str) -> str:
        return relative_path(path, self.workspace.root)

    def bound_trees(self) -> Iterator[BoundTree]:
        """Every tree of every project's compilation, in workspace order."""
        for project in self.workspace.projects:
            compilation = project.compilation
            if compilation is None:
                logger.debug("No compilation for project %s", project.name)
                continue
            for tree in compilation.syntax_trees:
                yield BoundTree(project, compilation, tree, compilation.semantic_model(tree))

    def bound_documents(self) -> Iterator[tuple[Document, BoundTree]]:
        """Each project's own documents with their binder, skipping projects without a compilation."""
        for project in self.workspace.projects:
            compilation = project.compilation
            if compilation is None:
                logger.debug("No compilation for project %s", project.name)
                continue
            for document in project.documents:
                tree = document.syntax_tree
                if tree is None:
                    continue
                yield document, BoundTree(project, compilation, tree, compilation.semantic_model(tree))

    def document_trees(self) -> Iterator[tuple[Document, SyntaxTree]]:
        """Every readable document's tree, without binding."""
        for _, document in self.workspace.documents():
            tree = document.syntax_tree
            if tree is None:
                continue
            yield document, tree
