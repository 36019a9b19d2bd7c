"""C# parser using tree-sitter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import tree_sitter_c_sharp as tscs
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

CS_LANGUAGE = Language(tscs.language())


@dataclass(eq=False)
class SyntaxTree:
    """A parsed source file.

    Trees are immutable once built. ``text`` is the decoded source and
    ``lines`` its line table, both used for context snippets.
    """

    path: str
    text: str
    tree: Tree
    lines: list[str] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def line_text(self, line: int) -> str:
        """Return the 1-based source line, or an empty string when out of range."""
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return ""

    def contains_text(self, needle: str) -> bool:
        """Case-insensitive substring test over the raw source."""
        return needle.lower() in self.text.lower()


class CSharpParser:
    """Parse C# source using tree-sitter."""

    def __init__(self):
        self._parser = Parser(CS_LANGUAGE)

    def parse(self, source: str, file_path: str = "file.cs") -> SyntaxTree:
        """Parse source text into a SyntaxTree."""
        tree = self._parser.parse(source.encode("utf-8"))
        if tree.root_node.has_error:
            logger.debug("Syntax errors in %s; continuing with partial tree", file_path)
        return SyntaxTree(path=file_path, text=source, tree=tree, lines=source.splitlines())

    def parse_file(self, file_path: str | Path) -> SyntaxTree:
        """Read and parse a file from disk.

        Raises:
            OSError: If the file cannot be read.
        """
        path = Path(file_path)
        source = path.read_text(encoding="utf-8-sig", errors="replace")
        return self.parse(source, str(path))
