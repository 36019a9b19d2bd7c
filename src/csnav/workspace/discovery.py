"""File discovery for projects and feature files."""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Set

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

from ..config import Config

logger = logging.getLogger(__name__)


class FileDiscovery:
    """Walks a directory tree and collects files by extension."""

    def __init__(self, config: Config):
        """Initialize discovery with configuration.

        Args:
            config: Application configuration with ignored_dirs, max_file_size
        """
        self.config = config
        self.ignored_dirs: Set[str] = {entry.lower() for entry in config.ignored_dirs}

    def find_files(self, root: Path, extensions: Iterable[str]) -> List[Path]:
        """Collect files under root with one of the given extensions.

        Args:
            root: Directory to walk
            extensions: File suffixes to keep, e.g. [".cs"]

        Returns:
            Absolute paths sorted by their posix form relative to root.
            Symlinked files keep their link path under root.
        """
        root = root.resolve()
        wanted = {ext.lower() for ext in extensions}
        gitignore_spec = self._load_gitignore(root)
        found: List[Path] = []

        for current, dirs, filenames in os.walk(root):
            current_path = Path(current)

            # Prune directories before descending further
            dirs[:] = sorted(
                directory for directory in dirs
                if not self._should_ignore(current_path / directory, root, gitignore_spec)
            )

            for filename in filenames:
                if Path(filename).suffix.lower() not in wanted:
                    continue
                file_path = current_path / filename
                if self._should_ignore(file_path, root, gitignore_spec):
                    continue
                found.append(file_path)

        return sorted(found, key=lambda path: path.relative_to(root).as_posix().lower())

    def _should_ignore(self, path: Path, root: Path, gitignore_spec: PathSpec | None = None) -> bool:
        """Check if path should be ignored.

        Args:
            path: Path to check
            root: Walk root

        Returns:
            True if path should be ignored
        """
        rel_path = path.relative_to(root)
        for part in rel_path.parts:
            if part.lower() in self.ignored_dirs:
                return True

        if gitignore_spec:
            candidate = rel_path.as_posix() + ("/" if path.is_dir() else "")
            if gitignore_spec.match_file(candidate):
                return True

        if path.is_file():
            try:
                if path.stat().st_size > self.config.max_file_size:
                    logger.debug("Skipping %s: larger than %d bytes", path, self.config.max_file_size)
                    return True
            except OSError:
                return True

        return False

    def _load_gitignore(self, root: Path) -> PathSpec | None:
        """Load .gitignore patterns if present."""
        gitignore_path = root / ".gitignore"
        if not gitignore_path.exists():
            return None

        try:
            patterns = gitignore_path.read_text().splitlines()
        except OSError:
            return None

        if not patterns:
            return None

        return PathSpec.from_lines(GitWildMatchPattern, patterns)
