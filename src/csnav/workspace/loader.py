"""Load solutions, project files and plain directories into a Workspace."""

import logging
import os
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional

from ..config import Config
from ..errors import WorkspaceLoadError
from ..frontend.parser import CSharpParser
from .discovery import FileDiscovery
from .models import Document, Project, Workspace

logger = logging.getLogger(__name__)

# Project("{type-guid}") = "Name", "relative\path.csproj", "{project-guid}"
SLN_PROJECT_PATTERN = re.compile(
    r'^Project\("\{(?P<type>[^}]*)\}"\)\s*=\s*"(?P<name>[^"]*)"\s*,\s*"(?P<path>[^"]*)"',
    re.MULTILINE,
)

SOLUTION_FOLDER_TYPE = "2150E333-8FDC-42A3-9474-1A3956D46DE8"

PROJECT_EXTENSIONS = (".csproj",)


def load_workspace(path: str, config: Optional[Config] = None) -> Workspace:
    """Load a workspace from a .sln file, a .csproj file or a directory.

    Args:
        path: Solution, project or directory path
        config: Discovery settings; defaults to Config.from_env()

    Returns:
        Workspace with projects in solution order

    Raises:
        WorkspaceLoadError: If the path does not exist or the solution cannot be read
    """
    config = config or Config.from_env()
    target = Path(path).resolve()
    if not target.exists():
        raise WorkspaceLoadError(f"Solution path not found: {path}", query=path)

    parser = CSharpParser()
    discovery = FileDiscovery(config)

    if target.is_dir():
        root = target
        project_files = discovery.find_files(target, PROJECT_EXTENSIONS)
        if project_files:
            projects = [_load_project(file, file.stem, parser, discovery, config) for file in project_files]
        else:
            documents = [
                Document(path=str(file), parser=parser)
                for file in discovery.find_files(target, config.source_extensions)
            ]
            projects = [Project(name=target.name, file_path=None, documents=documents)]
    elif target.suffix.lower() == ".sln":
        root = target.parent
        projects = [
            _load_project(file, name, parser, discovery, config)
            for name, file in _solution_entries(target)
        ]
    elif target.suffix.lower() in PROJECT_EXTENSIONS:
        root = target.parent
        projects = [_load_project(target, target.stem, parser, discovery, config)]
    else:
        raise WorkspaceLoadError(f"Unsupported workspace path: {path}", query=path)

    _link_references(projects)
    logger.info("Loaded workspace %s: %d projects", target, len(projects))
    return Workspace(path=str(target), root=str(root), projects=projects)


def _solution_entries(solution: Path) -> List[tuple]:
    try:
        content = solution.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        raise WorkspaceLoadError(f"Cannot read solution {solution}: {exc}", query=str(solution)) from exc

    entries = []
    for match in SLN_PROJECT_PATTERN.finditer(content):
        if match.group("type").upper() == SOLUTION_FOLDER_TYPE:
            continue
        relative = match.group("path").replace("\\", "/")
        if not relative.lower().endswith(PROJECT_EXTENSIONS):
            continue
        project_file = (solution.parent / relative).resolve()
        if not project_file.exists():
            logger.debug("Skipping missing project %s", project_file)
            continue
        entries.append((match.group("name"), project_file))
    return entries


def _load_project(
    project_file: Path, name: str, parser: CSharpParser, discovery: FileDiscovery, config: Config
) -> Project:
    project_dir = project_file.parent
    documents = [
        Document(path=str(file), parser=parser)
        for file in discovery.find_files(project_dir, config.source_extensions)
    ]
    project = Project(
        name=name,
        file_path=str(project_file),
        documents=documents,
        reference_paths=_project_references(project_file),
    )
    logger.debug("Project %s: %d documents", name, len(documents))
    return project


def _project_references(project_file: Path) -> List[str]:
    """Absolute paths of <ProjectReference Include="..."/> entries."""
    try:
        tree = ET.parse(project_file)
    except (ET.ParseError, OSError) as exc:
        logger.debug("Cannot read project references from %s: %s", project_file, exc)
        return []

    references = []
    for element in tree.iter():
        tag = element.tag.rsplit("}", 1)[-1]
        if tag != "ProjectReference":
            continue
        include = element.get("Include")
        if include:
            references.append(str((project_file.parent / include.replace("\\", "/")).resolve()))
    return references


def _link_references(projects: List[Project]) -> None:
    by_path: Dict[str, Project] = {
        os.path.normcase(project.file_path): project for project in projects if project.file_path
    }
    for project in projects:
        for reference in project.reference_paths:
            target = by_path.get(os.path.normcase(reference))
            if target is not None and target is not project:
                project.references.append(target)


def resolve_document_path(workspace: Workspace, file_path: str) -> Optional[Document]:
    """Find a workspace document for a path given by the caller.

    Tries the path as given when absolute, then relative to the workspace
    root, then relative to the current directory, and finally falls back to
    a case-insensitive file-name match across all documents.
    """
    candidate = Path(file_path)
    if candidate.is_absolute() and candidate.is_file():
        absolute = candidate
    elif (Path(workspace.root) / file_path).is_file():
        absolute = Path(workspace.root) / file_path
    else:
        absolute = Path(file_path)

    # Symlinked documents keep their link path
    wanted = {
        os.path.normcase(os.path.abspath(absolute)).lower(),
        os.path.normcase(str(absolute.resolve())).lower(),
    }
    for _, document in workspace.documents():
        if os.path.normcase(document.path).lower() in wanted:
            return document

    file_name = candidate.name.lower()
    for _, document in workspace.documents():
        if document.name.lower() == file_name:
            return document
    return None


def find_project_by_name(workspace: Workspace, name: str) -> Optional[Project]:
    """Project whose name or project-file stem equals name, case-insensitively."""
    lowered = name.lower()
    for project in workspace.projects:
        if project.name.lower() == lowered:
            return project
        if project.file_path and Path(project.file_path).stem.lower() == lowered:
            return project
    return None


def relative_path(absolute: str, workspace_root: str) -> str:
    """Path relative to the workspace root, with forward slashes."""
    try:
        return Path(os.path.relpath(absolute, workspace_root)).as_posix()
    except ValueError:
        # Different drive on Windows
        return Path(absolute).as_posix()
