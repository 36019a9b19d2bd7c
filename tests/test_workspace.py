"""Tests for solution, project and directory loading."""

import os

import pytest

from csnav.errors import WorkspaceLoadError
from csnav.workspace import (
    find_project_by_name,
    load_workspace,
    relative_path,
    resolve_document_path,
)


class TestLoadWorkspace:
    """Loading from .sln, .csproj and plain directories."""

    def test_solution_projects_in_order(self, workspace):
        """Solution folders are skipped; projects keep solution order."""
        assert [project.name for project in workspace.projects] == ["SampleProject", "SampleApp"]

    def test_project_references_linked(self, workspace):
        """ProjectReference entries resolve to loaded projects."""
        sample, app = workspace.projects

        assert app.references == [sample]
        assert sample.references == []
        assert app.referenced_projects() == [sample]

    def test_documents_sorted_and_build_output_ignored(self, workspace):
        """Documents come in path order and obj/ is never scanned."""
        sample = workspace.projects[0]
        names = [relative_path(doc.path, sample.directory) for doc in sample.documents]

        assert names == [
            "Models/User.cs",
            "Program.cs",
            "Services/Application.cs",
            "Services/Calculator.cs",
            "Services/UserService.cs",
            "Steps/CalculatorSteps.cs",
        ]

    def test_load_single_project(self, sample_solution, config):
        """A .csproj path loads just that project."""
        workspace = load_workspace(str(sample_solution.parent / "SampleApp" / "SampleApp.csproj"), config)

        assert [project.name for project in workspace.projects] == ["SampleApp"]
        # The referenced project is not part of this workspace
        assert workspace.projects[0].references == []

    def test_load_directory_with_projects(self, sample_solution, config):
        """A directory containing project files loads each of them."""
        workspace = load_workspace(str(sample_solution.parent), config)

        assert sorted(project.name for project in workspace.projects) == ["SampleApp", "SampleProject"]

    def test_load_plain_directory(self, source_dir, config):
        """A directory without project files becomes one implicit project."""
        root = source_dir({"A.cs": "class A {}", "nested/B.cs": "class B {}", "readme.txt": "x"})

        workspace = load_workspace(str(root), config)

        assert len(workspace.projects) == 1
        assert workspace.projects[0].file_path is None
        assert [doc.name for doc in workspace.projects[0].documents] == ["A.cs", "B.cs"]

    def test_missing_path(self, tmp_path, config):
        """A path that does not exist is a load error."""
        with pytest.raises(WorkspaceLoadError, match="not found"):
            load_workspace(str(tmp_path / "missing.sln"), config)

    def test_unsupported_file(self, tmp_path, config):
        """Only .sln and .csproj files can be loaded directly."""
        other = tmp_path / "notes.txt"
        other.write_text("hello")

        with pytest.raises(WorkspaceLoadError, match="Unsupported"):
            load_workspace(str(other), config)

    def test_gitignore_respected(self, source_dir, config):
        """Files matched by .gitignore are not loaded."""
        root = source_dir({
            ".gitignore": "Generated/\n",
            "Keep.cs": "class Keep {}",
            "Generated/Skip.cs": "class Skip {}",
        })

        workspace = load_workspace(str(root), config)

        assert [doc.name for doc in workspace.projects[0].documents] == ["Keep.cs"]

    def test_symlink_outside_root(self, tmp_path, source_dir, config):
        """A linked source file is loaded under its link path."""
        shared = tmp_path / "shared" / "Shared.cs"
        shared.parent.mkdir()
        shared.write_text("class Shared {}", encoding="utf-8")
        root = source_dir({"Local.cs": "class Local {}"})
        (root / "Linked.cs").symlink_to(shared)

        workspace = load_workspace(str(root), config)
        documents = workspace.projects[0].documents

        assert [doc.name for doc in documents] == ["Linked.cs", "Local.cs"]
        assert relative_path(documents[0].path, workspace.root) == "Linked.cs"
        assert resolve_document_path(workspace, str(root / "Linked.cs")) is documents[0]


class TestWorkspaceLookups:
    """Document and project lookups used by structural queries."""

    def test_resolve_relative_to_root(self, workspace):
        document = resolve_document_path(workspace, "SampleProject/Services/Calculator.cs")

        assert document is not None
        assert document.name == "Calculator.cs"

    def test_resolve_absolute(self, workspace, sample_solution):
        absolute = sample_solution.parent / "SampleApp" / "Runner.cs"

        document = resolve_document_path(workspace, str(absolute))

        assert document is not None
        assert os.path.samefile(document.path, absolute)

    def test_resolve_by_file_name(self, workspace):
        """A bare file name matches case-insensitively."""
        document = resolve_document_path(workspace, "userservice.CS")

        assert document is not None
        assert document.name == "UserService.cs"

    def test_resolve_missing(self, workspace):
        assert resolve_document_path(workspace, "Nowhere/Missing.cs") is None

    def test_find_project_by_name(self, workspace):
        assert find_project_by_name(workspace, "sampleapp").name == "SampleApp"
        assert find_project_by_name(workspace, "Other") is None

    def test_relative_path_is_posix(self, tmp_path):
        nested = tmp_path / "a" / "b" / "C.cs"

        assert relative_path(str(nested), str(tmp_path)) == "a/b/C.cs"

    def test_documents_iterate_in_workspace_order(self, workspace):
        projects = [project.name for project, _ in workspace.documents()]

        assert projects.index("SampleApp") == projects.count("SampleProject")
