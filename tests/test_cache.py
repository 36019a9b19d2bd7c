"""Tests for the workspace cache."""

import threading
import time

from csnav.config import Config
from csnav.workspace import Workspace, WorkspaceCache


class CountingLoader:
    """Loader stub that records calls and is slow enough to race on."""

    def __init__(self, delay: float = 0.05):
        self.calls = []
        self.delay = delay
        self._lock = threading.Lock()

    def __call__(self, path: str, config: Config) -> Workspace:
        with self._lock:
            self.calls.append(path)
        time.sleep(self.delay)
        return Workspace(path=path, root=path)


class TestWorkspaceCache:
    """Load-once behavior of WorkspaceCache."""

    def test_second_get_returns_same_instance(self, tmp_path):
        loader = CountingLoader(delay=0)
        cache = WorkspaceCache(Config(), loader=loader)

        first = cache.get(str(tmp_path / "App.sln"))
        second = cache.get(str(tmp_path / "App.sln"))

        assert first is second
        assert len(loader.calls) == 1

    def test_concurrent_cold_gets_load_once(self, tmp_path):
        """Racing threads on an uncached path trigger a single load."""
        loader = CountingLoader()
        cache = WorkspaceCache(Config(), loader=loader)
        path = str(tmp_path / "App.sln")
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(cache.get(path))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(loader.calls) == 1
        assert len(results) == 8
        assert all(result is results[0] for result in results)

    def test_paths_normalized(self, tmp_path, monkeypatch):
        """Relative and absolute spellings of a path share one entry."""
        monkeypatch.chdir(tmp_path)
        loader = CountingLoader(delay=0)
        cache = WorkspaceCache(Config(), loader=loader)

        cache.get("App.sln")
        cache.get(str(tmp_path / "App.sln"))

        assert len(loader.calls) == 1
        assert str(tmp_path / "App.sln") in cache

    def test_invalidate_and_clear(self, tmp_path):
        loader = CountingLoader(delay=0)
        cache = WorkspaceCache(Config(), loader=loader)
        path = str(tmp_path / "App.sln")

        cache.get(path)
        assert cache.invalidate(path) is True
        assert cache.invalidate(path) is False

        cache.get(path)
        cache.get(str(tmp_path / "Other.sln"))
        assert len(cache) == 2
        assert len(loader.calls) == 3

        cache.clear()
        assert len(cache) == 0

    def test_loads_real_solution(self, sample_solution):
        cache = WorkspaceCache(Config())

        workspace = cache.get(str(sample_solution))

        assert [project.name for project in workspace.projects] == ["SampleProject", "SampleApp"]
        assert cache.get(str(sample_solution)) is workspace
