"""Shared fixtures and helpers for tests."""

import zipfile
from collections.abc import Generator
from pathlib import Path
from typing import TextIO

import pytest

from jdt_builder.archives.cache import ArchiveFileSystems

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# FakeCompiler: stands in for ecj in orchestration tests
# ---------------------------------------------------------------------------


class FakeCompiler:
    """Records command lines and writes one ``.class`` file per source into ``-d``."""

    def __init__(self, ok: bool = True, stdout: str = "", stderr: str = "") -> None:
        self.ok = ok
        self.stdout = stdout
        self.stderr = stderr
        self.commands: list[str] = []

    def compile(self, command: str, stdout: TextIO, stderr: TextIO) -> bool:
        self.commands.append(command)
        args = command.split()
        class_dir = Path(args[args.index("-d") + 1])
        if self.ok:
            for arg in args:
                if arg.endswith(".java"):
                    (class_dir / (Path(arg).stem + ".class")).write_bytes(b"\xca\xfe\xba\xbe")
        stdout.write(self.stdout)
        stderr.write(self.stderr)
        return self.ok


def make_source_jar(path: Path, entries: dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as jar:
        for name, content in entries.items():
            jar.writestr(name, content)
    return path


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def archives() -> Generator[ArchiveFileSystems, None, None]:
    cache = ArchiveFileSystems()
    yield cache
    cache.release()


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory, like a Bazel execroot."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
