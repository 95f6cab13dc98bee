"""Tests for staging directory layout and reset."""

from __future__ import annotations

from pathlib import Path

import pytest

from jdt_builder.core.options import InvalidCommandLineError
from jdt_builder.core.staging import (
    create_output_directory,
    derive_layout,
    derive_output_directory,
    initialize_locations,
)
from jdt_builder.models import BuildOptions


def _options(**overrides: object) -> BuildOptions:
    return BuildOptions.model_validate({"target_label": "//pkg:Foo", "output_jar": "bazel-out/pkg/Foo.jar", **overrides})


class TestDeriveOutputDirectory:
    def test_sibling_of_output_jar(self) -> None:
        assert derive_output_directory("//pkg:Foo", "bazel-out/pkg/Foo.jar") == Path("bazel-out/pkg/_jdt/Foo")

    def test_uses_name_after_last_colon(self) -> None:
        root = derive_output_directory("@repo//a/b:c:lib", "out/lib.jar")
        assert root == Path("out/_jdt/lib")

    @pytest.mark.parametrize(
        ("label", "output", "message"),
        [
            (None, "Foo.jar", "--target_label is required"),
            ("//pkg:Foo", None, "--output is required"),
            ("//pkg/Foo", "Foo.jar", "canonical label"),
        ],
    )
    def test_invalid_configuration(self, label: str | None, output: str | None, message: str) -> None:
        with pytest.raises(InvalidCommandLineError, match=message):
            derive_output_directory(label, output)

    def test_layout_directories(self) -> None:
        layout = derive_layout(_options())
        root = Path("bazel-out/pkg/_jdt/Foo")
        assert layout.root == root
        assert layout.class_dir == root / "classes"
        assert layout.native_header_dir == root / "native_headers"
        assert layout.source_gen_dir == root / "sources"
        assert layout.source_jar_dir == root / "source_jars"
        assert layout.command_line_file == root / "jdt.commandline"


class TestCreateOutputDirectory:
    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b"
        create_output_directory(target)
        assert target.is_dir()

    def test_removes_stale_content(self, tmp_path: Path) -> None:
        target = tmp_path / "classes"
        (target / "old" / "pkg").mkdir(parents=True)
        (target / "old" / "pkg" / "Stale.class").write_bytes(b"stale")
        create_output_directory(target)
        assert target.is_dir()
        assert list(target.iterdir()) == []


@pytest.mark.usefixtures("workspace")
class TestInitializeLocations:
    def test_native_headers_only_when_requested(self) -> None:
        options = _options()
        layout = derive_layout(options)
        initialize_locations(options, layout)
        assert layout.class_dir.is_dir()
        assert layout.source_gen_dir.is_dir()
        assert layout.source_jar_dir.is_dir()
        assert not layout.native_header_dir.exists()

    def test_native_headers_created_when_requested(self) -> None:
        options = _options(native_header_output="bazel-out/pkg/Foo-native-header.jar")
        layout = derive_layout(options)
        initialize_locations(options, layout)
        assert layout.native_header_dir.is_dir()

    def test_reset_between_requests(self) -> None:
        options = _options()
        layout = derive_layout(options)
        initialize_locations(options, layout)
        (layout.class_dir / "Old.class").write_bytes(b"old")
        (layout.source_jar_dir / "lib" / "Old.java").parent.mkdir()
        initialize_locations(options, layout)
        assert list(layout.class_dir.iterdir()) == []
        assert list(layout.source_jar_dir.iterdir()) == []
