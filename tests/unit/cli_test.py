"""Tests for the jdt-builder command line."""

from __future__ import annotations

import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from jdt_builder.cli.app import app
from tests.conftest import FakeCompiler

runner = CliRunner()

pytestmark = pytest.mark.usefixtures("workspace")


def test_help_flag() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output
    assert "--persistent_worker" in result.output


def test_one_shot_build() -> None:
    Path("pkg").mkdir()
    Path("pkg/Foo.java").write_text("package pkg; class Foo {}", encoding="utf-8")
    args = ["--target_label", "//pkg:Foo", "--output", "out/Foo.jar", "--sources", "pkg/Foo.java"]

    with patch("jdt_builder.cli.app.get_compiler", return_value=FakeCompiler()):
        result = runner.invoke(app, args)

    assert result.exit_code == 0
    with zipfile.ZipFile("out/Foo.jar") as jar:
        assert "Foo.class" in jar.namelist()


def test_one_shot_compile_error_exits_nonzero() -> None:
    Path("Foo.java").write_text("class Foo {", encoding="utf-8")
    compiler = FakeCompiler(ok=False, stderr="Foo.java:1: error: reached end of file")
    args = ["--target_label", "//pkg:Foo", "--output", "out/Foo.jar", "Foo.java"]

    with patch("jdt_builder.cli.app.get_compiler", return_value=compiler):
        result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert "reached end of file" in result.output


def test_missing_label_reports_error() -> None:
    with patch("jdt_builder.cli.app.get_compiler", return_value=FakeCompiler()):
        result = runner.invoke(app, ["--output", "out/Foo.jar"])

    assert result.exit_code == 1
    assert "--target_label is required" in result.output


def test_unreadable_source_jar_reports_failure() -> None:
    Path("broken.srcjar").write_text("not a zip", encoding="utf-8")
    args = ["--target_label", "//pkg:Foo", "--output", "out/Foo.jar", "--source_jars", "broken.srcjar"]

    with patch("jdt_builder.cli.app.get_compiler", return_value=FakeCompiler()):
        result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert "Build failed" in result.output
    assert "BadZipFile" in result.output


def test_persistent_worker_exits_on_empty_input() -> None:
    with patch("jdt_builder.cli.app.get_compiler", return_value=FakeCompiler()):
        result = runner.invoke(app, ["--persistent_worker"], input=b"")

    assert result.exit_code == 0
