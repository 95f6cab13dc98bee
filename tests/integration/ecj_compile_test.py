"""Integration tests that run a real ecj compiler.

Set ``JDT_BUILDER_ECJ_JAR`` (and ``JAVA_HOME`` or ``JDT_BUILDER_JAVA`` if
``java`` is not on the PATH) to enable them.
"""

from __future__ import annotations

import os
import shutil
import zipfile
from pathlib import Path

import pytest

from jdt_builder.archives.cache import ArchiveFileSystems
from jdt_builder.compiler.ecj import EcjCompiler, get_compiler
from jdt_builder.core.build import JdtJavaBuilder
from tests.conftest import make_source_jar

pytestmark = [
    pytest.mark.usefixtures("workspace"),
    pytest.mark.skipif(
        not os.getenv("JDT_BUILDER_ECJ_JAR"),
        reason="JDT_BUILDER_ECJ_JAR is not set",
    ),
]


@pytest.fixture
def compiler() -> EcjCompiler:
    ecj = get_compiler()
    if shutil.which(ecj.java) is None:
        pytest.skip(f"{ecj.java} is not available")
    return ecj


def _build(compiler: EcjCompiler, *args: str) -> tuple[bool, str]:
    with ArchiveFileSystems() as archives, JdtJavaBuilder(compiler, archives) as builder:
        result = builder.run(["--target_label", "//pkg:Foo", "--output", "bazel-out/pkg/Foo.jar", *args])
    return result.ok, result.output


def test_compiles_sources_and_source_jars(compiler: EcjCompiler) -> None:
    Path("pkg").mkdir()
    Path("pkg/Foo.java").write_text("package pkg; public class Foo { gen.Bar bar; }\n", encoding="utf-8")
    make_source_jar(Path("gen.srcjar"), {"gen/Bar.java": "package gen; public class Bar {}\n"})

    ok, output = _build(compiler, "--sources", "pkg/Foo.java", "--source_jars", "gen.srcjar")

    assert ok, output
    with zipfile.ZipFile("bazel-out/pkg/Foo.jar") as jar:
        assert {"pkg/Foo.class", "gen/Bar.class"} <= set(jar.namelist())


def test_reports_compile_errors(compiler: EcjCompiler) -> None:
    Path("pkg").mkdir()
    Path("pkg/Foo.java").write_text("package pkg; public class Foo { int x = }\n", encoding="utf-8")

    ok, output = _build(compiler, "--sources", "pkg/Foo.java")

    assert not ok
    assert "pkg/Foo.java" in output
    assert not Path("bazel-out/pkg/Foo.jar").exists()
