from __future__ import annotations

import logging
import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import TextIO

from jdt_builder.core.ports.compiler import CompilerUnavailableError

logger = logging.getLogger(__name__)


class EcjCompiler:
    """Run the Eclipse batch compiler in a JVM subprocess.

    Implements the ``Compiler`` protocol. The command line is handed to ecj
    through an ``@argfile`` so that long classpaths do not hit the OS limit on
    argument length.
    """

    def __init__(self, java: str, ecj_jar: str | Path | None, jvm_flags: list[str] | None = None) -> None:
        self.java = java
        self.ecj_jar = Path(ecj_jar) if ecj_jar else None
        self.jvm_flags = list(jvm_flags or [])

    def _base_command(self) -> list[str]:
        if self.ecj_jar is None:
            raise CompilerUnavailableError("JDT_BUILDER_ECJ_JAR is not set; cannot locate the ecj compiler")
        if not self.ecj_jar.is_file():
            raise CompilerUnavailableError(f"ecj compiler jar not found: {self.ecj_jar}")
        return [self.java, *self.jvm_flags, "-jar", str(self.ecj_jar)]

    def compile(self, command: str, stdout: TextIO, stderr: TextIO) -> bool:
        base = self._base_command()
        with tempfile.NamedTemporaryFile("w", suffix=".args", encoding="utf-8", delete=False) as argfile:
            # same whitespace tokenization ecj's BatchCompiler applies to a command string
            argfile.write("\n".join(command.split()))
        try:
            logger.debug("Running %s @%s", " ".join(base), argfile.name)
            try:
                result = subprocess.run(
                    [*base, f"@{argfile.name}"],
                    check=False,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
            except FileNotFoundError:
                raise CompilerUnavailableError(f"Java executable not found: {self.java}") from None
        finally:
            Path(argfile.name).unlink(missing_ok=True)

        stdout.write(result.stdout)
        stderr.write(result.stderr)
        return result.returncode == 0


def _default_java() -> str:
    java_home = os.getenv("JAVA_HOME")
    if java_home:
        return str(Path(java_home) / "bin" / "java")
    return "java"


def get_compiler() -> EcjCompiler:
    java = os.getenv("JDT_BUILDER_JAVA") or _default_java()
    ecj_jar = os.getenv("JDT_BUILDER_ECJ_JAR")
    jvm_flags = shlex.split(os.getenv("JDT_BUILDER_JVM_FLAGS", ""))
    return EcjCompiler(java, ecj_jar, jvm_flags)
