from __future__ import annotations

import io
import logging
from collections.abc import Iterable
from pathlib import Path
from types import TracebackType

from jdt_builder.core.command import build_command_line, write_command_line_file
from jdt_builder.core.options import InvalidCommandLineError, parse_options
from jdt_builder.core.ports.archives import ArchiveCache
from jdt_builder.core.ports.compiler import Compiler
from jdt_builder.core.sources import collect_sources
from jdt_builder.core.staging import derive_layout, initialize_locations
from jdt_builder.core.trim import DEFAULT_MAX_STDOUTERR_BYTES, trim_output_to_size
from jdt_builder.jar.creator import JarCreator
from jdt_builder.models import BuildOptions, BuildResult, CompileOutcome, StagingLayout
from jdt_builder.proto.messages import Dependencies, Manifest

logger = logging.getLogger(__name__)

DEBUG_BANNER = "><>< :: Using JdtJavaBuilder :: ><><\n\n"
MAX_COMMAND_LINE_DEBUG = 2000


def _new_jar(path: str, options: BuildOptions) -> JarCreator:
    jar = JarCreator(path)
    jar.compress = options.compress_jar
    return jar


def write_output(layout: StagingLayout, options: BuildOptions) -> None:
    """Write the class output jar."""
    jar = _new_jar(options.output_jar, options)
    jar.add_directory(layout.class_dir)
    jar.execute()


def write_native_header_output(layout: StagingLayout, options: BuildOptions) -> None:
    if options.native_header_output is None:
        return
    jar = _new_jar(options.native_header_output, options)
    try:
        jar.add_directory(layout.native_header_dir)
    finally:
        # Bazel expects the declared output even when the headers are missing
        jar.execute()


def write_generated_source_output(layout: StagingLayout, options: BuildOptions) -> None:
    """Write a jar with the sources generated by annotation processors."""
    if options.generated_sources_output_jar is None:
        return
    jar = _new_jar(options.generated_sources_output_jar, options)
    jar.add_directory(layout.source_gen_dir)
    jar.execute()


def write_deps_proto(options: BuildOptions, ok: bool) -> None:
    # ecj does not report per-class dependencies, Bazel only needs the file to exist
    if options.output_deps_proto is None:
        return
    deps = Dependencies(rule_label=options.target_label, success=ok)
    Path(options.output_deps_proto).write_bytes(deps.SerializeToString())


def write_manifest_proto(options: BuildOptions) -> None:
    if options.manifest_proto_path is None:
        return
    Path(options.manifest_proto_path).write_bytes(Manifest().SerializeToString())


class JdtJavaBuilder:
    """Run one compile request: stage directories, compile, package outputs."""

    def __init__(self, compiler: Compiler, archives: ArchiveCache) -> None:
        self.compiler = compiler
        self.archives = archives

    def __enter__(self) -> JdtJavaBuilder:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release per-request resources. Archive handles belong to the cache owner."""

    def run(self, args: Iterable[str]) -> BuildResult:
        try:
            options = parse_options(args)
        except InvalidCommandLineError as exc:
            return BuildResult(ok=False, output=str(exc))
        return self.build(options)

    def build(self, options: BuildOptions) -> BuildResult:
        layout = derive_layout(options)
        initialize_locations(options, layout)
        sources = collect_sources(options, layout.source_jar_dir, self.archives)

        header = DEBUG_BANNER if options.jdt_debug else ""
        if not sources:
            logger.debug("No sources for %s, skipping compilation", options.target_label)
            outcome = CompileOutcome(ok=True, stdout="", stderr="")
        else:
            command_line = build_command_line(options, layout, sources)
            write_command_line_file(layout, command_line)
            outcome = self._compile(command_line)
            if options.jdt_debug:
                header += "JDT command-line options: "
                if len(command_line) > MAX_COMMAND_LINE_DEBUG:
                    header += command_line[:MAX_COMMAND_LINE_DEBUG] + " ..."
                else:
                    header += command_line

        logger.info(
            "Compiled %s (%d source(s)): %s", options.target_label, len(sources), "ok" if outcome.ok else "failed"
        )

        if outcome.ok:
            write_output(layout, options)
            write_native_header_output(layout, options)
        write_generated_source_output(layout, options)
        write_deps_proto(options, outcome.ok)
        write_manifest_proto(options)

        max_bytes = options.max_stdouterr_bytes
        if max_bytes is None:
            max_bytes = DEFAULT_MAX_STDOUTERR_BYTES
        output = trim_output_to_size(max_bytes, header, outcome.stdout, outcome.stderr)
        return BuildResult(ok=outcome.ok, output=output)

    def _compile(self, command_line: str) -> CompileOutcome:
        stdout = io.StringIO()
        stderr = io.StringIO()
        ok = self.compiler.compile(command_line, stdout, stderr)
        out = stdout.getvalue()
        err = stderr.getvalue()
        return CompileOutcome(
            ok=ok,
            stdout=out + "\n" if out else out,
            stderr=err + "\n" if err else err,
        )
