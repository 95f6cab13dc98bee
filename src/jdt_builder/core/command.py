"""Assemble the ecj batch compiler command line."""

import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from jdt_builder.models import BuildOptions, StagingLayout

DEFAULT_JAVA_VERSION = "11"

# Bazel-only javacopts (Error Prone and -Werror overrides) that ecj rejects
_BAZEL_SPECIFIC_PREFIXES = ("-Werror:", "-Xep")


def is_bazel_specific_flag(opt: str) -> bool:
    return opt.startswith(_BAZEL_SPECIFIC_PREFIXES)


def remove_bazel_specific_flags(javacopts: Iterable[str]) -> list[str]:
    """Return the javacopts ecj understands, with source and target levels defaulted.

    ecj compiles for Java 1.5 unless told otherwise, so ``-target`` and
    ``-source`` default to Java 11 when neither ``--release`` nor ``-target``
    is given.
    """
    standard: list[str] = []
    has_source = has_target = has_release = False

    for opt in javacopts:
        if is_bazel_specific_flag(opt):
            continue
        lowered = opt.lower()
        if lowered == "-source":
            has_source = True
        elif lowered == "-target":
            has_target = True
        elif lowered == "--release":
            has_release = True
        standard.append(opt)

    if not has_release and not has_target:
        standard.extend(["-target", DEFAULT_JAVA_VERSION])
        if not has_source:
            standard.extend(["-source", DEFAULT_JAVA_VERSION])
    return standard


def _join_path(entries: Sequence[str]) -> str:
    return os.pathsep.join(entries)


def build_command_args(options: BuildOptions, layout: StagingLayout, sources: Sequence[str]) -> list[str]:
    args = remove_bazel_specific_flags(options.javacopts)
    # diagnostics of interest come through as errors
    args.append("-warn:none")
    args.extend(sources)
    args.extend(["-d", str(layout.class_dir)])
    args.extend(["-s", str(layout.source_gen_dir)])

    if options.processor_names:
        if options.jdt_debug:
            args.extend(["-XprintProcessorInfo", "-XprintRounds"])
        args.extend(["-processor", ",".join(options.processor_names)])
    if options.processor_path:
        processor_path = _join_path(options.processor_path)
        # ecj ignores -processorpath for release/target >= 9 and reads the module path instead
        args.extend(["-processorpath", processor_path])
        args.extend(["--processor-module-path", processor_path])

    prefs = options.eclipse_preferences_file
    if prefs is not None and Path(prefs).exists():
        args.extend(["-properties", prefs])

    args.append("-Xemacs")

    if options.use_direct_deps_only and options.direct_jars:
        args.extend(["-classpath", _join_path(options.direct_jars)])
    elif options.classpath:
        args.extend(["-classpath", _join_path(options.classpath)])
    return args


def build_command_line(options: BuildOptions, layout: StagingLayout, sources: Sequence[str]) -> str:
    """Return the ecj command line as a single space separated string."""
    return " ".join(build_command_args(options, layout, sources))


def write_command_line_file(layout: StagingLayout, command_line: str) -> Path:
    """Dump *command_line* one argument per line next to the staging directories."""
    path = layout.command_line_file
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(command_line.replace(" ", "\n"), encoding="utf-8")
    return path
