"""Parse the builder command line into :class:`BuildOptions`.

Multi-valued flags take every following argument up to the next ``--`` flag.
``--javacopts`` is the exception: compiler flags may themselves start with
``--`` (``--release``), so its values run until a bare ``--`` terminator or the
next flag this parser recognizes. Arguments of the form ``@path`` are replaced
by the lines of that parameter file.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from jdt_builder.models import BuildOptions

logger = logging.getLogger(__name__)

_LIST_FLAGS = {
    "--sources": "source_files",
    "--source_files": "source_files",
    "--source_jars": "source_jars",
    "--classpath": "classpath",
    "--direct_dependencies": "direct_jars",
    "--processors": "processor_names",
    "--processorpath": "processor_path",
}

_VALUE_FLAGS = {
    "--target_label": "target_label",
    "--output": "output_jar",
    "--native_header_output": "native_header_output",
    "--generated_sources_output": "generated_sources_output_jar",
    "--output_deps_proto": "output_deps_proto",
    "--output_manifest_proto": "manifest_proto_path",
    "--eclipse_preferences_file": "eclipse_preferences_file",
    "--max_stdouterr_bytes": "max_stdouterr_bytes",
}

_BOOL_FLAGS = {
    "--compress_jar": "compress_jar",
    "--use_direct_deps_only": "use_direct_deps_only",
    "--jdt_debug": "jdt_debug",
}

_JAVACOPTS_FLAG = "--javacopts"
_TERMINATOR = "--"

_KNOWN_FLAGS = frozenset({*_LIST_FLAGS, *_VALUE_FLAGS, *_BOOL_FLAGS, _JAVACOPTS_FLAG})

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


class InvalidCommandLineError(ValueError):
    """Raised when the builder flags are missing or malformed."""


def expand_param_files(args: Iterable[str]) -> list[str]:
    """Replace every ``@file`` argument with the lines of that file, recursively."""
    expanded: list[str] = []
    for arg in args:
        if arg.startswith("@"):
            path = Path(arg[1:])
            try:
                lines = path.read_text(encoding="utf-8").splitlines()
            except FileNotFoundError:
                raise InvalidCommandLineError(f"Parameter file not found: {path}") from None
            except UnicodeDecodeError as exc:
                raise InvalidCommandLineError(f"Parameter file {path} is not valid UTF-8: {exc.reason}") from None
            expanded.extend(expand_param_files(lines))
        else:
            expanded.append(arg)
    return expanded


def _is_flag(arg: str) -> bool:
    return arg.startswith("--") and arg != _TERMINATOR


def _split_inline(arg: str) -> tuple[str, str | None]:
    if _is_flag(arg) and "=" in arg:
        flag, value = arg.split("=", 1)
        return flag, value
    return arg, None


def _parse_bool(flag: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise InvalidCommandLineError(f"{flag} expects true or false, got '{value}'")


class _ArgReader:
    def __init__(self, args: list[str]) -> None:
        self._args = args
        self._pos = 0

    def __iter__(self) -> Iterator[str]:
        while self._pos < len(self._args):
            arg = self._args[self._pos]
            self._pos += 1
            yield arg

    def peek(self) -> str | None:
        if self._pos < len(self._args):
            return self._args[self._pos]
        return None

    def skip(self) -> None:
        self._pos += 1

    def take_values(self) -> list[str]:
        values: list[str] = []
        while (arg := self.peek()) is not None and not _is_flag(arg):
            if arg == _TERMINATOR:
                self.skip()
                break
            values.append(arg)
            self.skip()
        return values

    def take_javacopts(self) -> list[str]:
        values: list[str] = []
        while (arg := self.peek()) is not None:
            if arg == _TERMINATOR:
                self.skip()
                break
            if _split_inline(arg)[0] in _KNOWN_FLAGS:
                break
            values.append(arg)
            self.skip()
        return values


def parse_options(args: Iterable[str]) -> BuildOptions:
    """Parse builder arguments, raising :class:`InvalidCommandLineError` on bad input."""
    reader = _ArgReader(expand_param_files(args))
    fields: dict[str, object] = {}
    lists: dict[str, list[str]] = {}

    for raw in reader:
        flag, inline = _split_inline(raw)
        if flag == _JAVACOPTS_FLAG:
            lists.setdefault("javacopts", []).extend(reader.take_javacopts())
        elif flag in _LIST_FLAGS:
            values = [inline] if inline is not None else reader.take_values()
            lists.setdefault(_LIST_FLAGS[flag], []).extend(values)
        elif flag in _VALUE_FLAGS:
            if inline is not None:
                value = inline
            else:
                nxt = reader.peek()
                if nxt is None or _is_flag(nxt):
                    raise InvalidCommandLineError(f"{flag} requires a value")
                reader.skip()
                value = nxt
            fields[_VALUE_FLAGS[flag]] = value
        elif flag in _BOOL_FLAGS:
            if inline is not None:
                fields[_BOOL_FLAGS[flag]] = _parse_bool(flag, inline)
            elif (nxt := reader.peek()) is not None and nxt.lower() in _TRUE_VALUES | _FALSE_VALUES:
                reader.skip()
                fields[_BOOL_FLAGS[flag]] = _parse_bool(flag, nxt)
            else:
                fields[_BOOL_FLAGS[flag]] = True
        elif _is_flag(flag):
            skipped = reader.take_values() if inline is None else [inline]
            logger.debug("Ignoring unsupported flag %s (%d value(s))", flag, len(skipped))
        else:
            # positional arguments are source files
            lists.setdefault("source_files", []).append(raw)

    return _build(fields, lists)


def _build(fields: dict[str, object], lists: dict[str, list[str]]) -> BuildOptions:
    label = fields.get("target_label")
    if label is None:
        raise InvalidCommandLineError("--target_label is required")
    if fields.get("output_jar") is None:
        raise InvalidCommandLineError("--output is required")
    if ":" not in str(label):
        raise InvalidCommandLineError("--target_label must be a canonical label (containing a `:`)")

    max_bytes = fields.pop("max_stdouterr_bytes", None)
    if max_bytes is not None:
        try:
            fields["max_stdouterr_bytes"] = int(str(max_bytes))
        except ValueError:
            raise InvalidCommandLineError(f"--max_stdouterr_bytes expects an integer, got '{max_bytes}'") from None

    return BuildOptions.model_validate({**fields, **lists})
