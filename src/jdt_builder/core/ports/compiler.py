from typing import Protocol, TextIO


class CompilerUnavailableError(OSError):
    """Raised when the compiler cannot be started at all."""


class Compiler(Protocol):
    def compile(self, command: str, stdout: TextIO, stderr: TextIO) -> bool: ...
