"""Bound compiler output to a UTF-8 byte budget.

Bazel fails the action when a worker's output is larger than
``--experimental_ui_max_stdouterr_bytes``. Compiler diagnostics quote source
lines, which may contain non-ASCII text, so the budget is measured in encoded
bytes rather than characters.
"""

CONTENT_TOO_LONG_WARNING = "\nWARNING: Output from JdtJavaBuilder was too long - truncated\n"

# Same default as Bazel's UiEventHandler
DEFAULT_MAX_STDOUTERR_BYTES = 1_048_576


def utf8_width(char: str) -> int:
    """Return the number of bytes *char* occupies in UTF-8."""
    code_point = ord(char)
    if code_point <= 0x7F:
        return 1
    if code_point <= 0x7FF:
        return 2
    if code_point <= 0xFFFF and not 0xD800 <= code_point <= 0xDFFF:
        return 3
    return 4


def utf8_length(text: str) -> int:
    return sum(utf8_width(ch) for ch in text)


def trim_output_to_size(max_bytes: int, header: str, stdout: str, stderr: str) -> str:
    """Combine *header*, *stdout* and *stderr* into at most *max_bytes* bytes.

    Stderr has priority: it is kept up to the budget and followed by
    :data:`CONTENT_TOO_LONG_WARNING` when cut. Stdout is placed in front of it
    only when it fits whole, otherwise it is dropped.
    """
    # space for the warning is reserved up front so the scan never backtracks
    budget = max_bytes - utf8_length(header) - utf8_length(CONTENT_TOO_LONG_WARNING)

    kept: list[str] = []
    consumed = 0
    truncated = False
    for ch in stderr:
        width = utf8_width(ch)
        if consumed + width < budget:
            consumed += width
            kept.append(ch)
        else:
            truncated = True
            break

    body = "".join(kept)
    if stdout and consumed + utf8_length(stdout) < budget:
        body = stdout + body

    text = header + body + (CONTENT_TOO_LONG_WARNING if truncated else "")
    if utf8_length(text) <= max_bytes:
        return text
    # not even the header and the warning fit
    return CONTENT_TOO_LONG_WARNING[: max(max_bytes, 0)]
