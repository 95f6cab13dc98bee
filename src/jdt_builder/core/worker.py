"""Bazel persistent worker loop.

Requests and responses are length-delimited protobuf messages on stdin and
stdout. Requests are handled strictly one at a time.
"""

import logging
import zipfile
from typing import Any, BinaryIO

from google.protobuf import proto
from google.protobuf.message import DecodeError

from jdt_builder.core.build import JdtJavaBuilder
from jdt_builder.core.ports.archives import ArchiveCache
from jdt_builder.core.ports.compiler import Compiler
from jdt_builder.models import BuildResult
from jdt_builder.proto.messages import WorkRequest, WorkResponse

logger = logging.getLogger(__name__)

# failures that abort the current request but leave the worker running;
# ValueError covers paths with NUL bytes
REQUEST_ERRORS = (OSError, ValueError, zipfile.BadZipFile)


def handle_request(request: Any, compiler: Compiler, archives: ArchiveCache) -> BuildResult:
    if request.verbosity > 0:
        logger.info("Request %d arguments: %s", request.request_id, " ".join(request.arguments))
    try:
        with JdtJavaBuilder(compiler, archives) as builder:
            return builder.run(list(request.arguments))
    except REQUEST_ERRORS as exc:
        logger.exception("Request %d failed", request.request_id)
        return BuildResult(ok=False, output=f"{type(exc).__name__}: {exc}\n")


def write_response(stream: BinaryIO, request: Any, result: BuildResult) -> None:
    response = WorkResponse(
        output=result.output,
        exit_code=0 if result.ok else 1,
        request_id=request.request_id,
    )
    proto.serialize_length_prefixed(response, stream)
    stream.flush()


def run_persistent_worker(
    stdin: BinaryIO,
    stdout: BinaryIO,
    compiler: Compiler,
    archives: ArchiveCache,
) -> int:
    """Serve work requests until end of input. Returns the process exit code."""
    logger.info("Persistent worker started")
    while True:
        try:
            request = proto.parse_length_prefixed(WorkRequest, stdin)
        except (OSError, DecodeError, ValueError):
            logger.exception("Failed to read work request")
            return 1
        if request is None:
            logger.info("Input closed, persistent worker exiting")
            return 0

        # handle_request closes the builder before returning: Bazel starts
        # cleaning up the working tree as soon as it reads the response
        result = handle_request(request, compiler, archives)
        try:
            write_response(stdout, request, result)
        except (OSError, ValueError):
            logger.exception("Failed to write work response")
            return 1
