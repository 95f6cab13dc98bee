import logging
import os
import sys
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from jdt_builder.archives.cache import ArchiveFileSystems
from jdt_builder.compiler.ecj import get_compiler
from jdt_builder.core.build import JdtJavaBuilder
from jdt_builder.core.worker import REQUEST_ERRORS, run_persistent_worker

app = typer.Typer(
    name="jdt-builder",
    help="Compile Java sources for Bazel with the Eclipse compiler.",
    add_completion=False,
)
console = Console(stderr=True)


def _configure_logging() -> None:
    # stdout carries the worker protocol, logs go to stderr only
    logging.basicConfig(
        level=os.getenv("JDT_BUILDER_LOG_LEVEL", "WARNING").upper(),
        format="%(levelname)s: %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "help_option_names": ["--help"],
    },
)
def build(
    ctx: typer.Context,
    persistent_worker: Annotated[
        bool, typer.Option("--persistent_worker", help="Serve Bazel work requests on stdin/stdout.")
    ] = False,
) -> None:
    """Run one compile request from the given builder flags, or serve requests as a persistent worker."""
    _configure_logging()
    compiler = get_compiler()

    with ArchiveFileSystems() as archives:
        if persistent_worker:
            raise typer.Exit(run_persistent_worker(sys.stdin.buffer, sys.stdout.buffer, compiler, archives))

        try:
            with JdtJavaBuilder(compiler, archives) as builder:
                result = builder.run(ctx.args)
        except REQUEST_ERRORS as exc:
            console.print(f"[red]Build failed:[/red] {escape(f'{type(exc).__name__}: {exc}')}")
            raise typer.Exit(1) from exc

    typer.echo(result.output, err=True, nl=False)
    raise typer.Exit(0 if result.ok else 1)


def main() -> None:
    app()
