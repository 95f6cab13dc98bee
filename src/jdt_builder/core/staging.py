import shutil
from pathlib import Path

from jdt_builder.core.options import InvalidCommandLineError
from jdt_builder.models import BuildOptions, StagingLayout

STAGING_DIR_NAME = "_jdt"


def derive_output_directory(label: str | None, output_jar: str | None) -> Path:
    """Return ``<output jar dir>/_jdt/<target name>`` for the given label."""
    if label is None:
        raise InvalidCommandLineError("--target_label is required")
    if output_jar is None:
        raise InvalidCommandLineError("--output is required")
    if ":" not in label:
        raise InvalidCommandLineError("--target_label must be a canonical label (containing a `:`)")

    base = label[label.rindex(":") + 1 :]
    return Path(output_jar).parent / STAGING_DIR_NAME / base


def derive_layout(options: BuildOptions) -> StagingLayout:
    root = derive_output_directory(options.target_label, options.output_jar)
    return StagingLayout(
        root=root,
        class_dir=root / "classes",
        native_header_dir=root / "native_headers",
        source_gen_dir=root / "sources",
        source_jar_dir=root / "source_jars",
    )


def create_output_directory(directory: Path) -> None:
    """Delete *directory* if present and create it again, empty."""
    if directory.exists():
        shutil.rmtree(directory)
    directory.mkdir(parents=True)


def initialize_locations(options: BuildOptions, layout: StagingLayout) -> None:
    create_output_directory(layout.source_gen_dir)
    if options.native_header_output is not None:
        create_output_directory(layout.native_header_dir)
    create_output_directory(layout.class_dir)
    create_output_directory(layout.source_jar_dir)
