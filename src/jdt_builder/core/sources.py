import logging
import shutil
from pathlib import Path, PurePosixPath

from jdt_builder.core.ports.archives import ArchiveCache
from jdt_builder.models import BuildOptions

logger = logging.getLogger(__name__)

JAVA_SUFFIX = ".java"


class ArchiveExtractionError(OSError):
    """Raised when a source archive entry cannot be extracted."""


def _entry_target(output_dir: Path, entry_name: str) -> Path:
    relative = PurePosixPath(entry_name.lstrip("/"))
    if ".." in relative.parts:
        raise ArchiveExtractionError(f"Archive entry escapes the extraction directory: {entry_name}")
    return output_dir.joinpath(*relative.parts)


def extract_source_jar(source_jar: str, source_jar_dir: Path, archives: ArchiveCache) -> list[str]:
    """Copy every ``.java`` entry of *source_jar* below ``source_jar_dir/<jar name>``.

    Returns the paths of the copied files in archive order.
    """
    # Extract jars to <target name>/source_jars/<source jar name>
    output_dir = source_jar_dir / Path(source_jar).stem
    output_dir.mkdir(parents=True, exist_ok=True)

    extracted: list[str] = []
    archive = archives.open(source_jar)
    for info in archive.infolist():
        if info.is_dir() or not info.filename.endswith(JAVA_SUFFIX):
            continue
        target = _entry_target(output_dir, info.filename)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with archive.open(info) as src, target.open("xb") as dst:
                shutil.copyfileobj(src, dst)
        except FileExistsError:
            raise ArchiveExtractionError(f"Duplicate source {target} extracted from {source_jar}") from None
        extracted.append(str(target))

    logger.debug("Extracted %d source(s) from %s", len(extracted), source_jar)
    return extracted


def collect_sources(options: BuildOptions, source_jar_dir: Path, archives: ArchiveCache) -> list[str]:
    """Return the explicit sources followed by the sources extracted from source jars."""
    sources = list(options.source_files)
    for source_jar in options.source_jars:
        sources.extend(extract_source_jar(source_jar, source_jar_dir, archives))
    return sources
