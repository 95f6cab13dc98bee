from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Stamp:
    size: int
    mtime_ns: int


def _stamp(path: Path) -> _Stamp:
    stat = path.stat()
    return _Stamp(size=stat.st_size, mtime_ns=stat.st_mtime_ns)


class ArchiveFileSystems:
    """Read-only zip handles shared across compile requests.

    Implements the ``ArchiveCache`` protocol. A handle is kept open for the
    lifetime of the cache and reused whenever the same archive is extracted
    again, unless the archive changed on disk in the meantime.
    """

    def __init__(self) -> None:
        self._open: dict[Path, tuple[_Stamp, zipfile.ZipFile]] = {}

    def __enter__(self) -> ArchiveFileSystems:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __len__(self) -> int:
        return len(self._open)

    def open(self, path: str | Path) -> zipfile.ZipFile:
        key = Path(path).resolve()
        stamp = _stamp(key)
        cached = self._open.get(key)
        if cached is not None:
            cached_stamp, archive = cached
            if cached_stamp == stamp:
                return archive
            logger.debug("Archive %s changed on disk, reopening", key)
            archive.close()
        archive = zipfile.ZipFile(key)
        self._open[key] = (stamp, archive)
        return archive

    def release(self) -> None:
        for _, archive in self._open.values():
            archive.close()
        if self._open:
            logger.debug("Released %d archive handle(s)", len(self._open))
        self._open.clear()
