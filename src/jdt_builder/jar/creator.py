from __future__ import annotations

import logging
import zipfile
from pathlib import Path

logger = logging.getLogger(__name__)

MANIFEST_NAME = "META-INF/MANIFEST.MF"
MANIFEST_DIR = "META-INF/"

# Fixed entry time for reproducible jars, as used by Bazel's JarHelper
DEFAULT_TIMESTAMP = (2010, 1, 1, 0, 0, 0)
# Class files get a later time so they never look older than their sources
CLASS_TIMESTAMP = (2010, 1, 1, 0, 0, 2)


def _manifest_content() -> bytes:
    return b"Manifest-Version: 1.0\r\nCreated-By: jdt-builder\r\n\r\n"


class JarCreator:
    """Write the contents of one or more directories into a jar file.

    Entries carry fixed timestamps so that the same inputs always give a
    byte-identical jar.
    """

    def __init__(self, jar_path: str | Path) -> None:
        self.jar_path = Path(jar_path)
        self.compress = False
        self._entries: dict[str, Path | None] = {}

    def add_directory(self, directory: str | Path) -> None:
        """Queue every directory and file below *directory*, relative to it."""
        root = Path(directory)
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")
        for path in sorted(root.rglob("*")):
            name = path.relative_to(root).as_posix()
            if path.is_dir():
                self._entries[name + "/"] = None
            else:
                self._entries[name] = path

    def _zip_info(self, name: str) -> zipfile.ZipInfo:
        date_time = CLASS_TIMESTAMP if name.endswith(".class") else DEFAULT_TIMESTAMP
        info = zipfile.ZipInfo(name, date_time=date_time)
        info.compress_type = zipfile.ZIP_DEFLATED if self.compress and not name.endswith("/") else zipfile.ZIP_STORED
        if name.endswith("/"):
            info.external_attr = (0o40755 << 16) | 0x10
        else:
            info.external_attr = 0o100644 << 16
        return info

    def execute(self) -> None:
        """Write the jar, replacing any existing file."""
        self.jar_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(self.jar_path, "w") as jar:
            jar.writestr(self._zip_info(MANIFEST_DIR), b"")
            jar.writestr(self._zip_info(MANIFEST_NAME), _manifest_content())
            for name in sorted(self._entries):
                if name in (MANIFEST_DIR, MANIFEST_NAME):
                    continue
                source = self._entries[name]
                data = b"" if source is None else source.read_bytes()
                jar.writestr(self._zip_info(name), data)
        logger.debug("Wrote %s with %d entries", self.jar_path, len(self._entries))
