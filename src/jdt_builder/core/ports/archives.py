import zipfile
from pathlib import Path
from typing import Protocol


class ArchiveCache(Protocol):
    def open(self, path: str | Path) -> zipfile.ZipFile: ...

    def release(self) -> None: ...
