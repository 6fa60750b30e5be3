import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Protocol, Set, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class AssetKind(str, Enum):
    ABSENT = "absent"
    FILE = "file"
    DIRECTORY = "directory"


class Host(Protocol):
    """Where directories and generated files end up.

    Implementations raise ``OSError`` when they cannot do what is asked.
    """

    index: List[str]

    def lookup(self, path: PathLike) -> AssetKind: ...

    def create_directory(self, parent: PathLike, name: str) -> None: ...

    def write_text_file(self, path: PathLike, contents: str) -> None: ...

    def refresh_index(self) -> None: ...


@dataclass(frozen=True)
class TemplateSource:
    name: str  # e.g. "SampleScript.cs"; the part after the first dot becomes the output extension
    text: str

    @classmethod
    def from_path(cls, path: PathLike) -> "TemplateSource":
        # Strip only the template suffix: "Foo.cs.txt" -> "Foo.cs"
        p = Path(path)
        return cls(name=p.stem, text=p.read_text(encoding="utf-8"))


class LocalHost:
    """Host on the local filesystem.

    The index lists only what this host created or wrote, relative to
    ``index_root``; pre-existing content is never walked.
    """

    def __init__(self, index_root: Optional[PathLike] = None) -> None:
        self.index_root = Path(index_root) if index_root is not None else None
        self.index: List[str] = []
        self._touched: Set[Path] = set()

    def lookup(self, path: PathLike) -> AssetKind:
        p = Path(path)
        if p.is_dir():
            return AssetKind.DIRECTORY
        if p.exists():
            return AssetKind.FILE
        return AssetKind.ABSENT

    def create_directory(self, parent: PathLike, name: str) -> None:
        path = Path(parent) / name
        path.mkdir(parents=True, exist_ok=True)
        self._touched.add(path)

    def write_text_file(self, path: PathLike, contents: str) -> None:
        Path(path).write_text(contents, encoding="utf-8")
        self._touched.add(Path(path))

    def _relative(self, path: Path) -> str:
        if self.index_root is not None and path.is_relative_to(self.index_root):
            return path.relative_to(self.index_root).as_posix()
        return path.as_posix()

    def refresh_index(self) -> None:
        self.index = sorted(self._relative(p) for p in self._touched)
        logger.debug("Indexed %d entries under %s", len(self.index), self.index_root)
