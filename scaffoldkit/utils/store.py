from pathlib import Path, PurePosixPath
from typing import Dict, List, Set

from ..generator.host import AssetKind, PathLike


def _key(path: PathLike) -> PurePosixPath:
    return PurePosixPath(Path(path).as_posix())


class InMemoryHost:
    """Host that keeps directories and files in memory. Nothing touches the disk.

    ``existing`` holds what was already there (see ``from_disk``); the index
    only lists what this host created or wrote.
    """

    def __init__(self, root: PathLike = "Assets"):
        self.root = _key(root)
        self.existing: Dict[PurePosixPath, AssetKind] = {self.root: AssetKind.DIRECTORY}
        self.directories: Set[PurePosixPath] = set()
        self.files: Dict[PurePosixPath, str] = {}
        self.index: List[str] = []
        self.refreshes = 0

    @classmethod
    def from_disk(cls, root: PathLike) -> "InMemoryHost":
        """Seed a host with the tree currently under ``root``, for dry runs."""
        host = cls(root)
        base = Path(root)
        if base.is_dir():
            for p in base.rglob("*"):
                host.existing[_key(p)] = AssetKind.DIRECTORY if p.is_dir() else AssetKind.FILE
        elif base.exists():
            host.existing[host.root] = AssetKind.FILE
        return host

    def lookup(self, path: PathLike) -> AssetKind:
        key = _key(path)
        if key in self.files:
            return AssetKind.FILE
        if key in self.directories:
            return AssetKind.DIRECTORY
        return self.existing.get(key, AssetKind.ABSENT)

    def _check_ancestors(self, key: PurePosixPath) -> None:
        for ancestor in key.parents:
            if self.lookup(ancestor) is AssetKind.FILE:
                raise NotADirectoryError(f"Not a directory: {ancestor}")

    def create_directory(self, parent: PathLike, name: str) -> None:
        key = _key(parent) / name
        if self.lookup(key) is AssetKind.FILE:
            raise FileExistsError(f"File exists: {key}")
        self._check_ancestors(key)
        for p in [key, *key.parents]:
            if (p == self.root or self.root in p.parents) and self.lookup(p) is AssetKind.ABSENT:
                self.directories.add(p)

    def write_text_file(self, path: PathLike, contents: str) -> None:
        key = _key(path)
        if self.lookup(key) is AssetKind.DIRECTORY:
            raise IsADirectoryError(f"Is a directory: {key}")
        self._check_ancestors(key)
        if self.lookup(key.parent) is AssetKind.ABSENT:
            raise FileNotFoundError(f"No such directory: {key.parent}")
        self.files[key] = contents

    def read_text_file(self, path: PathLike) -> str:
        return self.files[_key(path)]

    def refresh_index(self) -> None:
        self.refreshes += 1
        self.index = sorted(
            p.relative_to(self.root).as_posix()
            for p in self.directories | set(self.files)
            if self.root in p.parents
        )
