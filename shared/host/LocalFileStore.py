import os
from pathlib import Path

from shared.host.FileStoreInterface import FileStoreInterface


class LocalFileStore(FileStoreInterface):
    """
    File store mapping vault-relative paths onto a directory on disk.
    """

    def __init__(self, root: str | os.PathLike):
        self._root = Path(root).resolve()

    def _resolve(self, path: str) -> Path:
        resolved = (self._root / path.lstrip("/")).resolve()
        if resolved != self._root and self._root not in resolved.parents:
            raise ValueError(f"Path '{path}' points outside of the vault root {self._root}.")
        return resolved

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def create_folder(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)

    def create(self, path: str, data: bytes) -> None:
        # "xb" fails with FileExistsError when another writer got there first
        with open(self._resolve(path), "xb") as f:
            f.write(data)
