from abc import ABC, abstractmethod


class FileStoreInterface(ABC):
    """
    Storage of the note vault. Paths are vault-relative and use "/" as separator.
    """

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def create_folder(self, path: str) -> None:
        """Creates the folder and its parents. Must not fail if it already exists."""
        pass

    @abstractmethod
    def create(self, path: str, data: bytes) -> None:
        """
        Creates a new file.

        Raises:
            FileExistsError: If a file already exists at the path.
        """
        pass
