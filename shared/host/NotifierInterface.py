from abc import ABC, abstractmethod


class NotifierInterface(ABC):
    """Sink for messages shown to the user."""

    @abstractmethod
    def notify(self, message: str, level: str = "info") -> None:
        """
        Args:
            message (str): Text shown to the user.
            level (str): "info", "warning" or "error".
        """
        pass
