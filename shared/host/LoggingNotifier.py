from shared.helper.HelperConfig import HelperConfig
from shared.host.NotifierInterface import NotifierInterface


class LoggingNotifier(NotifierInterface):
    """Forwards user notifications to the application log."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()

    def notify(self, message: str, level: str = "info") -> None:
        if level == "error":
            self.logging.error(message)
        elif level == "warning":
            self.logging.warning(message)
        else:
            self.logging.info(message, color="cyan")


class MemoryNotifier(NotifierInterface):
    """Collects notifications, e.g. to hand them back in an API response."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        self.messages.append((level, message))
