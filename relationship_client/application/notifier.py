"""
User notification capability injected into the mutation coordinator
"""
from abc import ABC, abstractmethod
import logging


class INotifier(ABC):
    """Shows short user-visible notices (toasts)"""

    @abstractmethod
    def success(self, message: str) -> None:
        """Report a completed action"""
        pass

    @abstractmethod
    def warning(self, message: str) -> None:
        """Report an action that was refused locally"""
        pass

    @abstractmethod
    def error(self, message: str) -> None:
        """Report a failed action"""
        pass


class LoggingNotifier(INotifier):
    """Notifier that writes notices to a logger, for headless use"""

    def __init__(self, name: str = "relationship_client.notices"):
        self.logger = logging.getLogger(name)

    def success(self, message: str) -> None:
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)
