"""
plugins/presence/pointer.py

Persisted ID of the status message.

Read once at startup and overwritten after every successful publish, so
a restarted bot edits its previous message instead of posting a new one.
Failures are logged, never raised: without a stored ID the publisher
rediscovers the message by scanning the channel.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


class MessagePointer:
    """
    Single message ID stored in a small text file.

    Args:
        path: File holding the ID.
    """

    def __init__(self, path: str):
        self.path = path

    def read(self) -> Optional[str]:
        """
        Load the stored ID.

        Returns:
            The ID, or None if the file is missing, empty or unreadable.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                value = f.read().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"Failed to read message pointer {self.path}: {e}")
            return None

        return value or None

    def write(self, message_id: str) -> bool:
        """
        Store an ID, readable and writable by the owner only.

        Returns:
            True if the ID was written.
        """
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(message_id)
        except OSError as e:
            logger.error(f"Failed to write message pointer {self.path}: {e}")
            return False

        return True
