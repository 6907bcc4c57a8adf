"""Status-line message sink.

Collects fire-and-forget user-visible messages (echo output, invalid input,
evaluation failures). The most recent message is what the UI shows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

MAX_STATUS_MESSAGES = 100


@dataclass(frozen=True)
class StatusMessage:
    text: str
    error: bool = False


class StatusBar:
    """Bounded log of status messages with "last message" access."""

    def __init__(self, max_messages: int = MAX_STATUS_MESSAGES) -> None:
        self.max_messages = max(1, max_messages)
        self.messages: list[StatusMessage] = []

    def message(self, text: str, error: bool = False) -> None:
        if error:
            logger.info("status error: %s", text)
        else:
            logger.debug("status: %s", text)
        self.messages.append(StatusMessage(text, error))
        overflow = len(self.messages) - self.max_messages
        if overflow > 0:
            del self.messages[:overflow]

    def error(self, text: str) -> None:
        self.message(text, error=True)

    def last(self) -> str:
        """Return the text of the latest message, ``""`` when there is none."""
        return self.messages[-1].text if self.messages else ""

    def clear(self) -> None:
        self.messages.clear()
