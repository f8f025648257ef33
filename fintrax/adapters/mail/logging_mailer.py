"""Mailer that records deliveries instead of contacting an SMTP server.

Used in development and tests. The body is kept in ``outbox`` for
inspection but never logged, since it contains one-time codes.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from fintrax.adapters.mail.base import AbstractMailer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SentMessage:
    to: str
    subject: str
    body: str


class LoggingMailer(AbstractMailer):
    def __init__(self, *, max_outbox: int = 100) -> None:
        self._max_outbox = max_outbox
        self._lock = threading.Lock()
        self.outbox: list[SentMessage] = []

    def send(self, to: str, subject: str, body: str) -> None:
        with self._lock:
            self.outbox.append(SentMessage(to=to, subject=subject, body=body))
            del self.outbox[: -self._max_outbox]

        logger.info("mail.sent", extra={"recipient": to, "subject": subject})

    def last_to(self, to: str) -> SentMessage | None:
        """Most recent message addressed to ``to``."""
        with self._lock:
            for message in reversed(self.outbox):
                if message.to == to:
                    return message
        return None
