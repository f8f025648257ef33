"""Mailer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractMailer(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> None:
        """Deliver a plain-text email.

        Raises:
            DeliveryAppError: If the message could not be handed off.
        """
        raise NotImplementedError
