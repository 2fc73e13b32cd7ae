"""Notification channels.

Delivery is simulated: e-mail is validated and logged, and the messaging
channel only builds a WhatsApp deep link whose opening is left to the host.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol
from urllib.parse import quote

from ..common.validators import is_valid_email
from ..core.exceptions import NotificationError

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves unescaped.
_URI_SAFE = "-_.!~*'()"


class EmailChannel(Protocol):
    def send(self, to: str, subject: str, body: str) -> None:
        raise NotImplementedError


class MessagingChannel(Protocol):
    @property
    def recipient(self) -> str:
        raise NotImplementedError

    def send(self, text: str) -> str:
        raise NotImplementedError


class LoggingEmailChannel(EmailChannel):
    def send(self, to: str, subject: str, body: str) -> None:
        if not is_valid_email(to):
            raise NotificationError(f"Invalid email address: {to!r}")
        logger.info("Simulated email to %s: %s", to, subject)
        logger.debug("Email body for %s:\n%s", to, body)


def log_opener(url: str) -> None:
    logger.info("Messaging link ready: %s", url)


class WhatsAppLinkChannel(MessagingChannel):
    BASE_URL = "https://wa.me"

    def __init__(self, recipient: str, *, opener: Optional[Callable[[str], None]] = None):
        self._recipient = recipient
        self._opener = opener or log_opener

    @property
    def recipient(self) -> str:
        return self._recipient

    def build_url(self, text: str) -> str:
        return f"{self.BASE_URL}/{self._recipient}?text={quote(text, safe=_URI_SAFE)}"

    def send(self, text: str) -> str:
        url = self.build_url(text)
        self._opener(url)
        return url
