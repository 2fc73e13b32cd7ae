from __future__ import annotations

import logging
import concurrent.futures
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.constants import NOTIFY_WORKERS
from ..core.exceptions import NotificationError
from ..users.model import User
from . import templates
from .channels import EmailChannel, MessagingChannel

logger = logging.getLogger(__name__)


class ChannelName(str, Enum):
    STUDENT_EMAIL = "student_email"
    PARENT_EMAIL = "parent_email"
    MESSAGING = "messaging"


@dataclass(frozen=True)
class ChannelOutcome:
    channel: ChannelName
    target: str
    ok: bool
    error: Optional[str] = None


class DispatchBatch:
    """Handles of one fan-out. Joined only for logging and on teardown."""

    def __init__(self, futures: Sequence[Future]):
        self._futures = list(futures)

    def __len__(self) -> int:
        return len(self._futures)

    def done(self) -> bool:
        return all(f.done() for f in self._futures)

    def wait(self, timeout: Optional[float] = None) -> list[ChannelOutcome]:
        finished, _ = concurrent.futures.wait(self._futures, timeout=timeout)
        return [f.result() for f in self._futures if f in finished]


class NotificationDispatcher:
    """Best-effort fan-out of a presence notice.

    Every eligible channel is submitted as its own task; a failing channel is
    logged and reported in its outcome, never raised to the caller.
    """

    def __init__(
        self,
        email: EmailChannel,
        messaging: MessagingChannel,
        *,
        max_workers: int = NOTIFY_WORKERS,
    ):
        self._email = email
        self._messaging = messaging
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def eligible_channels(self, user: User) -> list[tuple[ChannelName, str]]:
        channels: list[tuple[ChannelName, str]] = []
        if user.email and user.email_verified:
            channels.append((ChannelName.STUDENT_EMAIL, user.email))
        if user.parent_email and user.parent_email_verified:
            channels.append((ChannelName.PARENT_EMAIL, user.parent_email))
        channels.append((ChannelName.MESSAGING, self._messaging.recipient))
        return channels

    def dispatch(self, record: AttendanceRecord, user: User) -> DispatchBatch:
        body = templates.presence_body(user, record)
        futures: list[Future] = []

        for channel, target in self.eligible_channels(user):
            if channel == ChannelName.STUDENT_EMAIL:
                send = self._email_sender(target, templates.student_subject(user), body)
            elif channel == ChannelName.PARENT_EMAIL:
                send = self._email_sender(target, templates.parent_subject(user), body)
            else:
                send = self._messaging_sender(templates.messaging_text(user, record))
            try:
                futures.append(self._executor.submit(self._attempt, channel, target, send))
            except RuntimeError:
                # Executor already shut down (application teardown).
                logger.error("Dispatcher closed, %s notice to %s dropped", channel.value, target)

        return DispatchBatch(futures)

    def close(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _email_sender(self, to: str, subject: str, body: str) -> Callable[[], None]:
        return lambda: self._email.send(to, subject, body)

    def _messaging_sender(self, text: str) -> Callable[[], None]:
        return lambda: self._messaging.send(text)

    def _attempt(self, channel: ChannelName, target: str, send: Callable[[], None]) -> ChannelOutcome:
        try:
            send()
        except NotificationError as e:
            logger.error("Notification via %s to %s failed: %s", channel.value, target, e)
            return ChannelOutcome(channel=channel, target=target, ok=False, error=str(e))
        except Exception as e:
            logger.exception("Unexpected failure on %s to %s", channel.value, target)
            return ChannelOutcome(channel=channel, target=target, ok=False, error=str(e))

        logger.info("Notification via %s sent to %s", channel.value, target)
        return ChannelOutcome(channel=channel, target=target, ok=True)


def outcome_to_dict(o: ChannelOutcome) -> dict:
    return {"channel": o.channel.value, "target": o.target, "ok": o.ok, "error": o.error}
