from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass
class MailMessage:
    subject: str
    to: List[str]
    html_body: str
    from_email: Optional[str] = None
    reply_to: List[str] = field(default_factory=list)


class MailError(Exception):
    """The mail backend could not accept a message."""


class Mailer(Protocol):
    def send(self, message: MailMessage) -> None: ...


class OutboxMailer:
    """Records outgoing mail in memory and logs it.

    Used in development and tests; a delivering backend replaces it on
    `app.state.mailer`.
    """

    def __init__(self, default_from: str):
        self.default_from = default_from
        self.sent: List[MailMessage] = []

    def send(self, message: MailMessage) -> None:
        if not message.to:
            raise MailError("Message has no recipients")
        if message.from_email is None:
            message.from_email = self.default_from
        logger.info("Mail to %s: %s", ", ".join(message.to), message.subject)
        self.sent.append(message)
