"""
Message domain model.

Represents a captured SMTP message as handed to storage backends.
"""

from datetime import UTC, datetime
from email import policy
from email.parser import Parser
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class SearchKind(str, Enum):
    """Field a message search matches against."""

    FROM = "from"
    TO = "to"
    CONTAINING = "containing"


class Message(BaseModel):
    """
    A captured message.

    Holds the SMTP envelope alongside the raw RFC 822 data. Immutable once
    stored - messages are historical facts.
    """

    id: str = Field(..., description="Message identifier, unique per storage")
    sender: str = Field(default="", description="Envelope sender (MAIL FROM)")
    recipients: list[str] = Field(default_factory=list, description="Envelope recipients (RCPT TO)")
    helo: str = Field(default="", description="HELO/EHLO name announced by the client")
    created: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Time the message was captured",
    )
    raw: str = Field(default="", description="Raw message data")

    @classmethod
    def new(
        cls,
        raw: str,
        sender: str = "",
        recipients: list[str] | None = None,
        helo: str = "",
        hostname: str = "mailhog.example",
    ) -> "Message":
        """Create a message with a fresh identifier scoped to hostname."""
        return cls(
            id=f"{uuid4().hex}@{hostname}",
            sender=sender,
            recipients=recipients or [],
            helo=helo,
            raw=raw,
        )

    @property
    def headers(self) -> dict[str, list[str]]:
        """Parsed message headers, each name mapped to all of its values."""
        parsed = Parser(policy=policy.default).parsestr(self.raw, headersonly=True)
        headers: dict[str, list[str]] = {}
        for name, value in parsed.items():
            headers.setdefault(name, []).append(str(value))
        return headers

    @property
    def size(self) -> int:
        return len(self.raw.encode("utf-8"))

    def matches(self, kind: SearchKind, query: str) -> bool:
        """Case-insensitive match of query against the field selected by kind."""
        needle = query.lower()
        if kind == SearchKind.FROM:
            return needle in self.sender.lower()
        if kind == SearchKind.TO:
            return any(needle in recipient.lower() for recipient in self.recipients)
        return needle in self.raw.lower()
