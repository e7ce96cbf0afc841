"""
Message API routes.

Browse, search and delete captured messages in whichever storage backend
bootstrap selected.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from mailhog_server.api.dependencies import get_config
from mailhog_server.bootstrap import Config
from mailhog_server.storage.models import Message, SearchKind

router = APIRouter(tags=["Messages"])


# =============================================================================
# Response Models
# =============================================================================


class MessageSummary(BaseModel):
    """Message as shown in listings."""

    id: str
    sender: str
    recipients: list[str]
    subject: str
    created: datetime
    size: int

    @classmethod
    def from_message(cls, message: Message) -> "MessageSummary":
        return cls(
            id=message.id,
            sender=message.sender,
            recipients=message.recipients,
            subject=(message.headers.get("Subject") or [""])[0],
            created=message.created,
            size=message.size,
        )


class MessageDetail(MessageSummary):
    """Single message including headers and raw data."""

    helo: str
    headers: dict[str, list[str]] = Field(default_factory=dict)
    raw: str

    @classmethod
    def from_message(cls, message: Message) -> "MessageDetail":
        summary = MessageSummary.from_message(message)
        return cls(
            **summary.model_dump(),
            helo=message.helo,
            headers=message.headers,
            raw=message.raw,
        )


class MessagesResponse(BaseModel):
    """A page of messages."""

    total: int
    count: int
    start: int
    items: list[MessageSummary]


def _page(messages: list[Message], total: int, start: int) -> MessagesResponse:
    return MessagesResponse(
        total=total,
        count=len(messages),
        start=start,
        items=[MessageSummary.from_message(m) for m in messages],
    )


# =============================================================================
# Routes
# =============================================================================


@router.get("/api/v2/messages", response_model=MessagesResponse)
async def list_messages(
    start: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=250),
    config: Config = Depends(get_config),
) -> MessagesResponse:
    """List messages, newest first."""
    storage = config.storage
    return _page(storage.list_messages(start, limit), storage.count(), start)


@router.get("/api/v2/search", response_model=MessagesResponse)
async def search_messages(
    kind: SearchKind,
    query: str,
    start: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=250),
    config: Config = Depends(get_config),
) -> MessagesResponse:
    """Search messages by sender, recipient or content."""
    messages, total = config.storage.search(kind, query, start, limit)
    return _page(messages, total, start)


@router.get("/api/v1/messages/{message_id}", response_model=MessageDetail)
async def get_message(message_id: str, config: Config = Depends(get_config)) -> MessageDetail:
    """Get a single message."""
    message = config.storage.load(message_id)
    if message is None:
        raise HTTPException(status_code=404, detail=f"Message not found: {message_id}")
    return MessageDetail.from_message(message)


@router.delete("/api/v1/messages/{message_id}")
async def delete_message(message_id: str, config: Config = Depends(get_config)) -> dict[str, str]:
    """Delete a single message."""
    if not config.storage.delete_one(message_id):
        raise HTTPException(status_code=404, detail=f"Message not found: {message_id}")
    return {"message": "Deleted", "id": message_id}


@router.delete("/api/v1/messages")
async def delete_all_messages(config: Config = Depends(get_config)) -> dict[str, str]:
    """Delete every message."""
    config.storage.delete_all()
    return {"message": "Deleted all messages"}
