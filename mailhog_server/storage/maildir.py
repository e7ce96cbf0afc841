"""
Directory-backed message storage.

One file per message: the file name is the message ID and the content is
the raw message data. The directory is created on first write.
"""

import os
from datetime import UTC, datetime
from email.utils import getaddresses
from pathlib import Path

from mailhog_server.logging import get_logger
from mailhog_server.storage.base import Storage
from mailhog_server.storage.models import Message, SearchKind

logger = get_logger(__name__)


class MaildirStorage(Storage):
    """
    Maildir-like storage rooted at a single directory.

    Envelope data is not stored separately; sender and recipients are
    recovered from the From/To/Cc headers when a message is loaded.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        logger.debug("MaildirStorage initialized at %s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _file_for(self, message_id: str) -> Path | None:
        if not message_id or os.sep in message_id or "/" in message_id or message_id.startswith("."):
            return None
        return self._path / message_id

    def _read(self, file_path: Path) -> Message:
        raw = file_path.read_bytes().decode("utf-8", errors="replace")
        message = Message(id=file_path.name, raw=raw)
        headers = message.headers
        senders = getaddresses(headers.get("From", []))
        recipients = getaddresses(headers.get("To", []) + headers.get("Cc", []))
        return message.model_copy(
            update={
                "sender": senders[0][1] if senders else "",
                "recipients": [address for _, address in recipients if address],
                "created": datetime.fromtimestamp(file_path.stat().st_mtime, UTC),
            }
        )

    def _files_newest_first(self) -> list[Path]:
        if not self._path.is_dir():
            return []
        files = [p for p in self._path.iterdir() if p.is_file() and not p.name.startswith(".")]
        return sorted(files, key=lambda p: (p.stat().st_mtime_ns, p.name), reverse=True)

    def store(self, message: Message) -> str:
        file_path = self._file_for(message.id)
        if file_path is None:
            raise ValueError(f"Invalid message id: {message.id!r}")
        self._path.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(message.raw.encode("utf-8"))
        logger.debug("Stored message %s in %s", message.id, self._path)
        return message.id

    def load(self, message_id: str) -> Message | None:
        file_path = self._file_for(message_id)
        if file_path is None or not file_path.is_file():
            return None
        return self._read(file_path)

    def list_messages(self, start: int = 0, limit: int = 50) -> list[Message]:
        return [self._read(p) for p in self._files_newest_first()[start : start + limit]]

    def search(
        self,
        kind: SearchKind,
        query: str,
        start: int = 0,
        limit: int = 50,
    ) -> tuple[list[Message], int]:
        matches = [m for m in (self._read(p) for p in self._files_newest_first()) if m.matches(kind, query)]
        return matches[start : start + limit], len(matches)

    def count(self) -> int:
        return len(self._files_newest_first())

    def delete_one(self, message_id: str) -> bool:
        file_path = self._file_for(message_id)
        if file_path is None or not file_path.is_file():
            return False
        file_path.unlink()
        return True

    def delete_all(self) -> None:
        for file_path in self._files_newest_first():
            file_path.unlink()
        logger.info("Deleted all messages in %s", self._path)
