"""
MongoDB-backed message storage.
"""

import re
from typing import Any

from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from mailhog_server.errors import BackendUnavailableError
from mailhog_server.logging import get_logger
from mailhog_server.storage.base import Storage
from mailhog_server.storage.models import Message, SearchKind

logger = get_logger(__name__)

_SEARCH_FIELDS = {
    SearchKind.FROM: "sender",
    SearchKind.TO: "recipients",
    SearchKind.CONTAINING: "raw",
}


class MongoStorage(Storage):
    """
    Storage in a MongoDB collection, one document per message.

    The connection is verified on construction with a bounded server
    selection timeout so an unreachable server cannot stall startup.
    """

    def __init__(
        self,
        uri: str,
        db: str,
        collection: str,
        timeout_ms: int = 2000,
        client: MongoClient | None = None,
    ) -> None:
        owned: MongoClient | None = None
        try:
            if client is None:
                # URI parsing errors surface as ValueError, not PyMongoError
                client = owned = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms, tz_aware=True)
            self._client = client
            self._client.admin.command("ping")
            self._collection = self._client[db][collection]
            self._collection.create_index([("created", DESCENDING)])
        except (PyMongoError, ValueError) as e:
            if owned is not None:
                owned.close()
            raise BackendUnavailableError(f"MongoDB at {uri} unavailable: {e}") from e

        logger.debug("MongoStorage connected to %s/%s.%s", uri, db, collection)

    @staticmethod
    def _to_document(message: Message) -> dict[str, Any]:
        document = message.model_dump()
        document["_id"] = document.pop("id")
        return document

    @staticmethod
    def _from_document(document: dict[str, Any]) -> Message:
        document = dict(document)
        document["id"] = document.pop("_id")
        return Message.model_validate(document)

    def _find(self, query: dict[str, Any], start: int, limit: int) -> list[Message]:
        cursor = self._collection.find(query).sort("created", DESCENDING).skip(start).limit(limit)
        return [self._from_document(doc) for doc in cursor]

    def store(self, message: Message) -> str:
        self._collection.replace_one({"_id": message.id}, self._to_document(message), upsert=True)
        return message.id

    def load(self, message_id: str) -> Message | None:
        document = self._collection.find_one({"_id": message_id})
        return self._from_document(document) if document else None

    def list_messages(self, start: int = 0, limit: int = 50) -> list[Message]:
        return self._find({}, start, limit)

    def search(
        self,
        kind: SearchKind,
        query: str,
        start: int = 0,
        limit: int = 50,
    ) -> tuple[list[Message], int]:
        criteria = {_SEARCH_FIELDS[kind]: {"$regex": re.escape(query), "$options": "i"}}
        return self._find(criteria, start, limit), self._collection.count_documents(criteria)

    def count(self) -> int:
        return self._collection.count_documents({})

    def delete_one(self, message_id: str) -> bool:
        return self._collection.delete_one({"_id": message_id}).deleted_count == 1

    def delete_all(self) -> None:
        self._collection.delete_many({})
