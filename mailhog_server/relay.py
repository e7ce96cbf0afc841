"""
Outgoing SMTP relay table.

Relays are named outbound SMTP servers messages can be released to. The
table is loaded once at startup from an optional JSON file mapping relay
name to relay parameters, and is read-only afterwards.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, model_validator

from mailhog_server.errors import FatalConfigError
from mailhog_server.logging import get_logger, redact_sensitive

logger = get_logger(__name__)

EMPTY_RELAY_TABLE: Mapping[str, "OutgoingSMTP"] = MappingProxyType({})


class OutgoingSMTP(BaseModel):
    """
    An outgoing SMTP server.

    Keys are matched case-insensitively ("Host" and "host" are the same
    field) and numeric ports are kept as strings.
    """

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str = Field(default="", description="Relay name")
    save: bool = Field(default=False, description="Keep a copy of released messages")
    email: str = Field(default="", description="Address messages are released to")
    host: str = Field(default="", description="SMTP server host")
    port: str = Field(default="25", description="SMTP server port")
    username: str = Field(default="", description="SMTP username")
    password: SecretStr = Field(default=SecretStr(""), description="SMTP password")
    mechanism: str = Field(default="", description="SMTP auth mechanism, e.g. PLAIN or CRAM-MD5")

    @model_validator(mode="before")
    @classmethod
    def lowercase_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {str(k).lower(): v for k, v in data.items()}
        return data

    def public_view(self) -> dict[str, Any]:
        """Relay parameters without the password."""
        return self.model_dump(exclude={"password"})


def load_relay_table(path: str | Path) -> Mapping[str, OutgoingSMTP]:
    """
    Load the relay table from a JSON file.

    Args:
        path: File holding a JSON object keyed by relay name

    Returns:
        Read-only mapping of relay name to relay parameters

    Raises:
        FatalConfigError: If the file cannot be read or holds an invalid table
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise FatalConfigError(f"Cannot read outgoing SMTP file {path}: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FatalConfigError(f"Invalid JSON in outgoing SMTP file {path}: {e}") from e

    if not isinstance(data, dict):
        raise FatalConfigError(f"Outgoing SMTP file {path} must contain a JSON object")

    relays: dict[str, OutgoingSMTP] = {}
    for relay_name, entry in data.items():
        try:
            relay = OutgoingSMTP.model_validate(entry)
        except ValidationError as e:
            raise FatalConfigError(f"Invalid outgoing SMTP server {relay_name!r} in {path}: {e}") from e
        if not relay.name:
            relay = relay.model_copy(update={"name": relay_name})
        relays[relay_name] = relay

    logger.info("Loaded %d outgoing SMTP server(s) from %s", len(relays), path)
    logger.debug(
        "Outgoing SMTP servers: %s",
        redact_sensitive({name: relay.model_dump(mode="json") for name, relay in relays.items()}),
    )
    return MappingProxyType(relays)
