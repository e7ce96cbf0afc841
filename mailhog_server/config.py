"""
Configuration management for the MailHog server.

Uses pydantic-settings for type-safe environment variable handling.
Every option can also be given as a command-line flag (see parse_flags),
flags taking precedence over the environment.
"""

import argparse
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAILDIR_PATH = "./mailhog-data"
DEFAULT_JIM_STATE_FILE = "./mailhog-data/jim.json"


class Settings(BaseSettings):
    """
    Runtime options loaded from environment variables.

    Field names map to MH_<NAME> variables; a few keep the historical
    variable names through aliases.
    """

    model_config = SettingsConfigDict(
        env_prefix="MH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Listeners
    smtp_bind_addr: str = Field(
        default="0.0.0.0:1025",
        description="SMTP bind interface and port, e.g. 0.0.0.0:1025 or just :1025",
    )
    api_bind_addr: str = Field(
        default="0.0.0.0:8025",
        description="HTTP bind interface and port for API, e.g. 0.0.0.0:8025 or just :8025",
    )
    ui_bind_addr: str = Field(
        default="0.0.0.0:8025",
        description="HTTP bind interface and port for UI, e.g. 0.0.0.0:8025 or just :8025",
    )
    hostname: str = Field(
        default="mailhog.example",
        description="Hostname for EHLO/HELO response, e.g. mailhog.example",
    )

    # Storage
    storage: str = Field(
        default="maildir",
        description="Message storage: 'maildir' (default), 'memory', or 'mongodb'",
    )
    mongo_uri: str = Field(default="127.0.0.1:27017", description="MongoDB URI, e.g. 127.0.0.1:27017")
    mongo_db: str = Field(default="mailhog", description="MongoDB database, e.g. mailhog")
    mongo_coll: str = Field(
        default="messages",
        alias="MH_MONGO_COLLECTION",
        description="MongoDB collection, e.g. messages",
    )
    mongo_timeout_ms: int = Field(
        default=2000,
        ge=100,
        le=60000,
        description="MongoDB server selection timeout in milliseconds",
    )
    maildir_path: str = Field(
        default=DEFAULT_MAILDIR_PATH,
        description="Maildir path (defaults to './mailhog-data')",
    )

    # HTTP
    cors_origin: str = Field(
        default="",
        description="CORS Access-Control-Allow-Origin header for API endpoints",
    )
    ui_web_path: str = Field(
        default="",
        description="WebPath under which the UI is served (without trailing slash), e.g. 'mailhog'",
    )
    api_host: str = Field(default="", description="API URL for the UI to connect to, e.g. http://localhost:8025")

    # Chaos monkey
    invite_jim: bool = Field(
        default=False,
        description="Decide whether to invite Jim (beware, he causes trouble)",
    )
    jim_state_file: str = Field(
        default=DEFAULT_JIM_STATE_FILE,
        description="File for persisting Jim state (defaults to maildir-path/jim.json)",
    )
    jim_disconnect: float = Field(default=0.005, ge=0, le=1, description="Chance of disconnect")
    jim_accept: float = Field(default=0.99, ge=0, le=1, description="Chance of accept")
    jim_linkspeed_affect: float = Field(default=0.1, ge=0, le=1, description="Chance of affecting link speed")
    jim_linkspeed_min: int = Field(default=1024, ge=0, description="Minimum link speed (in bytes per second)")
    jim_linkspeed_max: int = Field(default=10240, ge=0, description="Maximum link speed (in bytes per second)")
    jim_reject_sender: float = Field(
        default=0.05, ge=0, le=1, description="Chance of rejecting a sender (MAIL FROM)"
    )
    jim_reject_recipient: float = Field(
        default=0.05, ge=0, le=1, description="Chance of rejecting a recipient (RCPT TO)"
    )
    jim_reject_auth: float = Field(
        default=0.05, ge=0, le=1, description="Chance of rejecting authentication (AUTH)"
    )

    # Outgoing relays
    outgoing_smtp: str = Field(default="", description="JSON file containing outgoing SMTP servers")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON formatted log lines")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("ui_web_path")
    @classmethod
    def normalize_web_path(cls, v: str) -> str:
        """Strip trailing slashes and ensure a leading one."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    @model_validator(mode="after")
    def check_link_speed_range(self) -> "Settings":
        if self.jim_linkspeed_min > self.jim_linkspeed_max:
            raise ValueError("jim_linkspeed_min must not exceed jim_linkspeed_max")
        return self

    @property
    def api_host_port(self) -> tuple[str, int]:
        """Split api_bind_addr into (host, port); an empty host binds all interfaces."""
        host, _, port = self.api_bind_addr.rpartition(":")
        return host or "0.0.0.0", int(port)

    def get_redacted_config(self) -> dict[str, str | bool]:
        """
        Get configuration dict safe for logging.

        The relay file path is shown but never its contents.
        """
        return {
            "smtp_bind_addr": self.smtp_bind_addr,
            "api_bind_addr": self.api_bind_addr,
            "hostname": self.hostname,
            "storage": self.storage,
            "maildir_path": self.maildir_path,
            "invite_jim": self.invite_jim,
            "jim_state_file": self.jim_state_file,
            "outgoing_smtp": self.outgoing_smtp,
        }


# flag name -> (settings field, type)
FLAGS: dict[str, tuple[str, type]] = {
    "smtp-bind-addr": ("smtp_bind_addr", str),
    "api-bind-addr": ("api_bind_addr", str),
    "ui-bind-addr": ("ui_bind_addr", str),
    "hostname": ("hostname", str),
    "storage": ("storage", str),
    "mongo-uri": ("mongo_uri", str),
    "mongo-db": ("mongo_db", str),
    "mongo-coll": ("mongo_coll", str),
    "mongo-timeout-ms": ("mongo_timeout_ms", int),
    "maildir-path": ("maildir_path", str),
    "cors-origin": ("cors_origin", str),
    "ui-web-path": ("ui_web_path", str),
    "api-host": ("api_host", str),
    "invite-jim": ("invite_jim", bool),
    "jim-state-file": ("jim_state_file", str),
    "jim-disconnect": ("jim_disconnect", float),
    "jim-accept": ("jim_accept", float),
    "jim-linkspeed-affect": ("jim_linkspeed_affect", float),
    "jim-linkspeed-min": ("jim_linkspeed_min", int),
    "jim-linkspeed-max": ("jim_linkspeed_max", int),
    "jim-reject-sender": ("jim_reject_sender", float),
    "jim-reject-recipient": ("jim_reject_recipient", float),
    "jim-reject-auth": ("jim_reject_auth", float),
    "outgoing-smtp": ("outgoing_smtp", str),
    "log-level": ("log_level", str),
    "log-json": ("log_json", bool),
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all recognised flags."""
    parser = argparse.ArgumentParser(
        prog="mailhog-server",
        description="Web and API based SMTP testing tool",
    )
    for flag, (dest, kind) in FLAGS.items():
        description = Settings.model_fields[dest].description
        if kind is bool:
            parser.add_argument(
                f"--{flag}",
                dest=dest,
                action=argparse.BooleanOptionalAction,
                default=None,
                help=description,
            )
        else:
            parser.add_argument(f"--{flag}", dest=dest, type=kind, default=None, help=description)
    return parser


def parse_flags(argv: list[str] | None = None) -> dict[str, Any]:
    """
    Parse command-line flags into Settings overrides.

    Only flags that were actually given are returned, so unset flags fall
    through to the environment and compiled defaults.
    """
    namespace = build_parser().parse_args(argv)
    return {key: value for key, value in vars(namespace).items() if value is not None}

