"""
Configuration bootstrap.

Turns resolved options into the live Config shared by the HTTP API, the UI
and the SMTP side:

1. select the storage backend (mongodb falls back to memory)
2. derive the Jim state file location
3. build Jim from options and merge any persisted state into it
4. load the outgoing SMTP relay table

Bootstrap runs once, single-threaded, before any listener binds.
"""

import os
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from mailhog_server.config import DEFAULT_JIM_STATE_FILE, DEFAULT_MAILDIR_PATH, Settings
from mailhog_server.errors import StateIOError
from mailhog_server.logging import get_logger
from mailhog_server.monkey.jim import Jim
from mailhog_server.monkey.state import load_jim_state
from mailhog_server.relay import EMPTY_RELAY_TABLE, OutgoingSMTP, load_relay_table
from mailhog_server.storage.base import Storage
from mailhog_server.storage.factory import (
    StorageEvent,
    StorageFactory,
    StorageKind,
    StorageSelection,
    create_storage,
)

logger = get_logger(__name__)
jim_logger = get_logger("mailhog_server.monkey")


@dataclass
class Config:
    """
    Live server configuration.

    Everything except the Jim toggle and tuning is fixed after bootstrap.
    Jim mutations go through state_lock, which save_jim_state also holds.
    """

    smtp_bind_addr: str
    api_bind_addr: str
    ui_bind_addr: str
    hostname: str
    storage_type: StorageKind
    requested_storage_type: StorageKind
    maildir_path: str
    mongo_uri: str
    mongo_db: str
    mongo_coll: str
    cors_origin: str
    web_path: str
    api_host: str
    jim_state_file: str
    invite_jim: bool
    storage: Storage
    jim: Jim
    outgoing_smtp_file: str = ""
    outgoing_smtp: Mapping[str, OutgoingSMTP] = field(default_factory=lambda: EMPTY_RELAY_TABLE)
    storage_events: tuple[StorageEvent, ...] = ()
    state_lock: Any = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def monkey(self) -> Jim | None:
        """The chaos policy of record: Jim while invited, otherwise None."""
        return self.jim if self.invite_jim else None

    def enable_jim(self, tuning: Jim | None = None) -> Jim:
        """Invite Jim, optionally retuning him first."""
        with self.state_lock:
            if tuning is not None:
                self.jim.apply(tuning)
            self.invite_jim = True
        logger.info("Jim invited")
        return self.jim

    def update_jim(self, tuning: Jim) -> Jim:
        """Retune Jim without changing whether he is invited."""
        with self.state_lock:
            self.jim.apply(tuning)
        return self.jim

    def disable_jim(self) -> None:
        """Send Jim away. His tuning is kept for the next invitation."""
        with self.state_lock:
            self.invite_jim = False
        logger.info("Jim sent away")


def derive_jim_state_file(jim_state_file: str, maildir_path: str) -> str:
    """
    Place the Jim state file inside a custom maildir path.

    Only applies when the state file was left at its compiled default and
    the maildir path was changed; both checks are exact string matches.
    """
    if jim_state_file == DEFAULT_JIM_STATE_FILE and maildir_path != DEFAULT_MAILDIR_PATH:
        return os.path.join(maildir_path, "jim.json")
    return jim_state_file


def _log_storage_selection(selection: StorageSelection, settings: Settings) -> None:
    if selection.event is not None:
        logger.warning("%s", selection.event.detail)
    elif selection.kind == StorageKind.MEMORY:
        logger.info("Using in-memory storage")
    elif selection.kind == StorageKind.MAILDIR:
        logger.info("Using maildir message storage at %s", settings.maildir_path)
    else:
        logger.info("Using MongoDB message storage")
        logger.info("Connected to MongoDB at %s", settings.mongo_uri)


def configure(settings: Settings, storage_factory: StorageFactory = create_storage) -> Config:
    """
    Build the live configuration.

    Args:
        settings: Resolved options
        storage_factory: Creates the storage backend for a kind name

    Returns:
        Config bound to a live storage backend

    Raises:
        FatalConfigError: Unknown storage kind, or an unreadable or invalid
            outgoing SMTP file
    """
    selection = storage_factory(settings.storage, settings)
    _log_storage_selection(selection, settings)

    jim_state_file = derive_jim_state_file(settings.jim_state_file, settings.maildir_path)

    jim = Jim.from_settings(settings)
    jim.configure(jim_logger.info)
    invite_jim = settings.invite_jim

    try:
        state = load_jim_state(jim_state_file)
    except StateIOError as e:
        logger.warning("Error loading Jim state: %s", e)
        state = None

    if state is not None:
        invite_jim = state.enabled
        if state.jim is not None:
            # apply copies tunables only; the live reporter stays wired
            jim.apply(state.jim)
        logger.info("Restored Jim state from %s (enabled=%s)", jim_state_file, state.enabled)

    outgoing_smtp: Mapping[str, OutgoingSMTP] = EMPTY_RELAY_TABLE
    if settings.outgoing_smtp:
        outgoing_smtp = load_relay_table(settings.outgoing_smtp)

    config = Config(
        smtp_bind_addr=settings.smtp_bind_addr,
        api_bind_addr=settings.api_bind_addr,
        ui_bind_addr=settings.ui_bind_addr,
        hostname=settings.hostname,
        storage_type=selection.kind,
        requested_storage_type=selection.requested,
        maildir_path=settings.maildir_path,
        mongo_uri=settings.mongo_uri,
        mongo_db=settings.mongo_db,
        mongo_coll=settings.mongo_coll,
        cors_origin=settings.cors_origin,
        web_path=settings.ui_web_path,
        api_host=settings.api_host,
        jim_state_file=jim_state_file,
        invite_jim=invite_jim,
        storage=selection.storage,
        jim=jim,
        outgoing_smtp_file=settings.outgoing_smtp,
        outgoing_smtp=outgoing_smtp,
        storage_events=(selection.event,) if selection.event else (),
    )

    if config.monkey is not None:
        logger.info("Jim is invited (state file: %s)", jim_state_file or "disabled")
    return config
