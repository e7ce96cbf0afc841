"""
Jim state persistence.

Preserves the chaos monkey configuration across restarts as a small JSON
document: {"enabled": bool, "jim": {...}}. The policy is only written while
Jim is enabled.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from mailhog_server.errors import StateIOError
from mailhog_server.logging import get_logger
from mailhog_server.monkey.jim import Jim

if TYPE_CHECKING:
    from mailhog_server.bootstrap import Config

logger = get_logger(__name__)


class JimState(BaseModel):
    """Persisted form of the chaos monkey."""

    enabled: bool = False
    jim: Jim | None = None


def load_jim_state(path: str) -> JimState | None:
    """
    Restore Jim state from disk.

    Args:
        path: State file path; empty disables persistence

    Returns:
        The persisted state, or None when nothing has been persisted
        (empty path or missing file).

    Raises:
        StateIOError: If the file exists but cannot be read or parsed
    """
    if not path:
        return None

    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        logger.debug("No Jim state file found at %s", path)
        return None
    except OSError as e:
        raise StateIOError(path, f"cannot read state file: {e}") from e

    try:
        state = JimState.model_validate_json(raw)
    except ValidationError as e:
        raise StateIOError(path, f"invalid state file: {e}") from e

    logger.debug("Loaded Jim state from %s (enabled=%s)", path, state.enabled)
    return state


def save_jim_state(config: "Config") -> None:
    """
    Write the current Jim state to disk.

    Holds the config's state lock for the whole write so concurrent saves
    and toggles never interleave.

    Raises:
        StateIOError: If the directory or file cannot be written
    """
    if not config.jim_state_file:
        return

    with config.state_lock:
        monkey = config.monkey
        state = JimState(enabled=monkey is not None, jim=monkey)
        payload = state.model_dump_json(by_alias=True, exclude_none=True, indent=2)

        file_path = Path(config.jim_state_file)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise StateIOError(config.jim_state_file, f"cannot write state file: {e}") from e

    logger.debug("Jim state saved to %s", file_path)
