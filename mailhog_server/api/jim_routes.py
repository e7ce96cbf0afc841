"""
Jim API routes.

Invite, retune and send away the chaos monkey. Every change is written to
the Jim state file so it survives restarts; a failed write is reported to
the caller as a 500 while the in-memory change stays in effect.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from mailhog_server.api.dependencies import get_config
from mailhog_server.bootstrap import Config
from mailhog_server.errors import StateIOError
from mailhog_server.logging import get_logger
from mailhog_server.monkey.jim import Jim
from mailhog_server.monkey.state import save_jim_state

router = APIRouter(prefix="/api/v2", tags=["Jim"])
logger = get_logger(__name__)


def _persist(config: Config) -> None:
    try:
        save_jim_state(config)
    except StateIOError as e:
        logger.error("Error saving Jim state: %s", e)
        raise HTTPException(status_code=500, detail=f"Failed to save Jim state: {e}") from e


def _require_jim(config: Config) -> Jim:
    monkey = config.monkey
    if monkey is None:
        raise HTTPException(status_code=404, detail="Jim is not invited")
    return monkey


@router.get("/jim")
async def get_jim(config: Config = Depends(get_config)) -> dict[str, Any]:
    """Get Jim's current tuning (404 while he is not invited)."""
    return _require_jim(config).tunables()


@router.post("/jim", status_code=201)
async def invite_jim(
    tuning: Jim | None = None,
    config: Config = Depends(get_config),
) -> dict[str, Any]:
    """Invite Jim, optionally with new tuning."""
    with config.state_lock:
        jim = config.enable_jim(tuning)
        _persist(config)
    return jim.tunables()


@router.put("/jim")
async def update_jim(
    tuning: Jim,
    config: Config = Depends(get_config),
) -> dict[str, Any]:
    """Retune Jim (404 while he is not invited)."""
    with config.state_lock:
        _require_jim(config)
        jim = config.update_jim(tuning)
        _persist(config)
    return jim.tunables()


@router.delete("/jim")
async def send_jim_away(config: Config = Depends(get_config)) -> dict[str, bool]:
    """Send Jim away (404 while he is not invited). His tuning is kept."""
    with config.state_lock:
        _require_jim(config)
        config.disable_jim()
        _persist(config)
    return {"enabled": False}
