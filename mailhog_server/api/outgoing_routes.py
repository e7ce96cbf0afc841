"""
Outgoing SMTP API routes.
"""

from typing import Any

from fastapi import APIRouter, Depends

from mailhog_server.api.dependencies import get_config
from mailhog_server.bootstrap import Config

router = APIRouter(prefix="/api/v2", tags=["Outgoing SMTP"])


@router.get("/outgoing-smtp")
async def list_outgoing_smtp(config: Config = Depends(get_config)) -> dict[str, dict[str, Any]]:
    """List configured outgoing SMTP servers. Passwords are never returned."""
    return {name: relay.public_view() for name, relay in config.outgoing_smtp.items()}
