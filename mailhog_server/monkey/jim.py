"""
Jim, the chaos monkey.

Jim injects faults into SMTP sessions: rejected connections, throttled
links, rejected senders/recipients/authentication and random disconnects.
Every decision is reported through a sink wired with configure().

Tunables serialise under the historical field names (DisconnectChance,
AcceptChance, ...) so state files written by older releases still load.
"""

import random
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator

from mailhog_server.config import Settings

# printf-style reporter, e.g. logger.info
Reporter = Callable[..., None]


class Jim(BaseModel):
    """
    Fault-injection policy.

    A disabled Jim keeps its tuning; whether Jim is active is decided by
    the owning Config, not by the policy itself.
    """

    model_config = ConfigDict(populate_by_name=True)

    disconnect_chance: float = Field(default=0.005, alias="DisconnectChance", ge=0, le=1)
    accept_chance: float = Field(default=0.99, alias="AcceptChance", ge=0, le=1)
    link_speed_affect: float = Field(default=0.1, alias="LinkSpeedAffect", ge=0, le=1)
    link_speed_min: int = Field(default=1024, alias="LinkSpeedMin", ge=0)
    link_speed_max: int = Field(default=10240, alias="LinkSpeedMax", ge=0)
    reject_sender_chance: float = Field(default=0.05, alias="RejectSenderChance", ge=0, le=1)
    reject_recipient_chance: float = Field(default=0.05, alias="RejectRecipientChance", ge=0, le=1)
    reject_auth_chance: float = Field(default=0.05, alias="RejectAuthChance", ge=0, le=1)

    _reporter: Reporter | None = PrivateAttr(default=None)
    _rng: random.Random | None = PrivateAttr(default=None)

    @model_validator(mode="after")
    def check_link_speed_range(self) -> "Jim":
        if self.link_speed_min > self.link_speed_max:
            raise ValueError("LinkSpeedMin must not exceed LinkSpeedMax")
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> "Jim":
        """Build Jim from the jim-* options."""
        return cls(
            disconnect_chance=settings.jim_disconnect,
            accept_chance=settings.jim_accept,
            link_speed_affect=settings.jim_linkspeed_affect,
            link_speed_min=settings.jim_linkspeed_min,
            link_speed_max=settings.jim_linkspeed_max,
            reject_sender_chance=settings.jim_reject_sender,
            reject_recipient_chance=settings.jim_reject_recipient,
            reject_auth_chance=settings.jim_reject_auth,
        )

    # =========================================================================
    # Wiring
    # =========================================================================

    @property
    def configured(self) -> bool:
        return self._reporter is not None

    def configure(self, reporter: Reporter) -> None:
        """Wire the sink every decision is reported to."""
        self._reporter = reporter

    def configure_from(self, other: "Jim") -> None:
        """Inherit the reporting sink of the Jim being replaced."""
        self._reporter = other._reporter

    def use_random(self, rng: random.Random) -> None:
        """Draw decisions from rng instead of the module-level generator."""
        self._rng = rng

    def apply(self, other: "Jim") -> None:
        """Copy every tunable from other into this Jim, keeping identity and sink."""
        for name in type(self).model_fields:
            setattr(self, name, getattr(other, name))

    def tunables(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    # =========================================================================
    # Decisions
    # =========================================================================

    def _report(self, message: str, *args: Any) -> None:
        if self._reporter is None:
            raise RuntimeError("Jim used before configure()")
        self._reporter(message, *args)

    def _roll(self) -> float:
        return (self._rng or random).random()

    def accept(self, remote_addr: str) -> bool:
        """Decide whether to accept a new connection."""
        if self._roll() > self.accept_chance:
            self._report("Jim: Rejecting connection from %s", remote_addr)
            return False
        self._report("Jim: Allowing connection from %s", remote_addr)
        return True

    def link_speed(self) -> int | None:
        """
        Decide whether to throttle the link.

        Returns:
            Bytes per second to restrict the link to, or None for unlimited.
        """
        if self._roll() < self.link_speed_affect:
            spread = self.link_speed_max - self.link_speed_min
            speed = self.link_speed_min + ((self._rng or random).randrange(spread) if spread > 0 else 0)
            self._report("Jim: Restricting link speed to %d bytes/s", speed)
            return speed
        self._report("Jim: Allowing unlimited link speed")
        return None

    def valid_mail(self, sender: str) -> bool:
        """Decide whether to accept MAIL FROM."""
        if self._roll() < self.reject_sender_chance:
            self._report("Jim: Rejecting sender %s", sender)
            return False
        self._report("Jim: Allowing sender %s", sender)
        return True

    def valid_rcpt(self, recipient: str) -> bool:
        """Decide whether to accept RCPT TO."""
        if self._roll() < self.reject_recipient_chance:
            self._report("Jim: Rejecting recipient %s", recipient)
            return False
        self._report("Jim: Allowing recipient %s", recipient)
        return True

    def valid_auth(self, mechanism: str, *args: str) -> bool:
        """Decide whether to accept AUTH."""
        if self._roll() < self.reject_auth_chance:
            self._report("Jim: Rejecting authentication %s: %s", mechanism, args)
            return False
        self._report("Jim: Allowing authentication %s: %s", mechanism, args)
        return True

    def disconnect(self) -> bool:
        """Decide whether to drop the connection now."""
        if self._roll() < self.disconnect_chance:
            self._report("Jim: Being nasty, kicking them off")
            return True
        self._report("Jim: Being nice, letting them stay")
        return False
