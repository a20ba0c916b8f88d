from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from tether.core.models import Direction, InputSource, PlayerInputs, Role, Rotation, role_for_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IntentEvent:
    """A classified intent from one source: a direction or an explicit rotation."""

    source: InputSource
    direction: Direction | None = None
    rotation: Rotation | None = None


# Directions understood by the rotational slot; up/down have no meaning there.
_ROTATION_FOR_DIRECTION: dict[Direction, Rotation] = {
    Direction.left: Rotation.ccw,
    Direction.right: Rotation.cw,
}


class RoleInputMapper:
    """Accumulates intents for the current planning window.

    The destination slot is decided per event from the entangled flag passed in
    at that moment. Only the latest intent per slot is kept.
    """

    def __init__(self) -> None:
        self._pending = PlayerInputs()

    @property
    def pending(self) -> PlayerInputs:
        return self._pending

    def route(self, event: IntentEvent, *, entangled: bool) -> Role | None:
        """Record `event` into its slot and return the role it fed, or None if dropped."""

        role = role_for_source(event.source, entangled=entangled)

        if role is Role.linear:
            if event.direction is None:
                logger.debug("Dropped intent %s: linear slot needs a direction", event)
                return None
            self._pending = dataclasses.replace(self._pending, linear=event.direction)
            return role

        if role is Role.rotational:
            rotation = event.rotation
            if rotation is None and event.direction is not None:
                rotation = _ROTATION_FOR_DIRECTION.get(event.direction)
            if rotation is None:
                logger.debug("Dropped intent %s: no rotation for rotational slot", event)
                return None
            self._pending = dataclasses.replace(self._pending, rotational=rotation)
            return role

        raise ValueError(f"Unknown role: {role}")

    def drain(self) -> PlayerInputs:
        """Hand out the accumulated inputs and start a fresh window."""

        inputs = self._pending
        self._pending = PlayerInputs()
        return inputs

    def clear(self) -> None:
        self._pending = PlayerInputs()
