from __future__ import annotations

from tether.core.models import Direction, InputSource
from tether.input_mapper import IntentEvent

# Default two-players-one-keyboard layout.
KEY_BINDINGS: dict[str, tuple[InputSource, Direction]] = {
    "w": (InputSource.primary, Direction.up),
    "s": (InputSource.primary, Direction.down),
    "a": (InputSource.primary, Direction.left),
    "d": (InputSource.primary, Direction.right),
    "arrowup": (InputSource.secondary, Direction.up),
    "arrowdown": (InputSource.secondary, Direction.down),
    "arrowleft": (InputSource.secondary, Direction.left),
    "arrowright": (InputSource.secondary, Direction.right),
}


def intent_for_key(key: str, *, bindings: dict[str, tuple[InputSource, Direction]] | None = None) -> IntentEvent | None:
    """Classify a raw key name (case-insensitive). Unbound keys return None."""

    table = KEY_BINDINGS if bindings is None else bindings
    bound = table.get(key.strip().lower())
    if bound is None:
        return None
    source, direction = bound
    return IntentEvent(source=source, direction=direction)
