"""Reserved event names and defaults."""

from __future__ import annotations

from typing import Final

# Lifecycle notifications; ordinary string names, so patterns match them too
NEW_LISTENER_EVENT: Final = "newListener"
REMOVE_LISTENER_EVENT: Final = "removeListener"

# Listener exceptions are routed here when something listens
ERROR_EVENT: Final = "error"

DEFAULT_MAX_LISTENERS: Final = 10
