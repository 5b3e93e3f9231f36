"""Identity binding for realtime frames.

The transport's own authentication is not used. A client names itself with a
plain header on any frame, and the first such name sticks to the connection.
Nothing here verifies that the caller really is that user: whoever sends
``USER_ID: 42`` is treated as user 42 until an authentication layer replaces
this step.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_USER_HEADER = "USER_ID"


@dataclass(frozen=True)
class Principal:
    name: str

    def __str__(self) -> str:
        return self.name


def bind_identity(
    headers: Mapping[str, str],
    current: Principal | None,
    header_name: str = DEFAULT_USER_HEADER,
) -> Principal | None:
    """Return the identity to use for this frame and every later one on the connection."""
    if current is not None:
        return current
    value = headers.get(header_name)
    if value is None or not value.strip():
        return None
    principal = Principal(name=value.strip())
    logger.debug("Bound unverified realtime identity %s from %s header", principal.name, header_name)
    return principal
