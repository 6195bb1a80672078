"""
Acting-party dependency.

Authentication happens upstream (gateway or session layer); it forwards the
authenticated identity as X-Actor-Id / X-Actor-Role headers. This module
only turns those into an Actor and refuses requests that carry none.
"""

import logging
from typing import Optional

from fastapi import Header

from ...core.enums import RoleName
from ...core.exceptions import UnauthorizedException
from ...core.permissions import Actor

logger = logging.getLogger(__name__)


def get_current_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Actor:
    if not x_actor_id or not x_actor_id.strip():
        raise UnauthorizedException("Missing acting party", code="ACTOR_REQUIRED")
    try:
        role = RoleName((x_actor_role or "").strip().lower())
    except ValueError:
        logger.info("Rejected request with unknown actor role %r", x_actor_role)
        raise UnauthorizedException(
            "Unknown actor role", code="ACTOR_ROLE_INVALID", details={"role": x_actor_role}
        ) from None
    return Actor(id=x_actor_id.strip(), role=role)
