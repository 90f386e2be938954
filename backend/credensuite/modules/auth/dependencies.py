from fastapi import Header
from typing import Optional

from credensuite.core.logging_config import bind_request_context


async def get_current_actor(
    x_actor_email: Optional[str] = Header(None, alias="X-Actor-Email"),
) -> Optional[str]:
    """
    Email of the admin performing the request.

    Token verification and the admin whitelist live in the gateway in front of
    this service; it forwards the verified email in ``X-Actor-Email``. The value
    is only used to attribute activity events and may be absent.
    """
    actor = (x_actor_email or "").strip().lower() or None
    if actor:
        bind_request_context(actor=actor)
    return actor
