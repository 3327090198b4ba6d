"""Actor attribution for commits.

Authentication happens upstream; the fronting gateway forwards the signed-in
user in the X-Actor header and this dependency only requires it to be there.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

ACTOR_HEADER = APIKeyHeader(name="X-Actor", auto_error=False)


async def get_actor(actor_header: str | None = Depends(ACTOR_HEADER)) -> str:
    """Extract the acting user from the X-Actor header."""
    actor = (actor_header or "").strip()
    if not actor:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Actor header",
        )
    return actor


# Type alias for dependency injection
ActorDep = Annotated[str, Depends(get_actor)]
