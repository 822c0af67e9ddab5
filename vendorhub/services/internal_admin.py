from fastapi import Header, HTTPException

from vendorhub.core.config import settings


async def require_internal_admin(
    x_internal_admin_key: str | None = Header(default=None),
    x_admin_actor: str | None = Header(default=None),
) -> str:
    """Returns the actor recorded in audit rows ("internal" unless the caller names one)."""
    if not x_internal_admin_key or x_internal_admin_key != settings.internal_admin_key:
        raise HTTPException(status_code=403, detail="Internal admin key required")
    return (x_admin_actor or "internal").strip()[:64] or "internal"
