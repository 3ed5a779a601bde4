from types import SimpleNamespace
from typing import Optional

from fastapi import Depends, Header, HTTPException

# Token issuance lives in the identity service; the gateway forwards the
# resolved principal as headers.

def get_current_actor(
    x_user_id: Optional[int] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> SimpleNamespace:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return SimpleNamespace(id=x_user_id, role=(x_user_role or "").lower())

def require_manager(actor: SimpleNamespace = Depends(get_current_actor)) -> int:
    if actor.role not in ("manager", "admin"):
        raise HTTPException(status_code=403, detail="Manager role required")
    return actor.id
