from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from ..middlewares import principal_ctx_var
from ..schemas.user import User
from ..store.state import InventoryStore
from .store import get_store


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


async def require_session(request: Request, store: InventoryStore = Depends(get_store)) -> User:
    """Gate for inventory routes: someone must be logged in.

    There is one session per app (it lives on the ``InventoryStore``), not one
    per client. After any caller logs in, every caller passes this check until
    someone logs out. This is the single-user, process-local session the
    inventory app has always had. It is not per-client authentication.
    """

    session = store.session
    if not session.is_authenticated or session.current_user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    _set_principal(request, f"user:{session.current_user.id}")
    return session.current_user
