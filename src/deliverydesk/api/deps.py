"""Request dependencies shared by the route modules."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..container import Workspace
from ..db.store import AuthUser

bearer_scheme = HTTPBearer(auto_error=False)


def get_workspace(request: Request) -> Workspace:
    workspace = getattr(request.app.state, "workspace", None)
    if workspace is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Workspace is not ready.")
    return workspace


def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    workspace: Workspace = Depends(get_workspace),
) -> AuthUser:
    """Resolve the bearer token to a user; anything else is a 401."""
    user = workspace.store.get_user(credentials.credentials) if credentials else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
