"""Session endpoints backed by the data store's auth service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...container import Workspace
from ...db.store import AuthUser
from ...errors import RemoteStoreError
from ...schemas.auth import SessionResponse, SignInRequest, SignUpRequest, UserModel
from ..deps import get_workspace, require_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-in", response_model=SessionResponse, status_code=status.HTTP_200_OK)
def sign_in(payload: SignInRequest, workspace: Workspace = Depends(get_workspace)) -> SessionResponse:
    try:
        session = workspace.store.sign_in(payload.email, payload.password)
    except RemoteStoreError as exc:
        logger.warning(f"Sign-in rejected for {payload.email}: {exc}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password.") from exc
    return SessionResponse(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user=UserModel(id=session.user.id, email=session.user.email, full_name=session.user.full_name),
    )


@router.post("/sign-up", response_model=UserModel, status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, workspace: Workspace = Depends(get_workspace)) -> UserModel:
    try:
        user = workspace.store.sign_up(payload.email, payload.password, payload.full_name)
    except RemoteStoreError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    workspace.notifier.success("Account created. Check your email to confirm the registration.")
    return UserModel(id=user.id, email=user.email, full_name=user.full_name)


@router.get("/me", response_model=UserModel, status_code=status.HTTP_200_OK)
def current_user(user: AuthUser = Depends(require_user)) -> UserModel:
    return UserModel(id=user.id, email=user.email, full_name=user.full_name)
