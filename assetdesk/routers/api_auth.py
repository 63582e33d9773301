from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..deps.store import get_store
from ..schemas.user import (
    LoginRequest,
    PasswordResetComplete,
    PasswordResetRequest,
    SessionOut,
    SignupRequest,
    SocialProfile,
    SocialProvider,
    UserOut,
)
from ..store.state import InventoryStore

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _session_out(store: InventoryStore) -> SessionOut:
    session = store.session
    user = UserOut.model_validate(session.current_user) if session.current_user else None
    return SessionOut(is_authenticated=session.is_authenticated, current_user=user, error=session.error)


@router.get("/session", response_model=SessionOut)
def api_session(store: InventoryStore = Depends(get_store)):
    return _session_out(store)


@router.post("/login", response_model=SessionOut)
def api_login(payload: LoginRequest, store: InventoryStore = Depends(get_store)):
    store.login(payload.email, payload.password)
    return _session_out(store)


@router.post("/signup", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
def api_signup(payload: SignupRequest, store: InventoryStore = Depends(get_store)):
    store.signup(payload)
    return _session_out(store)


@router.post("/social/{provider}", response_model=SessionOut, summary="Sign in with a federated identity")
def api_social_login(provider: SocialProvider, payload: SocialProfile, store: InventoryStore = Depends(get_store)):
    store.social_login(provider, payload)
    return _session_out(store)


@router.post("/logout")
def api_logout(store: InventoryStore = Depends(get_store)):
    store.logout()
    return {"status": "logged_out"}


@router.post("/reset-password", status_code=status.HTTP_202_ACCEPTED)
def api_reset_password(payload: PasswordResetRequest, store: InventoryStore = Depends(get_store)):
    store.reset_password(payload.email)
    return {"status": "sent", "message": "A password reset link has been sent to your email address."}


@router.post("/reset-password/complete")
def api_complete_reset(payload: PasswordResetComplete, store: InventoryStore = Depends(get_store)):
    store.complete_password_reset(payload.token, payload.email, payload.new_password)
    return {"status": "reset"}
