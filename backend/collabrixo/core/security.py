"""
App JWT + request dependencies.

The JWT carries the Appwrite user id and the (Fernet-encrypted) Appwrite
session secret. Every request rebuilds an AuthGate from it.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from collabrixo.core.config import Settings
from collabrixo.core.context import AppContext
from collabrixo.core.crypto import decrypt, encrypt
from collabrixo.core.errors import NotAuthenticated
from collabrixo.models.user import User
from collabrixo.services.auth_gate import AuthGate
from collabrixo.services.store import RemoteStore

Algorithm = "HS256"
TOKEN_COOKIE = "collabrixo_token"
security = HTTPBearer(auto_error=False)


def create_access_token(
    settings: Settings,
    subject: str,
    session_secret: str,
    expires_delta: Union[timedelta, None] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode: Dict[str, Any] = {
        "sub": subject,
        "sess": encrypt(session_secret, settings.SECRET_KEY),
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=Algorithm)


def verify_token(settings: Settings, token: str) -> Dict[str, Any]:
    """Verify and decode JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[Algorithm])
    except JWTError:
        raise NotAuthenticated("Invalid authentication credentials")


def session_from_token(settings: Settings, token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    try:
        payload = verify_token(settings, token)
    except NotAuthenticated:
        return None
    sealed = payload.get("sess")
    return decrypt(sealed, settings.SECRET_KEY) if sealed else None


async def resolve_gate(context: AppContext, token: Optional[str]) -> AuthGate:
    gate = AuthGate(context.account(session_from_token(context.settings, token)))
    await gate.check()
    return gate


# --- FastAPI dependencies ---

def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_configured_context(context: AppContext = Depends(get_context)) -> AppContext:
    """Fails with the setup screen before any remote call when config is incomplete."""
    context.require_config()
    return context


async def get_auth_gate(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    context: AppContext = Depends(get_configured_context),
) -> AuthGate:
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE)
    return await resolve_gate(context, token)


async def get_current_user(gate: AuthGate = Depends(get_auth_gate)) -> User:
    """Get current authenticated user from the app token"""
    return gate.require_user()


async def get_store(
    gate: AuthGate = Depends(get_auth_gate),
    context: AppContext = Depends(get_configured_context),
) -> RemoteStore:
    gate.require_user()
    return context.store(gate.session_secret)
