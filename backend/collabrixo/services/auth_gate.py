"""
Auth gate: resolves whether the visitor has an Appwrite session.

    checking -> authenticated(user) | anonymous

A session is binary present/absent; there is no refresh and no role model.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from loguru import logger

from collabrixo.core.errors import CollabError, NotAuthenticated
from collabrixo.models.user import User
from collabrixo.services.account import AccountService

SIGN_IN_PATH = "/auth"
HOME_PATH = "/"


class AuthState(str, Enum):
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthGate:
    def __init__(self, account: AccountService) -> None:
        self.account = account
        self.state = AuthState.CHECKING
        self.user: Optional[User] = None
        self.session_secret: Optional[str] = account.client.session

    @property
    def authenticated(self) -> bool:
        return self.state is AuthState.AUTHENTICATED

    async def check(self) -> AuthState:
        """Ask the account service once who the current session belongs to."""
        if not self.session_secret:
            return self._anonymous()
        try:
            self.user = await self.account.get()
        except CollabError as exc:
            logger.debug("No active session: {}", exc)
            return self._anonymous()
        self.state = AuthState.AUTHENTICATED
        return self.state

    async def sign_in(self, email: str, password: str) -> User:
        try:
            session = await self.account.create_session(email, password)
        except CollabError as exc:
            logger.error("Sign in error for {}: {}", email, exc)
            raise
        self.session_secret = session.secret
        self.account = AccountService(self.account.client.with_session(session.secret))
        await self.check()
        if self.user is None:
            raise NotAuthenticated("Signed in, but the session could not be read back.")
        return self.user

    async def sign_up(self, email: str, password: str, name: str) -> User:
        try:
            await self.account.create_account(email, password, name)
        except CollabError as exc:
            logger.error("Sign up error for {}: {}", email, exc)
            raise
        return await self.sign_in(email, password)

    async def sign_out(self) -> None:
        if self.session_secret:
            try:
                await self.account.delete_session("current")
            except CollabError as exc:
                logger.error("Sign out error: {}", exc)
                raise
        self.session_secret = None
        self.account = AccountService(self.account.client.with_session(None))
        self._anonymous()

    def require_user(self) -> User:
        if not self.authenticated or self.user is None:
            raise NotAuthenticated()
        return self.user

    def redirect_for(self, path: str) -> Optional[str]:
        """Where a visitor on `path` must be sent, or None to stay."""
        if self.state is AuthState.CHECKING:
            return None
        on_sign_in = path.rstrip("/") == SIGN_IN_PATH
        if self.state is AuthState.ANONYMOUS and not on_sign_in:
            return SIGN_IN_PATH
        if self.state is AuthState.AUTHENTICATED and on_sign_in:
            return HOME_PATH
        return None

    def _anonymous(self) -> AuthState:
        self.user = None
        self.state = AuthState.ANONYMOUS
        return self.state
