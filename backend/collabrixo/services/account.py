"""
Appwrite account service: the board only reads users and manages sessions.
"""

from __future__ import annotations

from collabrixo.models.user import Session, User
from collabrixo.services.appwrite import UNIQUE_ID, AppwriteClient, session_cookie_name


class AccountService:
    def __init__(self, client: AppwriteClient) -> None:
        self.client = client

    async def get(self) -> User:
        """Current user for the session the client carries."""
        return User.model_validate(await self.client.request("GET", "/account"))

    async def create_session(self, email: str, password: str) -> Session:
        response = await self.client.request(
            "POST",
            "/account/sessions/email",
            json={"email": email, "password": password},
            raw=True,
        )
        session = Session.model_validate(response.json())
        if not session.secret:
            # without a server key Appwrite only hands the secret back as a cookie
            session.secret = response.cookies.get(session_cookie_name(self.client.project_id)) or ""
        return session

    async def create_account(self, email: str, password: str, name: str) -> User:
        body = await self.client.request(
            "POST",
            "/account",
            json={"userId": UNIQUE_ID, "email": email, "password": password, "name": name},
        )
        return User.model_validate(body)

    async def delete_session(self, session_id: str = "current") -> None:
        await self.client.request("DELETE", f"/account/sessions/{session_id}")
