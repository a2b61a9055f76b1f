"""
Symmetric encryption helper ‑ uses SECRET_KEY as the base material.

The Appwrite session secret rides inside the app JWT; it is Fernet-encrypted
so the token payload never exposes it in clear text.
"""
import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from collabrixo.core.config import settings


def _fernet(secret_key: str | None = None) -> Fernet:
    # derive 32‑byte key from SECRET_KEY
    material = (secret_key or settings.SECRET_KEY).encode()
    return Fernet(base64.urlsafe_b64encode(hashlib.sha256(material).digest()))


def encrypt(data: str, secret_key: str | None = None) -> str:
    return _fernet(secret_key).encrypt(data.encode()).decode()


def decrypt(token: str, secret_key: str | None = None) -> str | None:
    """Return the clear text, or None when the token was tampered with."""
    try:
        return _fernet(secret_key).decrypt(token.encode()).decode()
    except InvalidToken:
        return None
