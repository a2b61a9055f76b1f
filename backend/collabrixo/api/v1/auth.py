from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from collabrixo.core.context import AppContext
from collabrixo.core.errors import RemoteError
from collabrixo.core.security import (
    TOKEN_COOKIE,
    create_access_token,
    get_auth_gate,
    get_configured_context,
)
from collabrixo.models.user import User
from collabrixo.services.auth_gate import HOME_PATH, SIGN_IN_PATH, AuthGate
from loguru import logger

router = APIRouter(prefix="/auth", tags=["Auth"])


class SignInRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=8)


class SignUpRequest(SignInRequest):
    name: str = Field(min_length=1)


@router.post("/sign-in")
async def sign_in(
    body: SignInRequest,
    response: Response,
    context: AppContext = Depends(get_configured_context),
) -> dict:
    """Create an Appwrite email session and hand back the app token."""
    gate = AuthGate(context.account())
    try:
        user = await gate.sign_in(body.email, body.password)
    except RemoteError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message) from exc
    return _session_response(context, gate, user, response)


@router.post("/sign-up", status_code=201)
async def sign_up(
    body: SignUpRequest,
    response: Response,
    context: AppContext = Depends(get_configured_context),
) -> dict:
    gate = AuthGate(context.account())
    try:
        user = await gate.sign_up(body.email, body.password, body.name)
    except RemoteError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    return _session_response(context, gate, user, response)


@router.post("/sign-out")
async def sign_out(response: Response, gate: AuthGate = Depends(get_auth_gate)) -> dict:
    await gate.sign_out()
    response.delete_cookie(TOKEN_COOKIE)
    return {"state": gate.state.value, "redirect": SIGN_IN_PATH}


@router.get("/me")
async def me(gate: AuthGate = Depends(get_auth_gate)) -> dict:
    return {
        "state": gate.state.value,
        "user": gate.user.model_dump() if gate.user else None,
    }


# ──────────────────────────────────────────────────────────────────────────────
# helpers


def _session_response(context: AppContext, gate: AuthGate, user: User, response: Response) -> dict:
    if not gate.session_secret:
        logger.error("Appwrite returned no session secret for {}; is APPWRITE_API_KEY set?", user.email)
        raise HTTPException(status_code=500, detail="Could not establish a session. Please try again.")

    token = create_access_token(context.settings, user.id, gate.session_secret)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        httponly=True,
        secure=context.settings.ENV == "production",
        samesite="lax",
    )
    logger.info("Signed in {}", user.email)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user.model_dump(),
        "redirect": HOME_PATH,
    }
