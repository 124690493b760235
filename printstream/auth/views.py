from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from printstream.utils.validators import validate_password_strength
from printstream.utils.security import set_session_cookie, clear_session_cookie
from .service import login as svc_login, signup as svc_signup

# --- API Router (/api/auth) ---

router = APIRouter(prefix="/api/auth", tags=["Auth API"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    firstName: Optional[str] = None
    lastName: Optional[str] = None

    @field_validator("password")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


@router.post("/login")
def api_login(req: LoginRequest, response: Response):
    """Connexion (API JSON).
    - Délègue la vérification des identifiants au service (svc_login).
    - Pose le cookie de session si un access_token est fourni.
    - Retourne {accessToken, tokenType, user} pour les clients sans SDK Supabase.
    """
    result = svc_login(req.email, req.password)
    if not result.success:
        raise HTTPException(status_code=401, detail=result.error or "Invalid credentials")
    if result.access_token:
        set_session_cookie(response, result.access_token)
    return {"accessToken": result.access_token, "tokenType": "bearer", "user": result.user}


@router.post("/signup", status_code=201)
def api_signup(req: SignupRequest, response: Response):
    result = svc_signup(req.email, req.password, req.firstName, req.lastName)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.error or "Signup failed")
    if result.access_token:
        set_session_cookie(response, result.access_token)
        return {"accessToken": result.access_token, "tokenType": "bearer", "user": result.user}
    return {"message": result.error or "Signup successful, please check your email"}


@router.post("/logout")
def api_logout(response: Response):
    """Supprime le cookie de session."""
    clear_session_cookie(response)
    return {"message": "Logged out"}
