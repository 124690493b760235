from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict
import logging

from printstream.profiles import repository as profiles_repository
from printstream.utils.security import require_user
from printstream.utils.validators import validate_password_strength

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["Users API"])

PUBLIC_FIELDS = (
    "id", "email", "first_name", "last_name", "role",
    "subscription_status", "subscription_end_date", "created_at", "updated_at",
)


class UpdateProfileRequest(BaseModel):
    firstName: str = Field(min_length=1, max_length=100)
    lastName: str = Field(min_length=1, max_length=100)


class UpdatePasswordRequest(BaseModel):
    newPassword: str = Field(min_length=8)

    @field_validator("newPassword")
    def password_strength(cls, v: str) -> str:
        return validate_password_strength(v)


def public_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    return {k: user.get(k) for k in PUBLIC_FIELDS}


@router.get("/me")
def me(user: Dict[str, Any] = Depends(require_user)):
    return {"user": public_profile(user)}


@router.put("/profile")
def update_profile(body: UpdateProfileRequest, user: Dict[str, Any] = Depends(require_user)):
    updated = profiles_repository.update_profile(user["id"], {
        "first_name": body.firstName.strip(),
        "last_name": body.lastName.strip(),
    })
    if not updated:
        raise HTTPException(status_code=500, detail="Failed to update profile")
    return {"message": "Profile updated successfully", "user": public_profile({**user, **updated})}


@router.put("/password")
def update_password(body: UpdatePasswordRequest, user: Dict[str, Any] = Depends(require_user)):
    """Met à jour le mot de passe via GoTrue avec le token de la session courante."""
    resp = profiles_repository.update_password(user["token"], body.newPassword)
    if 200 <= resp.status_code < 300:
        return {"message": "Password updated successfully"}
    try:
        payload = resp.json()
        msg = payload.get("msg") or payload.get("message") or payload.get("error_description") or payload.get("error")
    except ValueError:
        msg = resp.text
    logger.warning("profiles.update_password rejected user_id=%s status=%s", user.get("id"), resp.status_code)
    raise HTTPException(status_code=400, detail=msg or f"Password update failed (status {resp.status_code})")
