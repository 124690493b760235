"""Formulaire de contact (public) et gestion des messages (admin)."""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from printstream.contact import repository as contact_repository
from printstream.utils.errors import server_error
from printstream.utils.security import require_admin
from printstream.utils.validators import validate_email

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/contact", tags=["Contact API"])


class ContactRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


class StatusRequest(BaseModel):
    status: Optional[str] = None


def _with_created_at(row: Dict[str, Any]) -> Dict[str, Any]:
    return {**row, "createdAt": row.get("created_at")}


@router.get("", dependencies=[Depends(require_admin)])
def list_messages() -> Dict[str, List[Dict[str, Any]]]:
    try:
        rows = contact_repository.list_messages()
    except Exception as e:
        logger.exception("contact.views.list_messages failed")
        raise server_error(e)
    return {"messages": [_with_created_at(r) for r in rows]}


@router.post("", status_code=201)
def submit_message(body: ContactRequest):
    name = (body.name or "").strip()
    email = (body.email or "").strip()
    message = (body.message or "").strip()
    if not name or not email or not message:
        raise HTTPException(status_code=400, detail="Missing required fields")
    if not validate_email(email):
        raise HTTPException(status_code=400, detail="Please enter a valid email address")
    try:
        data = contact_repository.insert_message({
            "name": name,
            "email": email,
            "subject": (body.subject or "").strip() or None,
            "message": message,
        })
    except Exception as e:
        logger.exception("contact.views.submit_message failed")
        raise server_error(e)
    return {"message": "Message sent successfully", "data": data}


@router.put("/{message_id}/status", dependencies=[Depends(require_admin)])
def update_status(message_id: str, body: StatusRequest):
    """Passe un message à new / read / replied (admin)."""
    if body.status not in contact_repository.MESSAGE_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    try:
        data = contact_repository.update_status(message_id, body.status)
    except Exception as e:
        logger.exception("contact.views.update_status failed id=%s", message_id)
        raise server_error(e)
    if not data:
        raise HTTPException(status_code=404, detail="Message not found")
    return {"message": "Status updated successfully", "data": data}
