"""API routes for signups and digest delivery."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...errors import InvalidEmailError
from ..auth import require_api_key

logger = logging.getLogger(__name__)
router = APIRouter()


class EmailRequest(BaseModel):
    """Request body carrying a single email address."""
    email: Optional[str] = None


def _invalid_email() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid email"})


@router.post("/signup")
def signup(request: Request, body: Optional[EmailRequest] = None):
    """Store a subscriber. Signing up twice is reported as success."""
    store = request.app.state.store
    try:
        result = store.add_subscriber(body.email if body else None)
    except InvalidEmailError:
        return _invalid_email()

    if result.already_exists:
        return {"ok": True, "message": "Email already saved"}
    return {"ok": True}


@router.post("/send-updates", dependencies=[Depends(require_api_key)])
async def send_updates(request: Request):
    """Email the digest to every subscriber."""
    result = await request.app.state.dispatcher.dispatch_all()
    return {"ok": True, "sent": result.sent}


@router.get("/digest")
async def preview_digest(request: Request):
    """Return the current digest without sending it."""
    digest = await request.app.state.dispatcher.preview()
    return {
        "ok": True,
        "summary": digest.text,
        "events": [event.raw for event in digest.events if event.raw is not None],
    }


@router.post("/send-to")
async def send_to(request: Request, body: Optional[EmailRequest] = None):
    """Email the digest to one address."""
    try:
        outcome = await request.app.state.dispatcher.send_to_one(body.email if body else None)
    except InvalidEmailError:
        return _invalid_email()
    return {"ok": True, "message": f"Digest sent to {outcome.email}"}
