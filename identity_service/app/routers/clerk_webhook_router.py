from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.core.database import get_db
from shared.helpers.webhook_signature import raw_body
from ..services import clerk_webhook_service

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


@router.post("/clerk")
def clerk_webhook(request: Request, payload: bytes = Depends(raw_body), db: Session = Depends(get_db)):
    return clerk_webhook_service.process_event(db, payload, request.headers)
