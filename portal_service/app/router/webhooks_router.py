# app/router/webhooks_router.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.core.database import get_db
from shared.helpers.webhook_signature import raw_body
from ..schemas.tipalti_schemas import WebhookAck
from ..services import webhook_service

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


@router.post("/tipalti", response_model=WebhookAck)
def tipalti_webhook(request: Request, payload: bytes = Depends(raw_body), db: Session = Depends(get_db)):
    return webhook_service.process_tipalti(db, payload, request.headers)


@router.post("/docuseal", response_model=WebhookAck)
def docuseal_webhook(request: Request, payload: bytes = Depends(raw_body), db: Session = Depends(get_db)):
    return webhook_service.process_docuseal(db, payload, request.headers)
