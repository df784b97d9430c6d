# app/router/tipalti_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_session
from shared.core.database import get_db
from ..schemas.tipalti_schemas import TipaltiActionRequest, TipaltiQuery, TipaltiResponse
from ..services import tipalti_service
from ..services.tipalti_service import TipaltiClient, get_tipalti_client

router = APIRouter(prefix="/api/tipalti", tags=["Tipalti"],
                   dependencies=[Depends(validate_session)])


@router.get("", response_model=TipaltiResponse)
def tipalti_get(
    params: TipaltiQuery = Depends(),
    client: TipaltiClient = Depends(get_tipalti_client),
):
    return tipalti_service.handle_get(client, params)


@router.post("", response_model=TipaltiResponse)
def tipalti_post(
    payload: TipaltiActionRequest,
    db: Session = Depends(get_db),
    client: TipaltiClient = Depends(get_tipalti_client),
):
    return tipalti_service.handle_post(db, client, payload)
