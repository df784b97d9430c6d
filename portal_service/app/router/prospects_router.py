# app/router/prospects_router.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import PRIVILEGED, AccessDecision, require_roles
from shared.core.database import get_db
from ..crud import prospects_crud as crud
from ..schemas.prospects_schemas import (
    ProspectActivityCreate,
    ProspectActivityListResponse,
    ProspectActivityOut,
    ProspectActivityResponse,
    ProspectConvertResponse,
    ProspectCreate,
    ProspectListResponse,
    ProspectOut,
    ProspectRequest,
    ProspectResponse,
    ProspectUpdate,
)

router = APIRouter(prefix="/api/crm/prospects", tags=["CRM Prospects"],
                   dependencies=[Depends(require_roles(*PRIVILEGED))])


@router.get("", response_model=ProspectListResponse)
def get_prospects(
    params: ProspectRequest = Depends(),
    db: Session = Depends(get_db),
):
    return crud.get_prospects(db, params)


@router.post("", response_model=ProspectResponse)
def create_prospect(
    payload: ProspectCreate,
    db: Session = Depends(get_db),
):
    prospect = crud.create_prospect(db, payload)
    return ProspectResponse(prospect=ProspectOut.model_validate(prospect))


@router.get("/{prospect_id}", response_model=ProspectResponse)
def get_prospect(
    prospect_id: UUID,
    db: Session = Depends(get_db),
):
    prospect = crud.get_prospect(db, prospect_id)
    return ProspectResponse(prospect=ProspectOut.model_validate(prospect))


@router.patch("/{prospect_id}", response_model=ProspectResponse)
def update_prospect(
    prospect_id: UUID,
    payload: ProspectUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    prospect = crud.update_prospect(db, prospect_id, payload, current)
    return ProspectResponse(prospect=ProspectOut.model_validate(prospect))


@router.delete("/{prospect_id}", response_model=ProspectResponse)
def delete_prospect(
    prospect_id: UUID,
    db: Session = Depends(get_db),
):
    return ProspectResponse(prospect=crud.delete_prospect(db, prospect_id))


# ---------------- Activity log ----------------
@router.get("/{prospect_id}/activity", response_model=ProspectActivityListResponse)
def get_activities(
    prospect_id: UUID,
    db: Session = Depends(get_db),
):
    return ProspectActivityListResponse(activities=crud.get_activities(db, prospect_id))


@router.post("/{prospect_id}/activity", response_model=ProspectActivityResponse)
def log_activity(
    prospect_id: UUID,
    payload: ProspectActivityCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    activity = crud.log_prospect_activity(db, prospect_id, payload, current)
    return ProspectActivityResponse(activity=ProspectActivityOut.model_validate(activity))


@router.post("/{prospect_id}/convert", response_model=ProspectConvertResponse)
def convert_prospect(
    prospect_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.convert_prospect(db, prospect_id, current)
