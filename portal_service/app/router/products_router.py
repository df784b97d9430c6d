# app/router/products_router.py
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.authorization import PRIVILEGED, AccessDecision, require_roles
from shared.core.database import get_db
from ..crud import products_crud as crud
from ..schemas.products_schemas import (
    ProductApprovalUpdate,
    ProductCreate,
    ProductListResponse,
    ProductOut,
    ProductRequest,
    ProductUpdate,
)

router = APIRouter(prefix="/api/products", tags=["Products"])


# ---------------- Catalog (partners only see approved items) ----------------
@router.get("", response_model=ProductListResponse)
def get_products(
    params: ProductRequest = Depends(),
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_products(db, params, current)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles())
):
    return crud.get_product(db, product_id, current)


@router.post("", response_model=ProductOut)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.create_product(db, payload, current)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.update_product(db, product_id, payload)


@router.patch("/{product_id}/approval", response_model=ProductOut)
def set_product_approval(
    product_id: UUID,
    payload: ProductApprovalUpdate,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.set_product_approval(db, product_id, payload, current)


@router.delete("/{product_id}", response_model=ProductOut)
def delete_product(
    product_id: UUID,
    db: Session = Depends(get_db),
    current: AccessDecision = Depends(require_roles(*PRIVILEGED))
):
    return crud.delete_product(db, product_id, current)
