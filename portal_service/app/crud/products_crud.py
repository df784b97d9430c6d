# app/crud/products_crud.py
import uuid

from fastapi import status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from shared.core.authorization import AccessDecision
from shared.helpers.json_response_helper import error_response, not_found
from shared.models.activity_log import log_activity
from shared.utils.app_status_code import AppStatusCode
from ..models.products import Product
from ..schemas.products_schemas import (
    ProductApprovalUpdate,
    ProductCreate,
    ProductListResponse,
    ProductOut,
    ProductRequest,
    ProductUpdate,
)


def build_product_filters(params: ProductRequest, decision: AccessDecision):
    filters = [Product.is_deleted == False]

    # unapproved catalog items are internal only
    if not decision.is_privileged:
        filters.append(Product.is_approved == True)
    elif params.approved is not None:
        filters.append(Product.is_approved == params.approved)

    if params.category and params.category.lower() != "all":
        filters.append(Product.category == params.category)

    if params.search:
        search_term = f"%{params.search}%"
        filters.append(or_(
            Product.name.ilike(search_term),
            Product.sku.ilike(search_term),
            Product.manufacturer.ilike(search_term),
        ))
    return filters


def get_products(db: Session, params: ProductRequest, decision: AccessDecision) -> ProductListResponse:
    base_query = db.query(Product).filter(*build_product_filters(params, decision))
    total = base_query.with_entities(func.count(Product.id)).scalar()
    products = (
        base_query
        .order_by(Product.sort_order.asc(), Product.name.asc())
        .offset(params.skip)
        .limit(params.limit)
        .all()
    )
    return ProductListResponse(data=[ProductOut.model_validate(p) for p in products], total=total)


def get_product_by_id(db: Session, product_id):
    return db.query(Product).filter(Product.id == product_id, Product.is_deleted == False).first()


def get_product(db: Session, product_id: uuid.UUID, decision: AccessDecision) -> Product:
    product = get_product_by_id(db, product_id)
    if not product or (not product.is_approved and not decision.is_privileged):
        return not_found("Product")
    return product


def _ensure_unique_sku(db: Session, sku: str, product_id=None):
    query = db.query(Product.id).filter(Product.sku == sku)
    if product_id is not None:
        query = query.filter(Product.id != product_id)
    if query.first():
        return error_response(
            message=f"SKU '{sku}' already exists",
            status_code=AppStatusCode.INVALID_INPUT,
            http_status=status.HTTP_400_BAD_REQUEST
        )


def create_product(db: Session, payload: ProductCreate, decision: AccessDecision) -> Product:
    if payload.sku:
        _ensure_unique_sku(db, payload.sku)
    data = payload.model_dump()
    # column defaults apply where nothing was sent
    product = Product(**{k: v for k, v in data.items() if v is not None})
    db.add(product)
    db.flush()
    log_activity(db, "product", product.id, "created",
                 description=f"Product {product.name} created",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(product)
    return product


def update_product(db: Session, product_id: uuid.UUID, payload: ProductUpdate) -> Product:
    product = get_product_by_id(db, product_id)
    if not product:
        return not_found("Product")
    update_data = payload.model_dump(exclude_unset=True)
    if update_data.get("sku"):
        _ensure_unique_sku(db, update_data["sku"], product.id)
    for key, value in update_data.items():
        setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return product


def set_product_approval(db: Session, product_id: uuid.UUID, payload: ProductApprovalUpdate, decision: AccessDecision) -> Product:
    product = get_product_by_id(db, product_id)
    if not product:
        return not_found("Product")
    product.is_approved = payload.is_approved
    log_activity(db, "product", product.id,
                 "approved" if payload.is_approved else "unapproved",
                 user_id=decision.user.id)
    db.commit()
    db.refresh(product)
    return product


def delete_product(db: Session, product_id: uuid.UUID, decision: AccessDecision) -> Product:
    product = get_product_by_id(db, product_id)
    if not product:
        return not_found("Product")
    product.is_deleted = True
    log_activity(db, "product", product.id, "deleted", user_id=decision.user.id)
    db.commit()
    db.refresh(product)
    return product
