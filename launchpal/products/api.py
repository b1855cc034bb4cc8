from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from launchpal.shared.db import get_db
from launchpal.shared.auth import require_scope
from launchpal.products.schemas import ProductCreate, ProductUpdate, ProductOut, ProductCreated
from launchpal.products.service import (
    create_product,
    get_product,
    list_products,
    update_product,
    delete_product,
)

router = APIRouter(prefix="/api/products", tags=["Products"])

@router.post("", response_model=ProductCreated, status_code=201)
async def api_create_product(payload: ProductCreate, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    product = await create_product(db, user, payload)
    return {"id": product.id, "platformId": product.platform_id, "url": product.url}

@router.get("", response_model=list[ProductOut])
def api_list_products(
    platform: str | None = Query(None),
    user = Depends(require_scope("read")),
    db: Session = Depends(get_db),
):
    return list_products(db, user.id, platform)

@router.get("/{product_id}", response_model=ProductOut)
def api_get_product(product_id: str, user = Depends(require_scope("read")), db: Session = Depends(get_db)):
    return get_product(db, user.id, product_id)

@router.patch("/{product_id}", response_model=ProductOut)
def api_update_product(product_id: str, payload: ProductUpdate, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    return update_product(db, user.id, product_id, payload)

@router.delete("/{product_id}", status_code=204)
def api_delete_product(product_id: str, user = Depends(require_scope("write")), db: Session = Depends(get_db)):
    delete_product(db, user.id, product_id)
    return
