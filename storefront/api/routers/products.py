# storefront/api/routers/products.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.schemas import ProductOut
from storefront.services.catalog_reader import CatalogReader

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductOut])
def list_products(
    category_id: int | None = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),
):
    return CatalogReader(db).list_products(category_id)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return CatalogReader(db).get_product_by_id(product_id)
