# storefront/services/catalog_reader.py
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import ProductNotFoundError
from storefront.repos.product_repo import ProductRepo


class CatalogReader:
    """
    Odczyt katalogu produktow (tylko read).
    get_products_for_update uzywany wylacznie przez checkout w jego transakcji.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def get_product_by_id(self, product_id: int) -> ProductModel:
        product = self.repo.get_product(product_id)
        if not product:
            raise ProductNotFoundError(f"Product {product_id} not found")
        return product

    def list_products(self, category_id: int | None = None) -> list[ProductModel]:
        return self.repo.list_products(category_id)

    def get_products_for_update(self, product_ids: list[int]) -> dict[int, ProductModel]:
        return self.repo.get_products_for_update(product_ids)
