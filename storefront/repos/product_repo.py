# storefront/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(self, category_id: int | None = None) -> list[ProductModel]:
        stmt = select(ProductModel).order_by(ProductModel.id)
        if category_id is not None:
            stmt = stmt.where(ProductModel.category_id == category_id)
        return list(self.db.execute(stmt).scalars())

    def get_products_for_update(self, product_ids: list[int]) -> dict[int, ProductModel]:
        #sortowanie po id - stala kolejnosc blokad, bez deadlockow miedzy checkoutami
        rows = self.db.execute(
            select(ProductModel)
            .where(ProductModel.id.in_(sorted(product_ids)))
            .order_by(ProductModel.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalars()
        return {p.id: p for p in rows}
