# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models.product import ProductModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

PRODUCTS = [
    {"name": "Keyboard", "unit_price": Decimal("199.99"), "stock": 25, "category_id": 1},
    {"name": "Mouse", "unit_price": Decimal("49.50"), "stock": 40, "category_id": 1},
    {"name": "Monitor", "unit_price": Decimal("899.00"), "stock": 10, "category_id": 2},
]


def seed(session_factory=SessionLocal) -> int:
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return 0
        db.add_all(ProductModel(**p) for p in PRODUCTS)
        db.commit()
        logger.info(f"Seeded {len(PRODUCTS)} products")
        return len(PRODUCTS)
    finally:
        db.close()
