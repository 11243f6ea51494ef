"""
Product Repository - Data Access Layer
"""
from typing import List, Dict, Any

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.models.product import Product

# The driver raises OverflowError, unwrapped, for ids and values wider than its integer type.
STORE_ERRORS = (SQLAlchemyError, OverflowError)


class PersistenceError(Exception):
    """Raised for any failure of the product store: missing row, constraint or connection."""
    pass


class ProductRepository:
    """Repository for Product CRUD operations"""

    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Product]:
        """Get all products, newest first"""
        try:
            return (
                self.db.query(Product)
                .order_by(Product.created_at.desc(), Product.id.desc())
                .all()
            )
        except STORE_ERRORS as e:
            self.db.rollback()
            raise PersistenceError(f"Could not list products: {e}") from e

    def create(self, fields: Dict[str, Any]) -> Product:
        """Insert a new product"""
        product = Product(**fields)
        try:
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
        except STORE_ERRORS as e:
            self.db.rollback()
            raise PersistenceError(f"Could not create product: {e}") from e
        return product

    def update(self, product_id: int, fields: Dict[str, Any]) -> Product:
        """Replace the editable fields of an existing product"""
        try:
            product = self.db.get(Product, product_id)
            if product is None:
                raise PersistenceError(f"Product {product_id} does not exist")

            for field, value in fields.items():
                setattr(product, field, value)

            self.db.commit()
            self.db.refresh(product)
        except STORE_ERRORS as e:
            self.db.rollback()
            raise PersistenceError(f"Could not update product {product_id}: {e}") from e
        return product

    def delete(self, product_id: int) -> None:
        """Delete a product by primary key"""
        try:
            product = self.db.get(Product, product_id)
            if product is None:
                raise PersistenceError(f"Product {product_id} does not exist")

            self.db.delete(product)
            self.db.commit()
        except STORE_ERRORS as e:
            self.db.rollback()
            raise PersistenceError(f"Could not delete product {product_id}: {e}") from e
