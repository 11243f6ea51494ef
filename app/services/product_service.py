from sqlalchemy.orm import Session
from typing import Any, List
import logging

from app.repositories.product_repository import ProductRepository, PersistenceError
from app.schemas.product import ActionResult, ProductRead, validate_product
from app.utils.cache import cache_service, ADMIN_PATH

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Exception raised when the product listing cannot be loaded."""
    pass


class ProductService:
    """
    Service class for the product admin actions.

    This service handles:
    - Listing products, newest first
    - Creating, updating and deleting products
    - Cache invalidation of the admin listing

    Mutations never raise: validation and store failures come back as an
    ActionResult with a generic error message. Listing failures raise
    FetchError, since there is nothing sensible to render without rows.
    """

    def __init__(self, db: Session):
        self.repository = ProductRepository(db)

    def list_products(self) -> List[ProductRead]:
        """
        Get all products ordered by creation time, newest first.

        Returns:
            Products with the stored decimal price converted to float

        Raises:
            FetchError: If the store fails; no partial results are returned
        """
        try:
            products = self.repository.list()
        except PersistenceError as e:
            logger.error(f"Listing products failed: {e}")
            raise FetchError("Failed to fetch products") from e

        # ProductRead.price is a float, so the stored Decimal is converted here
        return [ProductRead.model_validate(p) for p in products]

    def create_product(self, data: Any) -> ActionResult:
        """
        Validate and insert a new product.

        Args:
            data: Submitted product fields

        Returns:
            Success, "Invalid data" with field errors, or a store failure
        """
        product_data, errors = validate_product(data)
        if product_data is None:
            return ActionResult.fail("Invalid data", errors)

        try:
            product = self.repository.create(product_data.model_dump())
        except PersistenceError as e:
            logger.warning(f"Create product failed: {e}")
            return ActionResult.fail("Failed to create product")

        logger.info(f"Created product #{product.id} '{product.name}'")
        self._invalidate_listing()
        return ActionResult.ok()

    def update_product(self, product_id: int, data: Any) -> ActionResult:
        """
        Validate and fully replace the editable fields of a product.

        A missing product takes the same path as any other store failure.
        """
        product_data, errors = validate_product(data)
        if product_data is None:
            return ActionResult.fail("Invalid data", errors)

        try:
            self.repository.update(product_id, product_data.model_dump())
        except PersistenceError as e:
            logger.warning(f"Update of product #{product_id} failed: {e}")
            return ActionResult.fail("Failed to update product")

        logger.info(f"Updated product #{product_id}")
        self._invalidate_listing()
        return ActionResult.ok()

    def delete_product(self, product_id: int) -> ActionResult:
        """Delete a product; deleting a missing id is a store failure."""
        try:
            self.repository.delete(product_id)
        except PersistenceError as e:
            logger.warning(f"Delete of product #{product_id} failed: {e}")
            return ActionResult.fail("Failed to delete product")

        logger.info(f"Deleted product #{product_id}")
        self._invalidate_listing()
        return ActionResult.ok()

    def _invalidate_listing(self) -> None:
        """Invalidate the cached admin listing."""
        cache_service.revalidate_path(ADMIN_PATH)
