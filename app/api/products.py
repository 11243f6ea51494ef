from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Any, List

from app.database import get_db
from app.services.product_service import ProductService
from app.schemas.product import ActionResult, ProductRead

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    """Dependency to get ProductService instance"""
    return ProductService(db)


def _action_response(result: ActionResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """Map an action result onto an HTTP status, keeping the result as the body."""
    if result.success:
        code = success_status
    elif result.is_validation_error:
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=code, content=result.model_dump(exclude_none=True))


@router.get(
    "/",
    response_model=List[ProductRead],
    summary="List all products",
    description="Get every product, newest first."
)
def list_products(service: ProductService = Depends(get_product_service)):
    """
    List products ordered by creation time, descending.

    A store failure is answered with 500 and a generic error message.
    """
    return service.list_products()


@router.post(
    "/",
    summary="Create a new product",
    description="Create a product with name, optional description, price and stock."
)
def create_product(
    payload: Any = Body(...),
    service: ProductService = Depends(get_product_service)
):
    """
    Create a new product.

    - **name**: Product name (required, non-empty)
    - **description**: Optional text
    - **price**: At least 0.01
    - **stock**: Non-negative integer

    Invalid input returns 422 with `{"error": "Invalid data", "field_errors": {...}}`.
    """
    return _action_response(service.create_product(payload), status.HTTP_201_CREATED)


@router.put(
    "/{product_id}",
    summary="Update a product",
    description="Replace name, description, price and stock of a product."
)
def update_product(
    product_id: int,
    payload: Any = Body(...),
    service: ProductService = Depends(get_product_service)
):
    """
    Update a product.

    All four editable fields are replaced. Cache is invalidated after update.
    """
    return _action_response(service.update_product(product_id, payload))


@router.delete(
    "/{product_id}",
    summary="Delete a product",
    description="Delete a product by ID. The cached admin listing is also cleared."
)
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service)
):
    """Delete a product."""
    return _action_response(service.delete_product(product_id))
