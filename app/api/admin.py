from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.api.products import get_product_service
from app.schemas.product import validate_product
from app.services.product_service import ProductService
from app.utils.cache import cache_service, PAGE_PREFIX, ADMIN_PATH

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(prefix=ADMIN_PATH, tags=["Admin"])

BLANK_PRODUCT = {"name": "", "description": "", "price": 0, "stock": 0}

# Banners the listing may show after a redirect, keyed by the ?error= code.
ERROR_MESSAGES = {
    "delete_failed": "Failed to delete product",
}


def load_listing(service: ProductService) -> List[Dict[str, Any]]:
    """
    Return the admin listing, from cache when it is still fresh.

    A miss loads the rows through the service and caches them until the
    next mutation invalidates the page.
    """
    cached_rows = cache_service.get(PAGE_PREFIX, ADMIN_PATH)
    if cached_rows is not None:
        return cached_rows

    rows = [p.model_dump(mode="json") for p in service.list_products()]
    cache_service.set(PAGE_PREFIX, ADMIN_PATH, rows)
    return rows


def _to_number(value: str, kind: type) -> Any:
    """Read a posted field as ``kind``; unreadable text is left for the schema to reject."""
    try:
        return kind(value.strip())
    except ValueError:
        return value


def _form_data(name: str, description: str, price: str, stock: str) -> Dict[str, Any]:
    return {
        "name": name,
        "description": description or None,
        "price": _to_number(price, float),
        "stock": _to_number(stock, int),
    }


def _render(
    request: Request,
    products: List[Dict[str, Any]],
    form: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "admin.html",
        {"products": products, "form": form, "error": error},
        status_code=status_code,
    )


def _form_state(
    values: Dict[str, Any],
    product_id: Optional[int] = None,
    errors: Optional[Dict[str, str]] = None,
    server_error: Optional[str] = None,
) -> Dict[str, Any]:
    """State of the modal form: blank for create, bound to a product for edit."""
    return {
        "product_id": product_id,
        "values": values,
        "errors": errors or {},
        "server_error": server_error,
    }


def _submit(
    request: Request,
    service: ProductService,
    data: Dict[str, Any],
    product_id: Optional[int] = None,
):
    """Validate the form, run the create or update action and answer the browser."""
    _, errors = validate_product(data)
    if errors:
        return _render(
            request,
            load_listing(service),
            form=_form_state(data, product_id, errors=errors),
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )

    if product_id is None:
        result = service.create_product(data)
    else:
        result = service.update_product(product_id, data)

    if result.error:
        return _render(
            request,
            load_listing(service),
            form=_form_state(data, product_id, errors=result.field_errors, server_error=result.error),
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    return RedirectResponse(ADMIN_PATH, status_code=status.HTTP_303_SEE_OTHER)


@router.get("", response_class=HTMLResponse, name="admin_page")
def admin_page(
    request: Request,
    modal: Optional[str] = None,
    edit: Optional[str] = None,
    error: Optional[str] = None,
    service: ProductService = Depends(get_product_service),
):
    """
    Product inventory page.

    ``?modal=new`` opens the add form, ``?edit=<id>`` opens the edit form
    for a listed product; an id that is not listed, or not a number, leaves
    the page idle. ``?error=<code>`` shows the banner for a known code.
    A listing failure is left to the application error handler.
    """
    products = load_listing(service)

    form = None
    if edit is not None:
        edit_id = _to_number(edit, int)
        product = next((p for p in products if p["id"] == edit_id), None)
        if product is not None:
            values = {k: product[k] for k in BLANK_PRODUCT}
            values["description"] = values["description"] or ""
            form = _form_state(values, product_id=edit_id)
    elif modal == "new":
        form = _form_state(dict(BLANK_PRODUCT))

    return _render(request, products, form=form, error=ERROR_MESSAGES.get(error))


@router.post("/products", response_class=HTMLResponse)
def create_product_form(
    request: Request,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    stock: str = Form(""),
    service: ProductService = Depends(get_product_service),
):
    data = _form_data(name, description, price, stock)
    return _submit(request, service, data)


@router.post("/products/{product_id}", response_class=HTMLResponse)
def update_product_form(
    request: Request,
    product_id: int,
    name: str = Form(""),
    description: str = Form(""),
    price: str = Form(""),
    stock: str = Form(""),
    service: ProductService = Depends(get_product_service),
):
    data = _form_data(name, description, price, stock)
    return _submit(request, service, data, product_id=product_id)


@router.post("/products/{product_id}/delete")
def delete_product_form(
    product_id: int,
    service: ProductService = Depends(get_product_service),
):
    """Delete after the browser-side confirmation; always lands back on the listing."""
    result = service.delete_product(product_id)
    target = ADMIN_PATH
    if result.error:
        target = f"{ADMIN_PATH}?error=delete_failed"
    return RedirectResponse(target, status_code=status.HTTP_303_SEE_OTHER)
