"""
Records API - FastAPI routers for products, other items and orders.

All three collections share the same CRUD shape, so the routers are built
by one factory; products and orders add their own extra endpoints.
"""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Response
from pydantic import BaseModel, ConfigDict

from ..services.records_service import RecordNotFoundError, RecordStore, RecordValidationError
from ..services.pdf_export import build_order_receipt
from .state import AppState, get_state


# Pydantic models for API
class VariantIn(BaseModel):
    """A size/price row as entered on the product form."""
    size: str = ""
    price: Any = None


class ProductIn(BaseModel):
    """Request model for creating or replacing a product."""
    model_config = ConfigDict(extra='ignore')

    name: Optional[str] = None
    description: Optional[str] = None
    variants: Optional[list[VariantIn]] = None


class OtherItemIn(BaseModel):
    """Request model for other items; prices may arrive as form strings."""
    model_config = ConfigDict(extra='ignore')

    name: Optional[str] = None
    buyingPrice: Any = None
    sellingPrice: Any = None
    profit: Any = None
    description: Optional[str] = None


class OrderIn(BaseModel):
    """Request model for orders."""
    model_config = ConfigDict(extra='ignore')

    productName: Optional[str] = None
    productPrice: Any = None
    remainingPayment: Any = None
    paymentMethod: Optional[str] = None
    description: Optional[str] = None


def ok(data):
    return {"success": True, "data": data}


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def _invalid(e: RecordValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail={"errors": e.errors})


def build_crud_router(prefix: str, tag: str, store_name: str, payload_model) -> APIRouter:
    """CRUD endpoints over one ShopStores collection."""
    router = APIRouter(prefix=prefix, tags=[tag])

    def get_store(state: AppState = Depends(get_state)) -> RecordStore:
        return getattr(state.stores, store_name)

    @router.get("", name=f"list_{tag}")
    async def list_records(search: Optional[str] = None, store: RecordStore = Depends(get_store)):
        """List records, newest first, optionally filtered by a search term."""
        return ok([r.to_record() for r in store.search(search)])

    @router.post("", status_code=201, name=f"create_{tag}")
    async def create_record(payload: payload_model = Body(...), store: RecordStore = Depends(get_store)):
        try:
            record = store.create_record(payload.model_dump(exclude_unset=True))
        except RecordValidationError as e:
            raise _invalid(e)
        return ok(record.to_record())

    @router.get("/{record_id}", name=f"get_{tag}")
    async def get_record(record_id: str, store: RecordStore = Depends(get_store)):
        try:
            return ok(store.get_record(record_id).to_record())
        except RecordNotFoundError as e:
            raise _not_found(e)

    @router.put("/{record_id}", name=f"update_{tag}")
    async def update_record(record_id: str, payload: payload_model = Body(...),
                            store: RecordStore = Depends(get_store)):
        # Only fields present in the body are changed
        try:
            record = store.update_record(record_id, payload.model_dump(exclude_unset=True))
        except RecordNotFoundError as e:
            raise _not_found(e)
        except RecordValidationError as e:
            raise _invalid(e)
        return ok(record.to_record())

    @router.delete("/{record_id}", name=f"delete_{tag}")
    async def delete_record(record_id: str, store: RecordStore = Depends(get_store)):
        try:
            removed = store.delete_record(record_id)
        except RecordNotFoundError as e:
            raise _not_found(e)
        return ok(removed.to_record())

    return router


products_router = build_crud_router("/api/products", "products", "products", ProductIn)
others_router = build_crud_router("/api/others", "others", "others", OtherItemIn)
orders_router = build_crud_router("/api/orders", "orders", "orders", OrderIn)


@products_router.get("/{record_id}/perfume-prices")
async def get_perfume_prices(record_id: str, state: AppState = Depends(get_state)):
    """Derived perfume prices for one product; unavailable sizes are null."""
    try:
        product = state.stores.products.get_record(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    derived = state.engine.derive_for_product(product)
    return ok({"_id": product.record_id, "name": product.name,
               "has_data": derived.has_data, "prices": derived.as_dict()})


@orders_router.get("/{record_id}/receipt.pdf")
async def get_order_receipt(record_id: str, state: AppState = Depends(get_state)):
    try:
        order = state.stores.orders.get_record(record_id)
    except RecordNotFoundError as e:
        raise _not_found(e)
    pdf = build_order_receipt(order, state.settings)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="receipt-{record_id}.pdf"'},
    )
