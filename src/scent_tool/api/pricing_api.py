"""
Pricing API - ad-hoc price derivation and price list downloads.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import AliasChoices, BaseModel, Field

from ..services.price_list_service import filter_products, perfume_price_rows
from ..services.pdf_export import build_attar_price_list, build_perfume_price_list
from .state import AppState, get_state


router = APIRouter(prefix="/api", tags=["pricing"])


class VariantPrice(BaseModel):
    """A labelled unit price; price may be a number or a numeric string."""
    label: str = Field("", validation_alias=AliasChoices("label", "size"))
    unit_price: Any = Field(None, validation_alias=AliasChoices("unit_price", "unitPrice", "price"))


class DeriveRequest(BaseModel):
    """Request model for deriving prices from an ad-hoc variant list."""
    variants: list[VariantPrice] = []


@router.post("/pricing/derive")
async def derive(req: DeriveRequest, state: AppState = Depends(get_state)):
    """Derive perfume prices without storing anything."""
    derived = state.engine.derive([v.model_dump() for v in req.variants])
    return {"success": True, "data": {"has_data": derived.has_data, "prices": derived.as_dict()}}


@router.get("/pricing/schedule")
async def get_schedule(state: AppState = Depends(get_state)):
    """The markup schedule currently applied."""
    return {"success": True, "data": state.engine.schedule.to_frame().to_dict(orient="records")}


@router.get("/price-lists/perfume")
async def perfume_list(search: Optional[str] = None, state: AppState = Depends(get_state)):
    products = filter_products(state.stores.products.list_records(), state.engine, search, 'perfume')
    return {"success": True, "data": perfume_price_rows(products, state.engine)}


def _pdf_response(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/price-lists/attar.pdf")
async def attar_pdf(search: Optional[str] = None, state: AppState = Depends(get_state)):
    products = filter_products(state.stores.products.list_records(), state.engine, search, 'attar')
    pdf = build_attar_price_list(products, state.settings)
    return _pdf_response(pdf, f"{state.settings.shop_name.replace(' ', '-')}-Attar-Price-List.pdf")


@router.get("/price-lists/perfume.pdf")
async def perfume_pdf(search: Optional[str] = None, state: AppState = Depends(get_state)):
    products = filter_products(state.stores.products.list_records(), state.engine, search, 'perfume')
    pdf = build_perfume_price_list(products, state.engine, state.settings)
    return _pdf_response(pdf, f"{state.settings.shop_name.replace(' ', '-')}-Perfume-Price-List.pdf")


@router.get("/dashboard")
async def dashboard(state: AppState = Depends(get_state)):
    """Record counts for the home page."""
    return {"success": True, "data": state.stores.counts()}
