"""/api/orders: service order endpoints."""

from typing import Any

from fastapi import APIRouter, Body, Query, Request

from api.base import success_response
from api.middleware import request_id_of
from core.exceptions import NotFound
from core.models import ServiceOrder
from core.money import format_money
from core.services.order_service import OrderService


def serialize_order(order: ServiceOrder) -> dict[str, Any]:
    """JSON shape of an order, with display totals alongside exact amounts."""
    data = order.model_dump(mode="json")
    data["budget_display"] = order.budget_display
    data["balance_due"] = format_money(order.balance_due)
    for item, line_item in zip(data["line_items"], order.line_items):
        item["total_price_display"] = line_item.total_price_display
    return data


def create_orders_router(order_service: OrderService) -> APIRouter:
    router = APIRouter()

    @router.get("/orders")
    async def list_orders(
        request: Request,
        search: str | None = Query(None),
        status: str | None = Query(None),
        sort: str = Query("creation_date"),
        order: str = Query("desc", pattern="^(asc|desc)$"),
    ):
        orders = order_service.search(
            term=search,
            status=status,
            sort_by=sort,
            descending=order == "desc",
        )
        return success_response(
            [serialize_order(o) for o in orders], request_id=request_id_of(request)
        ).model_dump(mode="json")

    @router.get("/orders/{order_id}")
    async def get_order(request: Request, order_id: str):
        found = order_service.get_by_id(order_id)
        if found is None:
            raise NotFound(order_id)
        return success_response(
            serialize_order(found), request_id=request_id_of(request)
        ).model_dump(mode="json")

    @router.post("/orders", status_code=201)
    async def create_order(request: Request, payload: dict = Body(...)):
        saved = order_service.save(payload)
        return success_response(
            serialize_order(saved), request_id=request_id_of(request)
        ).model_dump(mode="json")

    @router.put("/orders/{order_id}")
    async def update_order(request: Request, order_id: str, payload: dict = Body(...)):
        saved = order_service.save(payload, existing_id=order_id)
        return success_response(
            serialize_order(saved), request_id=request_id_of(request)
        ).model_dump(mode="json")

    return router
