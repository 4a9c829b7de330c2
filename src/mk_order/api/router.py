"""mk_order REST endpoints.

POST   /orders                                         — place an order (reserves stock)
GET    /orders                                         — list, newest first, cursor pagination
GET    /orders/{order_id}                              — full order
DELETE /orders/{order_id}                              — delete order (releases stock if active)
PUT    /orders/{order_id}/status                       — status transition
DELETE /orders/{order_id}/items/{item_id}              — remove one line
PUT    /orders/{order_id}/items/{item_id}/quantity     — change line quantity
PUT    /orders/{order_id}/items/{item_id}/status-checks — toggle fulfillment checklist

item_id is the listing id the line was bought from.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mk_common.database import get_db_session
from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.auth.dependencies import Caller, get_current_caller
from src.mk_order.application.mutation_service import OrderMutationService
from src.mk_order.application.schemas import (
    CreateOrderRequest,
    SetStatusRequest,
    StatusChecksRequest,
    UpdateQuantityRequest,
)
from src.mk_order.application.service import OrderApplicationService
from src.mk_order.application.status_service import OrderStatusService

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()
_status_service = OrderStatusService()
_mutation_service = OrderMutationService()


@router.post("", status_code=201)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.create_order(db, body)
    return success_response(result, request)


@router.get("")
async def list_orders(
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    status: str | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_orders(db, status, cursor, limit)
    return success_response(result, request)


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_order(db, order_id)
    return success_response(result, request)


@router.delete("/{order_id}")
async def delete_order(
    order_id: str,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.delete_order(db, order_id)
    return success_response(result, request)


@router.put("/{order_id}/status")
async def set_order_status(
    order_id: str,
    body: SetStatusRequest,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _status_service.set_status(db, order_id, body.status)
    return success_response(result, request)


@router.delete("/{order_id}/items/{item_id}")
async def delete_order_item(
    order_id: str,
    item_id: str,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _mutation_service.delete_item(db, order_id, item_id)
    return success_response(result, request)


@router.put("/{order_id}/items/{item_id}/quantity")
async def update_order_item_quantity(
    order_id: str,
    item_id: str,
    body: UpdateQuantityRequest,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _mutation_service.update_item_quantity(
        db, order_id, item_id, body.new_quantity
    )
    return success_response(result, request)


@router.put("/{order_id}/items/{item_id}/status-checks")
async def update_order_item_status_checks(
    order_id: str,
    item_id: str,
    body: StatusChecksRequest,
    request: Request,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _mutation_service.update_item_status_checks(
        db, order_id, item_id, body.status_checks
    )
    return success_response(result, request)
