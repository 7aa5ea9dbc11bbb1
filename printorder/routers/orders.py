# printorder/routers/orders.py
import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from printorder.core.auth import StaffMember, require_permission
from printorder.core.dependencies import get_pipeline
from printorder.core.email_client import send_partial_order_alert
from printorder.models.order import OrderRecord
from printorder.schemas.order import (
    OrderCreated,
    OrderPage,
    OrderPartiallyCreated,
    OrderQuery,
)
from printorder.services.order_pipeline import OrderIntakePipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


# -------- Public order form --------


@router.post(
    "",
    response_model=OrderCreated,
    responses={
        status.HTTP_207_MULTI_STATUS: {"model": OrderPartiallyCreated},
        status.HTTP_400_BAD_REQUEST: {"description": "Validation errors"},
    },
)
async def submit_order(
    background_tasks: BackgroundTasks,
    payload: Any = Body(...),
    pipeline: OrderIntakePipeline = Depends(get_pipeline),
):
    """
    Submit a print order from the public form.

    Responses:
      - 200 {id}: order and items saved
      - 207 {id, warning}: order saved, items not; an operator alert is queued
      - 400 {errors: [{path, message}]}: every validation error at once

    Auth:
      - None (public form).
    """
    result = await pipeline.submit(payload)
    if result.partial:
        background_tasks.add_task(send_partial_order_alert, result.id, result.warning)
        return JSONResponse(
            status_code=status.HTTP_207_MULTI_STATUS,
            content=OrderPartiallyCreated(id=result.id, warning=result.warning).model_dump(),
            background=background_tasks,
        )
    return OrderCreated(id=result.id)


# -------- Back office --------


@router.get(
    "",
    response_model=OrderPage,
    dependencies=[Depends(require_permission("orders:view"))],
)
async def list_orders(
    q: str | None = None,
    status_code: str | None = Query(default=None, alias="statusCode"),
    payment_status_code: str | None = Query(default=None, alias="paymentStatusCode"),
    service_type_code: str | None = Query(default=None, alias="serviceTypeCode"),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=10, ge=1, le=100),
    pipeline: OrderIntakePipeline = Depends(get_pipeline),
):
    """
    List orders, newest first (without items).

    Filters: q (code / customer / shipping name), statusCode,
    paymentStatusCode, serviceTypeCode. Pagination via page/size.
    """
    query = OrderQuery(
        q=q,
        status_code=status_code,
        payment_status_code=payment_status_code,
        service_type_code=service_type_code,
        page=page,
        size=size,
    )
    return await pipeline.list_orders(query)


@router.get(
    "/{order_id}",
    response_model=OrderRecord,
    dependencies=[Depends(require_permission("orders:view"))],
)
async def get_order(
    order_id: int,
    pipeline: OrderIntakePipeline = Depends(get_pipeline),
):
    """Get one order with its items."""
    return await pipeline.fetch(order_id)


@router.api_route(
    "/{order_id}",
    methods=["PUT", "PATCH"],
    response_model=OrderRecord,
)
async def update_order(
    order_id: int,
    payload: Any = Body(...),
    member: StaffMember = Depends(require_permission("orders:edit")),
    pipeline: OrderIntakePipeline = Depends(get_pipeline),
):
    """
    Partial update of an order.

    Only the fields sent are validated and changed. Sending `items`
    replaces all of the order's items.
    """
    record = await pipeline.update(order_id, payload)
    logger.info("Order %s updated by %s (%s)", order_id, member.user_name, member.email)
    return record
