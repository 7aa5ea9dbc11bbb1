# printorder/core/exceptions.py
"""
Domain errors raised by the order pipeline and their HTTP mapping.

  - OrderValidationError -> 400, every field error at once
  - OrderNotFoundError   -> 404
  - StorageError         -> 502, collaborator message preserved
  - StorageTimeoutError  -> 504

A partially created order (order row saved, item rows not) is NOT an error;
see SubmissionResult in services/order_pipeline.py. The exception is a
cancellation arriving during the item insert: SubmissionCancelledError
carries the order id instead.
"""
import asyncio

from fastapi import Request, status
from fastapi.responses import JSONResponse

from printorder.schemas.order import FieldError


class OrderValidationError(Exception):
    """Payload failed validation. Carries the full list of field errors."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        super().__init__(f"{len(errors)} validation error(s)")


class OrderNotFoundError(Exception):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class StorageError(Exception):
    """The storage collaborator call itself failed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class StorageTimeoutError(StorageError):
    """A storage call did not finish before the caller's deadline."""


class SubmissionCancelledError(asyncio.CancelledError):
    """
    Submit was cancelled after the order row was created.

    Still a CancelledError, so task cancellation behaves as usual; whoever
    awaits the task can read `order_id` to find the order without items.
    """

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} created but item insert was cancelled")


async def validation_error_handler(
    request: Request, exc: OrderValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [e.model_dump() for e in exc.errors]},
    )


async def not_found_handler(request: Request, exc: OrderNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Order not found", "id": exc.order_id},
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    status_code = (
        status.HTTP_504_GATEWAY_TIMEOUT
        if isinstance(exc, StorageTimeoutError)
        else status.HTTP_502_BAD_GATEWAY
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message})
