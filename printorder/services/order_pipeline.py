# printorder/services/order_pipeline.py
import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from printorder.core.exceptions import (
    OrderNotFoundError,
    OrderValidationError,
    StorageError,
    StorageTimeoutError,
    SubmissionCancelledError,
)
from printorder.models.order import (
    INITIAL_PAYMENT_STATUS_CODE,
    INITIAL_STATUS_CODE,
    OrderRecord,
)
from printorder.repositories.order_repo import OrderRepository
from printorder.schemas.order import OrderPage, OrderQuery, Pagination, SubmissionResult
from printorder.services.field_aliases import ORDER_ALIASES
from printorder.services.order_validator import OrderValidator
from printorder.services.row_mapper import (
    items_to_rows,
    order_to_row,
    patch_to_row,
    read_column,
    record_from_row,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SERVICE_TYPE_ALIAS = next(a for a in ORDER_ALIASES if a.field == "service_type_code")


class OrderIntakePipeline:
    """
    Orchestrates order intake: validate -> map -> store, and the reverse on read.

    Responsibilities:
      - run OrderValidator on raw payloads
      - map between domain orders and storage rows
      - sequence storage calls (order row first, then its item rows)
      - apply the caller's deadline to every storage call
      - report a partially saved order instead of hiding it

    Stateless between calls; the repository is injected.
    """

    def __init__(
        self,
        repo: OrderRepository,
        validator: OrderValidator | None = None,
        *,
        timeout: float | None = 10.0,
        read_retries: int = 1,
    ):
        self.repo = repo
        self.validator = validator or OrderValidator()
        self.timeout = timeout
        self.read_retries = read_retries

    # -------- Storage call helpers --------

    async def _call(self, call: Awaitable[T], timeout: float | None) -> T:
        """Await one storage call under the caller's deadline (or the default)."""
        limit = self.timeout if timeout is None else timeout
        if limit is None:
            return await call
        try:
            return await asyncio.wait_for(call, limit)
        except asyncio.TimeoutError as exc:
            raise StorageTimeoutError(f"Storage call timed out after {limit}s") from exc

    async def _read(self, make_call: Callable[[], Awaitable[T]], timeout: float | None) -> T:
        """
        Storage read with retry. Reads are idempotent, so a failed attempt is
        retried up to `read_retries` more times. Writes are never retried.
        """
        attempt = 0
        while True:
            try:
                return await self._call(make_call(), timeout)
            except StorageError as exc:
                if attempt >= self.read_retries:
                    raise
                attempt += 1
                logger.warning("Storage read failed (%s), retry %d", exc.message, attempt)

    # -------- Operations --------

    async def submit(self, raw: Any, timeout: float | None = None) -> SubmissionResult:
        """
        Validate and store a new order.

        Steps:
          1. Validate the raw payload (all errors at once).
          2. Insert the order row (status PENDING) and get its id.
          3. Batch insert the meaningful item rows tagged with that id.

        If step 3 fails or times out the order still exists; the id is
        returned together with a warning.

        Raises:
            OrderValidationError: payload is invalid.
            StorageError: the order row itself could not be created.
            SubmissionCancelledError: cancelled during step 3; carries the
                id of the order that was created without items.
        """
        result = self.validator.validate(raw)
        if not result.ok:
            raise OrderValidationError(result.errors)
        order = result.order

        row = order_to_row(order)
        row["status_code"] = INITIAL_STATUS_CODE
        row["payment_status_code"] = INITIAL_PAYMENT_STATUS_CODE

        order_id = await self._call(self.repo.insert_order_row(row), timeout)
        logger.info("Order %s created (%s)", order_id, order.service_type_code.value)

        item_rows = items_to_rows(order.items, order_id)
        if not item_rows:
            return SubmissionResult(id=order_id)

        try:
            await self._call(self.repo.insert_item_rows(item_rows), timeout)
        except StorageError as exc:
            logger.error("Order %s created but items failed: %s", order_id, exc.message)
            return SubmissionResult(
                id=order_id,
                warning=f"Order created but items failed: {exc.message}",
            )
        except asyncio.CancelledError as exc:
            logger.error("Order %s created but item insert was cancelled", order_id)
            raise SubmissionCancelledError(order_id) from exc

        logger.info("Order %s: %d item(s) saved", order_id, len(item_rows))
        return SubmissionResult(id=order_id)

    async def fetch(self, order_id: int, timeout: float | None = None) -> OrderRecord:
        """
        Load an order and its items (two reads) as an OrderRecord.

        Raises:
            OrderNotFoundError: no order with this id.
        """
        row = await self._read(lambda: self.repo.get_order_row(order_id), timeout)
        if row is None:
            logger.info("Order %s not found", order_id)
            raise OrderNotFoundError(order_id)
        item_rows = await self._read(lambda: self.repo.get_item_rows(order_id), timeout)
        return record_from_row(row, item_rows)

    async def update(
        self,
        order_id: int,
        raw: Any,
        timeout: float | None = None,
    ) -> OrderRecord:
        """
        Partial update.

        Only fields present in `raw` are validated and written. When `items`
        is present, all existing item rows are deleted and the given list is
        inserted as the full replacement.

        Raises:
            OrderNotFoundError: no order with this id.
            OrderValidationError: a present field is invalid.
            StorageError: a storage call failed. If it was the item
                replacement, the order row has already been updated.
        """
        current = await self._read(lambda: self.repo.get_order_row(order_id), timeout)
        if current is None:
            raise OrderNotFoundError(order_id)

        result = self.validator.validate_partial(
            raw, stored_service_type=read_column(current, _SERVICE_TYPE_ALIAS)
        )
        if not result.ok:
            raise OrderValidationError(result.errors)

        patch = dict(result.patch)
        patch["updated_at"] = datetime.now(timezone.utc)
        updated = await self._call(
            self.repo.update_order_row(order_id, patch_to_row(patch)), timeout
        )
        if updated is None:
            raise OrderNotFoundError(order_id)

        if "items" in patch:
            await self._replace_items(order_id, patch["items"], timeout)

        return await self.fetch(order_id, timeout)

    async def _replace_items(self, order_id: int, items, timeout: float | None) -> None:
        rows = items_to_rows(items, order_id)
        try:
            await self._call(self.repo.delete_item_rows(order_id), timeout)
            if rows:
                await self._call(self.repo.insert_item_rows(rows), timeout)
        except StorageError as exc:
            logger.error("Order %s updated but items failed: %s", order_id, exc.message)
            raise type(exc)(f"Order updated but items failed: {exc.message}") from exc
        logger.info("Order %s: items replaced (%d row(s))", order_id, len(rows))

    async def list_orders(
        self,
        query: OrderQuery,
        timeout: float | None = None,
    ) -> OrderPage:
        """
        Back-office listing: keyword search + filters, newest first, paginated.
        Items are not loaded.
        """
        offset = (query.page - 1) * query.size
        rows, total = await self._read(
            lambda: self.repo.query_order_rows(
                keyword=query.q,
                status_code=query.status_code,
                payment_status_code=query.payment_status_code,
                service_type_code=query.service_type_code,
                offset=offset,
                limit=query.size,
            ),
            timeout,
        )
        return OrderPage(
            data=[record_from_row(r) for r in rows],
            pagination=Pagination(
                page=query.page,
                size=query.size,
                total=total,
                pages=max(1, math.ceil(total / query.size)),
            ),
        )
