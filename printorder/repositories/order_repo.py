# printorder/repositories/order_repo.py
from typing import Any, Protocol

import httpx
from postgrest.exceptions import APIError
from postgrest.types import CountMethod
from supabase import AsyncClient

from printorder.core.exceptions import StorageError
from printorder.services.field_aliases import ITEM_ORDER_ID_COLUMN

Row = dict[str, Any]

# Characters with meaning inside a PostgREST `or=(...)` filter.
_FILTER_SPECIAL = str.maketrans("", "", ",()")


async def execute(query):
    """
    Run a PostgREST query builder, wrapping backend and transport failures
    in StorageError.
    """
    try:
        return await query.execute()
    except APIError as exc:
        raise StorageError(exc.message or str(exc)) from exc
    except httpx.HTTPError as exc:
        raise StorageError(f"Storage request failed: {exc}") from exc


class OrderRepository(Protocol):
    """
    Storage collaborator for orders and their item rows.

    Rows are flat snake_case dicts as produced by the row mapper. There is
    no transaction across the two collections: an order row can exist
    without its items.
    """

    async def insert_order_row(self, row: Row) -> int: ...

    async def insert_item_rows(self, rows: list[Row]) -> None: ...

    async def delete_item_rows(self, order_id: int) -> None: ...

    async def get_order_row(self, order_id: int) -> Row | None: ...

    async def get_item_rows(self, order_id: int) -> list[Row]: ...

    async def update_order_row(self, order_id: int, row: Row) -> Row | None: ...

    async def query_order_rows(
        self,
        *,
        keyword: str | None = None,
        status_code: str | None = None,
        payment_status_code: str | None = None,
        service_type_code: str | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Row], int]: ...


class SupabaseOrderRepository:
    """
    Data access layer for `orders` and `order_item` via the Supabase client.

    Responsibilities:
      - Pure storage operations (insert / select / update / delete)
      - No validation, no mapping, no HTTP
      - Failures surface as StorageError with the backend's message
    """

    def __init__(
        self,
        client: AsyncClient,
        orders_table: str = "orders",
        items_table: str = "order_item",
    ):
        self.client = client
        self.orders_table = orders_table
        self.items_table = items_table

    # ---- Orders ----

    async def insert_order_row(self, row: Row) -> int:
        """Insert an order row and return the id assigned by the database."""
        resp = await execute(self.client.table(self.orders_table).insert(row))
        if not resp.data:
            raise StorageError("Failed to create order")
        return int(resp.data[0]["id"])

    async def get_order_row(self, order_id: int) -> Row | None:
        resp = await execute(
            self.client.table(self.orders_table).select("*").eq("id", order_id).limit(1)
        )
        return resp.data[0] if resp.data else None

    async def update_order_row(self, order_id: int, row: Row) -> Row | None:
        """
        Apply a partial row update.

        Returns the updated row, or None if no order has this id.
        """
        resp = await execute(
            self.client.table(self.orders_table).update(row).eq("id", order_id)
        )
        return resp.data[0] if resp.data else None

    async def query_order_rows(
        self,
        *,
        keyword: str | None = None,
        status_code: str | None = None,
        payment_status_code: str | None = None,
        service_type_code: str | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[Row], int]:
        """
        Paginated order listing, newest first.

        Returns:
            (rows, total number of matching rows)
        """
        query = (
            self.client.table(self.orders_table)
            .select("*", count=CountMethod.exact)
            .order("created_date", desc=True)
        )

        if keyword:
            kw = keyword.strip().translate(_FILTER_SPECIAL)
            if kw:
                query = query.or_(
                    f"code.ilike.%{kw}%,full_name.ilike.%{kw}%,shipping_name.ilike.%{kw}%"
                )
        if status_code:
            query = query.eq("status_code", status_code)
        if payment_status_code:
            query = query.eq("payment_status_code", payment_status_code)
        if service_type_code:
            query = query.eq("service_type_code", service_type_code)

        resp = await execute(query.range(offset, offset + limit - 1))
        return list(resp.data or []), int(resp.count or 0)

    # ---- Order items ----

    async def get_item_rows(self, order_id: int) -> list[Row]:
        resp = await execute(
            self.client.table(self.items_table)
            .select("*")
            .eq(ITEM_ORDER_ID_COLUMN, order_id)
            .order("id")
        )
        return list(resp.data or [])

    async def insert_item_rows(self, rows: list[Row]) -> None:
        """Batch insert item rows already tagged with their order id."""
        if not rows:
            return
        await execute(self.client.table(self.items_table).insert(rows))

    async def delete_item_rows(self, order_id: int) -> None:
        await execute(
            self.client.table(self.items_table).delete().eq(ITEM_ORDER_ID_COLUMN, order_id)
        )
