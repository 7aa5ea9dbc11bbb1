# printorder/services/row_mapper.py
"""
Conversion between domain orders and flat storage rows.

Write side (domain -> row):
  - fields are renamed through the alias tables; unknown fields never leak
  - empty strings become None (the database tells "not applicable" apart
    from "empty")
  - color codes are stored as a JSON string in `mood_tone`; an empty list
    is stored as None
  - the design brief is trimmed; a blank brief is stored as None
  - item rows with no meaningful value at all are dropped

Read side (row -> domain):
  - every concept is read from its canonical column first, then from its
    legacy keys; the first non-null value wins
  - a malformed `mood_tone` value reads back as None
  - nothing here raises on odd stored data

Not preserved by a write/read round trip:
  - surrounding whitespace of the design brief
  - empty strings (read back as None)
  - an empty color list (read back as None)
  - fully empty item stubs
"""
import json
import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from printorder.models.order import Order, OrderItem, OrderRecord, ServiceType
from printorder.services.field_aliases import (
    ITEM_ALIASES,
    ITEM_ORDER_ID_COLUMN,
    ORDER_ALIASES,
    ORDER_META_ALIASES,
    FieldAlias,
    ValueKind,
)

logger = logging.getLogger(__name__)

Row = dict[str, Any]


# ---------------------------------------------------------------------------
# Value codecs
# ---------------------------------------------------------------------------


def _encode(alias: FieldAlias, value: Any) -> Any:
    if value is None:
        return None

    if alias.kind == ValueKind.JSON_LIST:
        values = list(value)
        return json.dumps(values, ensure_ascii=False) if values else None

    if alias.kind == ValueKind.BRIEF:
        return str(value).strip() or None

    if alias.kind == ValueKind.SERVICE_TYPE and isinstance(value, ServiceType):
        return value.value

    if alias.kind == ValueKind.TIMESTAMP and isinstance(value, datetime):
        return value.isoformat()

    if isinstance(value, str) and value == "":
        return None

    return value


def _decode_json_list(value: Any) -> list[str] | None:
    if isinstance(value, list):
        return [str(v) for v in value]
    if not isinstance(value, str):
        return None
    try:
        decoded = json.loads(value)
    except ValueError:
        logger.warning("Ignoring malformed mood_tone value: %r", value)
        return None
    if not isinstance(decoded, list):
        return None
    return [str(v) for v in decoded]


def _decode_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _decode(alias: FieldAlias, value: Any) -> Any:
    if value is None:
        return None

    if alias.kind == ValueKind.JSON_LIST:
        return _decode_json_list(value)

    if alias.kind == ValueKind.TIMESTAMP:
        return _decode_timestamp(value)

    if alias.kind == ValueKind.SERVICE_TYPE:
        try:
            return ServiceType(value)
        except ValueError:
            # Unknown stored code; keep it as-is rather than failing the read.
            return value

    return value


def read_column(row: Mapping[str, Any], alias: FieldAlias) -> Any:
    """Return the first non-null value among the alias's canonical and legacy keys."""
    for key in alias.read_keys:
        value = row.get(key)
        if value is not None:
            return value
    return None


def _read_fields(row: Mapping[str, Any], aliases: Iterable[FieldAlias]) -> dict[str, Any]:
    return {a.field: _decode(a, read_column(row, a)) for a in aliases}


def _write_fields(source: Any, aliases: Iterable[FieldAlias]) -> Row:
    return {a.column: _encode(a, getattr(source, a.field)) for a in aliases}


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def item_to_row(item: OrderItem, order_id: int | None = None) -> Row:
    """Map one item to an `order_item` row, tagged with its parent id if given."""
    row = _write_fields(item, ITEM_ALIASES)
    if order_id is not None:
        row[ITEM_ORDER_ID_COLUMN] = order_id
    return row


def is_meaningful_item_row(row: Mapping[str, Any]) -> bool:
    """True if at least one mapped item column holds a value."""
    return any(row.get(a.column) is not None for a in ITEM_ALIASES)


def items_to_rows(items: Iterable[OrderItem], order_id: int) -> list[Row]:
    """
    Map items to rows for a batch insert.

    Blank generated stubs (every mapped column None) are filtered out.
    """
    rows = [item_to_row(item, order_id) for item in items]
    return [row for row in rows if is_meaningful_item_row(row)]


def item_from_row(row: Mapping[str, Any]) -> OrderItem:
    return OrderItem.model_construct(**_read_fields(row, ITEM_ALIASES))


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def order_to_row(order: Order) -> Row:
    """
    Map an order to its `orders` row (items excluded; see items_to_rows).
    """
    return _write_fields(order, ORDER_ALIASES)


def _order_fields(row: Mapping[str, Any], item_rows: Iterable[Mapping[str, Any]]) -> dict[str, Any]:
    data = _read_fields(row, ORDER_ALIASES)
    # Required text fields read back as "" rather than None for legacy rows.
    for name in ("full_name", "shop_name", "tel"):
        if data[name] is None:
            data[name] = ""
    data["items"] = [item_from_row(r) for r in item_rows]
    return data


def order_from_row(
    row: Mapping[str, Any],
    item_rows: Iterable[Mapping[str, Any]] = (),
) -> Order:
    """
    Rebuild a domain order from its row and its separately fetched item rows.
    """
    return Order.model_construct(**_order_fields(row, item_rows))


def record_from_row(
    row: Mapping[str, Any],
    item_rows: Iterable[Mapping[str, Any]] = (),
) -> OrderRecord:
    """
    Rebuild a stored order (domain fields + back-office metadata).

    The display code falls back to `ORD-<id>` when the row has none.
    """
    data = _order_fields(row, item_rows)
    data.update(_read_fields(row, ORDER_META_ALIASES))
    data["id"] = row.get("id")
    if not data["code"]:
        data["code"] = f"ORD-{row.get('id', '')}"
    return OrderRecord.model_construct(**data)


def patch_to_row(patch: Mapping[str, Any]) -> Row:
    """
    Map a partial update (domain field name -> value) to a partial row.

    Only fields present in the patch are written. `items` is handled by the
    pipeline as a full replacement and is ignored here.
    """
    row: Row = {}
    for alias in (*ORDER_ALIASES, *ORDER_META_ALIASES):
        if alias.field in patch:
            row[alias.column] = _encode(alias, patch[alias.field])
    return row
