"""Test doubles and payload builders shared by the test modules."""

import asyncio
import copy
import time
from datetime import UTC, datetime
from typing import Any

from jose import jwt

from printorder.core.config import get_settings
from printorder.core.exceptions import StorageError


class InMemoryOrderRepository:
    """
    OrderRepository fake backed by dicts.

    Knobs:
      - fail_item_insert: exception raised by insert_item_rows
      - item_insert_delay: seconds insert_item_rows sleeps first
      - failing_reads: number of get_order_row calls that fail before
        succeeding
    """

    def __init__(self):
        self.orders: dict[int, dict[str, Any]] = {}
        self.items: list[dict[str, Any]] = []
        self._next_order_id = 1
        self._next_item_id = 1
        self.fail_item_insert: BaseException | None = None
        self.item_insert_delay: float = 0
        self.failing_reads = 0
        self.calls: list[str] = []

    async def insert_order_row(self, row):
        self.calls.append("insert_order_row")
        order_id = self._next_order_id
        self._next_order_id += 1
        self.orders[order_id] = {
            **copy.deepcopy(row),
            "id": order_id,
            "code": None,
            "created_date": datetime(2024, 1, order_id % 28 + 1, tzinfo=UTC).isoformat(),
        }
        return order_id

    async def insert_item_rows(self, rows):
        self.calls.append("insert_item_rows")
        if self.item_insert_delay:
            await asyncio.sleep(self.item_insert_delay)
        if self.fail_item_insert is not None:
            raise self.fail_item_insert
        for row in rows:
            self.items.append({**copy.deepcopy(row), "id": self._next_item_id})
            self._next_item_id += 1

    async def delete_item_rows(self, order_id):
        self.calls.append("delete_item_rows")
        self.items = [it for it in self.items if it["order_id"] != order_id]

    async def get_order_row(self, order_id):
        self.calls.append("get_order_row")
        if self.failing_reads:
            self.failing_reads -= 1
            raise StorageError("connection reset")
        row = self.orders.get(order_id)
        return copy.deepcopy(row) if row is not None else None

    async def get_item_rows(self, order_id):
        self.calls.append("get_item_rows")
        return [copy.deepcopy(it) for it in self.items if it["order_id"] == order_id]

    async def update_order_row(self, order_id, row):
        self.calls.append("update_order_row")
        if order_id not in self.orders:
            return None
        self.orders[order_id].update(copy.deepcopy(row))
        return copy.deepcopy(self.orders[order_id])

    async def query_order_rows(
        self,
        *,
        keyword=None,
        status_code=None,
        payment_status_code=None,
        service_type_code=None,
        offset=0,
        limit=10,
    ):
        self.calls.append("query_order_rows")
        rows = sorted(self.orders.values(), key=lambda r: r["created_date"], reverse=True)
        if keyword:
            kw = keyword.lower()
            rows = [
                r
                for r in rows
                if any(
                    kw in (r.get(col) or "").lower()
                    for col in ("code", "full_name", "shipping_name")
                )
            ]
        if status_code:
            rows = [r for r in rows if r.get("status_code") == status_code]
        if payment_status_code:
            rows = [r for r in rows if r.get("payment_status_code") == payment_status_code]
        if service_type_code:
            rows = [r for r in rows if r.get("service_type_code") == service_type_code]
        return copy.deepcopy(rows[offset : offset + limit]), len(rows)


class InMemoryMemberRepository:
    def __init__(self):
        self.members: dict[str, dict[str, Any]] = {}

    def add(self, auth_user_id: str, role_code: str, status: bool = True) -> dict[str, Any]:
        row = {
            "id": len(self.members) + 1,
            "user_name": f"user-{auth_user_id}",
            "email": f"{auth_user_id}@example.com",
            "role_code": role_code,
            "status": status,
            "auth_user_id": auth_user_id,
        }
        self.members[auth_user_id] = row
        return row

    async def get_by_auth_user_id(self, auth_user_id):
        return self.members.get(auth_user_id)


def make_token(sub: str = "auth-admin", email: str = "admin@example.com", ttl: int = 3600) -> str:
    """Sign a Supabase-style access token with the test secret."""
    settings = get_settings()
    claims = {"sub": sub, "email": email, "exp": int(time.time()) + ttl}
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG)


def auth_headers(sub: str = "auth-admin", email: str = "admin@example.com") -> dict:
    return {"Authorization": f"Bearer {make_token(sub=sub, email=email)}"}


# ── Payload builders ─────────────────────────────────────────────────


def design_item(**overrides) -> dict[str, Any]:
    item = {
        "productCode": "POSTER",
        "sizeCode": "A4",
        "orientationCode": "PORTRAIT",
        "coatingCode": "GLOSSY",
        "pageOptionCode": "SINGLE",
        "imageOptionCode": "YES",
        "brandOptionCode": "NONE",
        "quantity": 10,
    }
    item.update(overrides)
    return item


def design_order(**overrides) -> dict[str, Any]:
    payload = {
        "fullName": "สมชาย ใจดี",
        "shopName": "ร้านทดสอบ",
        "tel": "0812345678",
        "line": "testline",
        "serviceTypeCode": "DESIGN_ONLY",
        "themeCode": "MINIMAL",
        "colorCodes": ["RED", "BLACK"],
        "designInfoText": "Logo on the top left",
        "items": [design_item()],
    }
    payload.update(overrides)
    return payload


def production_order(**overrides) -> dict[str, Any]:
    payload = {
        "fullName": "สมชาย ใจดี",
        "shopName": "ร้านทดสอบ",
        "tel": "0812345678",
        "line": "testline",
        "serviceTypeCode": "PRODUCTION_ONLY",
        "shippingName": "สมชาย",
        "shippingTel": "0812345678",
        "shippingAddress": "กรุงเทพ",
        "items": [],
    }
    payload.update(overrides)
    return payload


def error_paths(errors) -> set[str]:
    return {e.path if hasattr(e, "path") else e["path"] for e in errors}
