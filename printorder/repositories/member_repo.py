# printorder/repositories/member_repo.py
from typing import Any, Protocol

from supabase import AsyncClient

from printorder.repositories.order_repo import execute


class MemberRepository(Protocol):
    async def get_by_auth_user_id(self, auth_user_id: str) -> dict[str, Any] | None: ...


class SupabaseMemberRepository:
    """
    Read-only access to staff members (`members` table).

    A member row links a Supabase auth user to a back-office role.
    """

    COLUMNS = "id, user_name, email, role_code, status, auth_user_id"

    def __init__(self, client: AsyncClient, table: str = "members"):
        self.client = client
        self.table = table

    async def get_by_auth_user_id(self, auth_user_id: str) -> dict[str, Any] | None:
        """Return the member row for a Supabase auth user id, or None."""
        query = (
            self.client.table(self.table)
            .select(self.COLUMNS)
            .eq("auth_user_id", auth_user_id)
            .limit(1)
        )
        resp = await execute(query)
        return resp.data[0] if resp.data else None
