# printorder/core/dependencies.py
"""FastAPI dependency chain: app.state client -> repositories -> pipeline."""
from fastapi import Depends, Request
from supabase import AsyncClient

from printorder.core.config import get_settings
from printorder.repositories.member_repo import MemberRepository, SupabaseMemberRepository
from printorder.repositories.order_repo import OrderRepository, SupabaseOrderRepository
from printorder.services.order_pipeline import OrderIntakePipeline

settings = get_settings()


def get_supabase(request: Request) -> AsyncClient:
    """Supabase client created in the application lifespan."""
    return request.app.state.supabase


def get_order_repo(client: AsyncClient = Depends(get_supabase)) -> OrderRepository:
    return SupabaseOrderRepository(
        client,
        orders_table=settings.ORDERS_TABLE,
        items_table=settings.ORDER_ITEMS_TABLE,
    )


def get_member_repo(client: AsyncClient = Depends(get_supabase)) -> MemberRepository:
    return SupabaseMemberRepository(client, table=settings.MEMBERS_TABLE)


def get_pipeline(repo: OrderRepository = Depends(get_order_repo)) -> OrderIntakePipeline:
    return OrderIntakePipeline(
        repo,
        timeout=settings.STORAGE_TIMEOUT_SECONDS,
        read_retries=settings.STORAGE_READ_RETRIES,
    )
