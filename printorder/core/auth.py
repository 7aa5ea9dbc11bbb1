# printorder/core/auth.py
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from printorder.core.config import get_settings
from printorder.core.dependencies import get_member_repo
from printorder.core.permissions import has_permission
from printorder.repositories.member_repo import MemberRepository

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header does not raise here,
#   so we can answer with our own 401 message.
bearer_scheme = HTTPBearer(auto_error=False)


class StaffMember(BaseModel):
    """Authenticated back-office user, resolved from the members table."""

    id: int
    email: str | None = None
    user_name: str | None = None
    role_code: str | None = None
    auth_user_id: str


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        HTTPException(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )


async def get_current_member(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    members: MemberRepository = Depends(get_member_repo),
) -> StaffMember:
    """
    Resolve the current staff member from a Supabase JWT.

    Flow:
      1. No Authorization header => 401.
      2. Decode JWT => extract 'sub' (auth user id).
      3. Look up the member row linked to that auth user.
      4. Missing member => 401, suspended member (status false) => 403.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token missing sub",
        )

    row = await members.get_by_auth_user_id(sub)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Member profile not found",
        )
    if not row.get("status"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account suspended",
        )

    return StaffMember(
        id=row["id"],
        email=row.get("email") or payload.get("email"),
        user_name=row.get("user_name"),
        role_code=row.get("role_code"),
        auth_user_id=sub,
    )


def require_permission(permission: str):
    """
    Dependency factory enforcing one permission from core/permissions.py.

    Usage:
        @router.get("", dependencies=[Depends(require_permission("orders:view"))])
    """

    async def dependency(member: StaffMember = Depends(get_current_member)) -> StaffMember:
        if not has_permission(member.role_code, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission}",
            )
        return member

    return dependency
