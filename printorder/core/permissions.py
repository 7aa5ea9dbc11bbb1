# printorder/core/permissions.py
"""
Role-based access for back-office staff.

Roles come from `members.role_code`. Customers submitting the public order
form are anonymous and have no role.
"""

SUPER_ADMIN = "SUPER_ADMIN"
ADMIN = "ADMIN"
DESIGNER_INHOUSE = "DESIGNER_INHOUSE"
STAFF = "STAFF"

PERMISSIONS: dict[str, frozenset[str]] = {
    "orders:view": frozenset({SUPER_ADMIN, ADMIN, DESIGNER_INHOUSE, STAFF}),
    "orders:edit": frozenset({SUPER_ADMIN, ADMIN}),
}


def has_permission(role_code: str | None, permission: str) -> bool:
    """Unknown roles and unknown permissions are denied."""
    if not role_code:
        return False
    return role_code in PERMISSIONS.get(permission, frozenset())
