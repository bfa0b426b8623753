"""
Security guards for role-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from finledger.app.models.enums import UserRole
from finledger.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/companies/{company_id}/classification/auto-classify")
        async def auto_classify(current_user: dict = Depends(require_role(WRITE_ROLES))):
            ...

    Args:
        allowed_roles: List of UserRole enums that are allowed to access the endpoint

    Returns:
        FastAPI dependency function that validates user role

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role = UserRole(current_user.get("role"))

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


# Roles allowed to change classification or ledger state
WRITE_ROLES = [UserRole.ADMIN, UserRole.ACCOUNTANT]

# Any authenticated role may read
READ_ROLES = [UserRole.ADMIN, UserRole.ACCOUNTANT, UserRole.VIEWER]

require_writer = require_role(WRITE_ROLES)
require_reader = require_role(READ_ROLES)
