"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator, Callable, Coroutine
from enum import Enum
from typing import Annotated, Any

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_admin.database import init_db


class Role(str, Enum):
    """Roles recognised by the API."""

    ADMIN = "Admin"
    HR_CLERK = "HR Clerk"
    READ_ONLY = "Read-Only"


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        yield session


async def get_current_role(
    x_user_role: Annotated[str | None, Header()] = None
) -> Role:
    """Extract the caller's role from the header set by the gateway."""
    if not x_user_role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Role header is required",
        )
    try:
        return Role(x_user_role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role '{x_user_role}'",
        )


def require_roles(*allowed: Role) -> Callable[..., Coroutine[Any, Any, Role]]:
    """Build a dependency that admits only the given roles."""

    async def dependency(
        role: Annotated[Role, Depends(get_current_role)],
    ) -> Role:
        if role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{role.value}' is not allowed to perform this action",
            )
        return role

    return dependency


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
AnyRole = Annotated[Role, Depends(get_current_role)]
PayrollStaff = Annotated[Role, Depends(require_roles(Role.ADMIN, Role.HR_CLERK))]
AdminOnly = Annotated[Role, Depends(require_roles(Role.ADMIN))]
