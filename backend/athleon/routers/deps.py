"""
Request-scoped dependencies shared by the routers
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException

ATHLETE_ROLE = "athlete"


@dataclass
class CurrentUser:
    """Caller identity forwarded by the API gateway"""
    id: str
    name: str
    role: Optional[str] = None


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None)
) -> CurrentUser:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return CurrentUser(
        id=x_user_id.strip(),
        name=(x_user_name or "").strip() or "Athlete",
        role=x_user_role.strip().lower() if x_user_role else None
    )


async def require_athlete(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role is not None and user.role != ATHLETE_ROLE:
        raise HTTPException(status_code=403, detail="Access denied. Athletes only.")
    return user
