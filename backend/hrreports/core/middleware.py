from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import BaseModel

from hrreports.core.config import settings
from hrreports.core.security import decode_token

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    id: str
    username: str | None = None
    role: str
    project_name: str | None = None
    token: str


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise unauthorized

    user_id = payload.get("sub") or payload.get("id")
    role = payload.get("role")
    if not user_id or not role:
        raise unauthorized

    return CurrentUser(
        id=str(user_id),
        username=payload.get("username"),
        role=role,
        project_name=payload.get("project_name"),
        token=credentials.credentials,
    )


def require_role(*roles: str) -> Callable:
    allowed = roles or tuple(settings.ALLOWED_ROLES)

    async def role_checker(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(allowed)}",
            )
        return current_user

    return role_checker
