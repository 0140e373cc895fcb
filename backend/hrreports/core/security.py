from datetime import datetime, timedelta, timezone

from jose import jwt

from hrreports.core.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Mint a token in the SSO format; used by tooling and tests."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=8))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
