from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from finanzas.core.config import settings


# ─── JWT tokens ────────────────────────────────────────
# Tokens are minted by the auth frontend; this service only verifies them.
# create_access_token is kept for scripts and tests that need a session.
def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.api_secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, settings.api_secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
