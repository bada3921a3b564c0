from datetime import datetime, timedelta, timezone

import jwt

from portal.core import config


def create_session_token(
    user_id: str,
    session_id: str,
    email: str | None = None,
    expires_minutes: int | None = None,
) -> tuple[str, datetime]:
    expire_minutes = expires_minutes or config.SESSION_EXPIRES_MINUTES
    issued = datetime.now(timezone.utc)
    expire = issued + timedelta(minutes=expire_minutes)
    payload = {"sub": user_id, "sid": session_id, "email": email, "exp": expire, "iat": issued}
    token = jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)
    return token, expire


def decode_session_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
