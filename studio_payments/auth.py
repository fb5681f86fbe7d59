import logging

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt

from studio_payments.config import Settings, get_settings

logger = logging.getLogger(__name__)


def verify_token(
    authorization: str = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Check the caller's store-issued access token and return its claims."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Invalid or missing token")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="Invalid or missing token")

    try:
        return jwt.decode(
            parts[1],
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except JWTError as exc:
        logger.warning("Rejected access token: %s", exc)
        raise HTTPException(status_code=401, detail="Invalid or missing token")
