from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from ..utils import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def decode_access_token(token: str) -> dict:
    try:
        return decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")


def get_current_admin(token: str = Depends(oauth2_scheme)) -> dict:
    payload = decode_access_token(token)

    if "sub" not in payload:
        raise HTTPException(401, "Invalid token payload")
    if payload.get("role") != "admin":
        raise HTTPException(403, "Admin access required")
    return {"email": payload["sub"]}


def admin_from_token(token: str | None) -> dict | None:
    """Non-raising variant for WebSocket handshakes, which carry the token as a query param."""
    if not token:
        return None
    try:
        payload = decode_token(token)
    except JWTError:
        return None
    if payload.get("role") != "admin" or "sub" not in payload:
        return None
    return {"email": payload["sub"]}
