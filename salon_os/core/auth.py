"""
JWT session token utilities
"""

from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from typing import Dict, Iterable, Optional
from starlette.requests import HTTPConnection
import uuid

from salon_os.core.config import get_settings

settings = get_settings()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(
    user_id: uuid.UUID,
    tenant_id: uuid.UUID,
    subdomain: str,
    role: str,
    permissions: Iterable[str] = (),
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed session token carrying the caller's tenant claims"""
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(user_id),
        "tenant_id": str(tenant_id),
        "subdomain": subdomain,
        "role": role,
        "permissions": sorted(permissions),
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Dict]:
    """Decode and validate a session token; None when missing, forged or expired"""
    if not token:
        return None
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def extract_token(connection: HTTPConnection) -> Optional[str]:
    """Bearer header first, then the session cookie"""
    auth_header = connection.headers.get("authorization")
    if auth_header and auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return connection.cookies.get(settings.SESSION_COOKIE_NAME)
