"""
Password hashing and signed session tokens.

Passwords are hashed with bcrypt via passlib; tokens are HS256 JWTs carrying
the user id in ``sub`` plus the user's email.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext


def build_password_context(rounds: int = 12) -> CryptContext:
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_password(context: CryptContext, password: str) -> str:
    return context.hash(password)


def verify_password(context: CryptContext, plain_password: str, hashed_password: str) -> bool:
    return context.verify(plain_password, hashed_password)


def create_access_token(
    data: dict,
    secret: str,
    algorithm: str,
    expires_delta: timedelta,
) -> str:
    """
    Sign a JWT.

    Args:
        data: Claims to embed (usually {"sub": user_id, "email": ...})
        expires_delta: Lifetime of the token
    """
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str) -> Optional[dict]:
    """Verify signature and expiry; None when the token is not acceptable."""
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError:
        return None


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Extract <token> from "Bearer <token>"."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
