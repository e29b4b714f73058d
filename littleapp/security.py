"""
Little Application: Password Hashing & Tokens
================================================

What:  passlib password hashing and python-jose HS256 JWTs.
Who:   AuthService (issue) and deps.get_current_user (verify).

Token payload:
    sub:  user id (string UUID)
    role: user role at issue time
    iat / exp: issue and expiry timestamps (seconds)
"""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

JWT_ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_jwt(payload: dict, secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    data = payload.copy()
    data.update({"iat": int(now.timestamp()), "exp": int((now + expires_delta).timestamp())})
    return jwt.encode(data, secret, algorithm=JWT_ALGORITHM)


def decode_jwt(token: str, secret: str) -> dict:
    """Raises jose.JWTError on a bad signature, malformed token, or expiry."""
    return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
