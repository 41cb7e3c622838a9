import secrets
import time
from typing import Optional

import jwt
from passlib.context import CryptContext

from .config import get_settings

# bcrypt with a fixed work factor of 10
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

ALGORITHM = "HS256"
COOKIE_NAME = "token"
COOKIE_MAX_AGE = 60 * 60 * 24 * 365  # 1 year
RESET_TOKEN_BYTES = 20
RESET_TOKEN_TTL_MS = 1000 * 60 * 60  # 1 hour


def create_session_token(user_id: int, secret: Optional[str] = None) -> str:
    # No exp claim: the cookie max-age bounds the session
    payload = {"userId": user_id}
    return jwt.encode(payload, secret or get_settings().app_secret, algorithm=ALGORITHM)


def decode_session_token(token: str, secret: Optional[str] = None) -> dict:
    return jwt.decode(token, secret or get_settings().app_secret, algorithms=[ALGORITHM])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_reset_token() -> tuple[str, int]:
    """Return a fresh reset token and its expiry (epoch ms, now + 1 hour)."""
    token = secrets.token_hex(RESET_TOKEN_BYTES)
    return token, now_ms() + RESET_TOKEN_TTL_MS


def reset_token_cutoff_ms() -> int:
    """Oldest stored expiry still accepted: ``stored_expiry >= now - 1 hour``."""
    return now_ms() - RESET_TOKEN_TTL_MS
