"""Password hashing and the bearer tokens handed out by ``/api/auth/login``."""
from datetime import datetime, timedelta, timezone
from jose import jwt
from passlib.context import CryptContext
from .settings import settings

ALGORITHM = "HS256"
BCRYPT_MAX_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def _secret(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return pwd_context.hash(_secret(password))


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(_secret(password), hashed)


def issue_user_token(user_id: int, secret_key: str | None = None, expires_minutes: int | None = None) -> str:
    """Signed token whose ``sub`` is the user id."""
    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {"sub": str(user_id), "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, secret_key or settings.SECRET_KEY, algorithm=ALGORITHM)
