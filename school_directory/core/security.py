import os
from datetime import datetime, timedelta, timezone

from dotenv import load_dotenv
from jose import JWTError, jwt
from passlib.context import CryptContext

from school_directory.core.errors import InvalidToken

load_dotenv()

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

def load_jwt_secret() -> str:
    secret = os.getenv("JWT_SECRET")
    if not secret:
        raise RuntimeError("JWT_SECRET must be set")
    return secret

JWT_SECRET = load_jwt_secret()
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "1440"))

def hash_password(password: str):
    return pwd_context.hash(password)

def verify_password(password: str, hashed: str):
    try:
        return pwd_context.verify(password, hashed)
    except (ValueError, TypeError):
        return False

def create_access_token(user_id: int, expires_minutes: int | None = None):
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes if expires_minutes is not None else JWT_EXPIRE_MINUTES)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": expire
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)

def verify_token(token: str) -> int:
    """Return the user id the token was issued for, or raise InvalidToken."""
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        return int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError) as exc:
        raise InvalidToken() from exc
