"""Password hashing and access tokens"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt
from passlib.context import CryptContext
import hashlib

from infrastructure.config import get_settings

# bcrypt ignores everything past this many bytes of input
BCRYPT_MAX_BYTES = 72

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__ident="2b")

def _bcrypt_input(password: str) -> str:
    """Long passwords are replaced by their SHA-256 hex digest so every byte counts"""
    raw = password.encode("utf-8")
    if len(raw) <= BCRYPT_MAX_BYTES:
        return password
    return hashlib.sha256(raw).hexdigest()

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_bcrypt_input(plain_password), hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(_bcrypt_input(password))

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    settings = get_settings()
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> dict:
    """Decode and verify a JWT access token; raises JWTError when invalid or expired"""
    settings = get_settings()
    return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

def create_user_token(user) -> str:
    """Token carrying the claims the API authenticates with"""
    return create_access_token({
        "sub": str(user.user_id),
        "userId": str(user.user_id),
        "email": user.email,
        "role": user.role.value,
    })
