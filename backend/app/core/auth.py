from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import uuid
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.database import get_db
from app.db.models import User as DBUser
from app.models.user import CurrentUser, UserRole
import logging

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


class AuthService:
    """Password hashing and JWT helpers"""

    @staticmethod
    def get_password_hash(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
        try:
            return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError as e:
            logger.info(f"Rejected access token: {e}")
            return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Resolve the bearer token to an active user or reject with 401"""
    if credentials is None:
        raise _unauthorized("Not authorized, no token")

    payload = AuthService.decode_access_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise _unauthorized("Not authorized, token failed")

    try:
        user_id = uuid.UUID(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Not authorized, token failed")

    db_user = db.get(DBUser, user_id)
    if not db_user or not db_user.is_active:
        raise _unauthorized("Not authorized, user not found")

    return CurrentUser(id=str(db_user.id), role=UserRole(db_user.role))
