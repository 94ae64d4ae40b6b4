from typing import Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from datetime import datetime, timezone
import uuid
from app.models.user import User, UserRegistration
from app.core.auth import AuthService
from app.core.exceptions import BusinessRuleError, NotFoundError
from app.db.models import User as DBUser
import logging

logger = logging.getLogger(__name__)


def to_user(db_user: DBUser) -> User:
    return User(
        id=str(db_user.id),
        name=db_user.name,
        email=db_user.email,
        phone=db_user.phone,
        role=db_user.role,
        is_active=db_user.is_active,
        created_at=db_user.created_at,
    )


class UserService:
    """Service for registration, login and profile lookup"""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, data: UserRegistration) -> User:
        """Create a new user with hashed password"""
        email = data.email.lower()

        existing_user = self.db.execute(
            select(DBUser).where(DBUser.email == email)
        ).scalar_one_or_none()
        if existing_user:
            raise BusinessRuleError("User with this email already exists")

        db_user = DBUser(
            id=uuid.uuid4(),
            name=data.name,
            email=email,
            phone=data.phone,
            role=data.role.value,
            hashed_password=AuthService.get_password_hash(data.password),
            is_active=True,
        )

        try:
            self.db.add(db_user)
            self.db.commit()
            self.db.refresh(db_user)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Registered user {db_user.id} with role {db_user.role}")
        return to_user(db_user)

    def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Return the user for valid credentials, otherwise None"""
        db_user = self.db.execute(
            select(DBUser).where(DBUser.email == email.lower(), DBUser.is_active.is_(True))
        ).scalar_one_or_none()

        if not db_user or not AuthService.verify_password(password, db_user.hashed_password):
            return None

        db_user.last_login = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(db_user)

        return to_user(db_user)

    def get_user(self, user_id: str) -> User:
        try:
            db_user = self.db.get(DBUser, uuid.UUID(user_id))
        except ValueError:
            db_user = None

        if not db_user or not db_user.is_active:
            raise NotFoundError("User not found")

        return to_user(db_user)

    @staticmethod
    def issue_token(user: User) -> str:
        return AuthService.create_access_token(data={"sub": user.id, "role": user.role.value})
