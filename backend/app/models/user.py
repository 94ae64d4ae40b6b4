from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum
from app.models.common import CamelModel


class UserRole(str, Enum):
    HOMEOWNER = "homeowner"
    BROKER = "broker"
    TENANT = "tenant"


# Roles allowed to list properties
LISTING_ROLES = (UserRole.HOMEOWNER, UserRole.BROKER)


class User(CamelModel):
    id: str
    name: str
    email: EmailStr
    phone: Optional[str] = None
    role: UserRole
    is_active: bool = True
    created_at: datetime


class UserRegistration(CamelModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, pattern=r"^[0-9]{10}$")
    role: UserRole = UserRole.TENANT

    @field_validator('name', mode='before')
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserLogin(CamelModel):
    email: EmailStr
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: User


class CurrentUser(CamelModel):
    """Authenticated caller identity handed to services"""
    id: str
    role: UserRole

    def can_list_properties(self) -> bool:
        return self.role in LISTING_ROLES
