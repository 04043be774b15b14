from pydantic import EmailStr, Field, field_validator
from typing import Optional
from uuid import UUID
from datetime import datetime
import re
from estatehub.models.user import UserRole
from estatehub.schemas.common import CamelModel


def normalize_phone(phone: str) -> str:
    phone = re.sub(r'[\s\-()]', '', phone)

    if not re.match(r'^\+?\d{7,15}$', phone):
        raise ValueError('Invalid phone number')

    return phone

class UserBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = None

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    role: UserRole = UserRole.BUYER
    avatar: Optional[str] = None

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v) if v else None

class UserLogin(CamelModel):
    email: EmailStr
    password: str

# Shapes embedded in property and chat payloads
class UserSummary(CamelModel):
    id: UUID
    name: str
    role: UserRole
    avatar: Optional[str] = None
    verified: bool = False

class ListerSummary(UserSummary):
    phone: Optional[str] = None
    rating: Optional[float] = None

class UserResponse(UserBase):
    id: UUID
    role: UserRole
    avatar: Optional[str] = None
    verified: bool = False
    rating: Optional[float] = None
    is_active: bool = True
    created_at: datetime

class UserEnvelope(CamelModel):
    success: bool = True
    user: UserResponse

class TokenResponse(CamelModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: UserResponse
