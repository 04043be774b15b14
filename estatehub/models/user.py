from sqlalchemy import Column, String, Boolean, Float, Enum, ForeignKey, Table, Uuid, DateTime, func
from sqlalchemy.orm import relationship
from estatehub.core.database import Base
from estatehub.models.base import BaseModel
import enum

class UserRole(str, enum.Enum):
    BUYER = "buyer"
    OWNER = "owner"
    BROKER = "broker"

LISTER_ROLES = (UserRole.OWNER, UserRole.BROKER)

# Membership is the saved flag: a row exists while the property is saved.
saved_properties = Table(
    "saved_properties",
    Base.metadata,
    Column("user_id", Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("property_id", Uuid, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column("saved_at", DateTime, server_default=func.now()),
)

class User(BaseModel):
    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(100), unique=True, index=True, nullable=False)
    phone = Column(String(20), nullable=True)
    password_hash = Column(String(255), nullable=False)

    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        default=UserRole.BUYER,
        nullable=False,
        index=True,
    )
    avatar = Column(String(255), nullable=True)
    verified = Column(Boolean, default=False)
    rating = Column(Float, default=0)
    is_active = Column(Boolean, default=True)

    properties = relationship("Property", back_populates="listed_by")
