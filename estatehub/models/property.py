from sqlalchemy import Column, String, Integer, Float, Text, Enum, ForeignKey, JSON, Uuid, Index
from sqlalchemy.orm import relationship
from estatehub.models.base import BaseModel
import enum

class DealType(str, enum.Enum):
    SALE = "sale"
    RENT = "rent"

class PropertyType(str, enum.Enum):
    APARTMENT = "Apartment"
    VILLA = "Villa"
    PLOT = "Plot"
    COMMERCIAL = "Commercial"

class Furnishing(str, enum.Enum):
    UNFURNISHED = "Unfurnished"
    SEMI_FURNISHED = "Semi-Furnished"
    FULLY_FURNISHED = "Fully-Furnished"

class PropertyStatus(str, enum.Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    SOLD = "sold"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Property(BaseModel):
    __tablename__ = "properties"
    __table_args__ = (
        Index("ix_properties_search", "city", "deal_type", "property_type"),
    )

    # Basic Info
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    deal_type = Column(Enum(DealType, name="deal_type", values_callable=_values), nullable=False)
    property_type = Column(Enum(PropertyType, name="property_type", values_callable=_values), nullable=False)
    status = Column(
        Enum(PropertyStatus, name="property_status", values_callable=_values),
        default=PropertyStatus.ACTIVE,
        nullable=False,
    )

    # Property Details
    beds = Column(Integer, nullable=False)
    baths = Column(Integer, nullable=False)
    area = Column(Float, nullable=False)
    furnishing = Column(
        Enum(Furnishing, name="furnishing", values_callable=_values),
        default=Furnishing.UNFURNISHED,
        nullable=False,
    )

    # Location
    city = Column(String(100), nullable=False)
    locality = Column(String(100), nullable=False)
    address = Column(String(255), nullable=False)
    pincode = Column(String(20), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    # Media / features, stored in display order
    images = Column(JSON, default=list, nullable=False)
    amenities = Column(JSON, default=list, nullable=False)
    highlights = Column(JSON, default=list, nullable=False)

    # Engagement counters, only ever changed through property_stats
    views = Column(Integer, default=0, nullable=False)
    saves = Column(Integer, default=0, nullable=False)
    inquiries = Column(Integer, default=0, nullable=False)

    # Relationships
    listed_by_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    listed_by = relationship("User", back_populates="properties")

    @property
    def stats(self) -> dict:
        return {"views": self.views, "saves": self.saves, "inquiries": self.inquiries}

    @property
    def location(self):
        if self.latitude is None and self.longitude is None:
            return None
        return {"lat": self.latitude, "lng": self.longitude}
