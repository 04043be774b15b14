from pydantic import Field, field_validator, model_validator
from typing import Optional, List, Literal, Union, Any
from uuid import UUID
from datetime import datetime
import re
from estatehub.models.property import DealType, PropertyType, Furnishing, PropertyStatus
from estatehub.schemas.common import CamelModel
from estatehub.schemas.user import ListerSummary


# ─── Form normalisation helpers ───────────────────────────────────────────────
# Multipart forms send highlights as one newline-separated string and amenities
# as either a single value or repeated fields.

def _split_highlights(value: Any) -> Any:
    if isinstance(value, str):
        return [line.strip() for line in value.split("\n") if line.strip()]
    return value


def _as_unique_list(value: Any) -> Any:
    if value is None:
        return value
    if isinstance(value, str):
        value = [value]
    seen = []
    for item in value:
        item = item.strip() if isinstance(item, str) else item
        if item and item not in seen:
            seen.append(item)
    return seen


# ─── Embedded shapes ──────────────────────────────────────────────────────────

class PropertyStats(CamelModel):
    views: int = 0
    saves: int = 0
    inquiries: int = 0


class Location(CamelModel):
    lat: Optional[float] = None
    lng: Optional[float] = None


class PropertySummary(CamelModel):
    """Property fields shown alongside a chat thread."""
    id: UUID
    title: str
    images: List[str] = []
    locality: str
    city: str
    price: float
    deal_type: DealType


# ─── Create / Update ──────────────────────────────────────────────────────────

class PropertyCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    deal_type: DealType
    property_type: PropertyType
    beds: int = Field(..., ge=0)
    baths: int = Field(..., ge=0)
    area: float = Field(..., ge=0)
    city: str = Field(..., min_length=1, max_length=100)
    locality: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=255)
    pincode: str = Field(..., min_length=1, max_length=20)
    amenities: List[str] = []
    highlights: List[str] = []
    furnishing: Furnishing = Furnishing.UNFURNISHED
    status: PropertyStatus = PropertyStatus.ACTIVE
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("title", "city", "locality", "address", "pincode", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("highlights", mode="before")
    @classmethod
    def parse_highlights(cls, v):
        return _split_highlights(v) if v is not None else []

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v):
        return _as_unique_list(v) if v is not None else []


class PropertyUpdate(CamelModel):
    """Partial update: only fields that were sent are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    deal_type: Optional[DealType] = None
    property_type: Optional[PropertyType] = None
    beds: Optional[int] = Field(None, ge=0)
    baths: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    locality: Optional[str] = Field(None, min_length=1, max_length=100)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    pincode: Optional[str] = Field(None, min_length=1, max_length=20)
    amenities: Optional[List[str]] = None
    highlights: Optional[List[str]] = None
    furnishing: Optional[Furnishing] = None
    status: Optional[PropertyStatus] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("title", "city", "locality", "address", "pincode", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("highlights", mode="before")
    @classmethod
    def parse_highlights(cls, v):
        return _split_highlights(v)

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v):
        return _as_unique_list(v)


# ─── Search filters ───────────────────────────────────────────────────────────

_BEDS_PATTERN = re.compile(r"^(all|4\+|\d{1,3})$")


class PropertyFilters(CamelModel):
    search_query: Optional[str] = None
    city: Optional[str] = None
    deal_type: Optional[Union[Literal["all"], DealType]] = None
    property_type: Optional[Union[Literal["all"], PropertyType]] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    beds: Optional[str] = None
    listed_by: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def drop_blank_values(cls, data):
        # Query strings send "" for untouched inputs; treat them as absent.
        if isinstance(data, dict):
            return {
                k: (v.strip() if isinstance(v, str) else v)
                for k, v in data.items()
                if not (isinstance(v, str) and not v.strip())
            }
        return data

    @field_validator("beds")
    @classmethod
    def validate_beds(cls, v):
        if v is not None and not _BEDS_PATTERN.match(v):
            raise ValueError("beds must be 'all', '4+' or a whole number")
        return v


# ─── Responses ────────────────────────────────────────────────────────────────

class PropertyResponse(CamelModel):
    id: UUID
    title: str
    description: str
    price: float
    deal_type: DealType
    property_type: PropertyType
    beds: int
    baths: int
    area: float
    city: str
    locality: str
    address: str
    pincode: str
    images: List[str] = []
    amenities: List[str] = []
    highlights: List[str] = []
    furnishing: Furnishing
    status: PropertyStatus
    listed_by: Optional[ListerSummary] = None
    stats: PropertyStats
    location: Optional[Location] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PropertyEnvelope(CamelModel):
    success: bool = True
    property: PropertyResponse


class PropertyListResponse(CamelModel):
    success: bool = True
    count: int
    properties: List[PropertyResponse]


class SavedPropertiesResponse(CamelModel):
    success: bool = True
    saved_properties: List[UUID]
