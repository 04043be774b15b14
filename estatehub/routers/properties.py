from fastapi import APIRouter, Depends, status, Query, Form, UploadFile, File
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from estatehub.core.database import get_db
from estatehub.core.exceptions import EstateHubError, ValidationError, describe_validation_errors
from estatehub.models.property import DealType, PropertyType, Furnishing, PropertyStatus
from estatehub.models.user import User
from estatehub.schemas.common import MessageResponse
from estatehub.schemas.property import (
    PropertyCreate, PropertyUpdate, PropertyFilters,
    PropertyEnvelope, PropertyListResponse, SavedPropertiesResponse,
)
from estatehub.api.deps import get_current_active_user, require_lister
from estatehub.services import properties as property_service
from estatehub.services.property_search import search_properties
from estatehub.utils.file_storage import (
    save_property_images, delete_property_image, real_uploads,
)
from typing import List, Optional
from uuid import UUID

router = APIRouter(prefix="/properties", tags=["Properties"])


# ─── Helpers ──────────────────────────────────────────────────────────────────

def _validated(schema, **values):
    """
    Build ``schema`` from raw form/query values, leaving out the ones that were
    not sent so schema defaults apply. Pydantic errors become a 400.
    """
    try:
        return schema(**{k: v for k, v in values.items() if v is not None})
    except PydanticValidationError as e:
        raise ValidationError(describe_validation_errors(e.errors()))


async def _store_images(images: Optional[List[UploadFile]]) -> List[str]:
    return await save_property_images(real_uploads(images))


def _discard(paths: List[str]):
    for path in paths:
        delete_property_image(path)


# ─── LIST (public) ────────────────────────────────────────────────────────────

@router.get("", response_model=PropertyListResponse)
async def list_properties(
    db: Session = Depends(get_db),
    search_query: Optional[str] = Query(None, alias="searchQuery"),
    city: Optional[str] = Query(None),
    deal_type: Optional[str] = Query(None, alias="dealType"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    beds: Optional[str] = Query(None),
    listed_by: Optional[str] = Query(None, alias="listedBy"),
):
    """List active properties matching the filters, newest first."""
    filters = _validated(
        PropertyFilters,
        search_query=search_query,
        city=city,
        deal_type=deal_type,
        property_type=property_type,
        min_price=min_price,
        max_price=max_price,
        beds=beds,
        listed_by=listed_by,
    )
    properties = search_properties(db, filters)
    return {"success": True, "count": len(properties), "properties": properties}


# ─── MY LISTINGS (lister) ─────────────────────────────────────────────────────

@router.get("/my/listings", response_model=PropertyListResponse)
async def my_listings(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_lister),
):
    """Every listing of the current user, whatever its status."""
    properties = property_service.list_properties_for_owner(db, current_user.id)
    return {"success": True, "count": len(properties), "properties": properties}


# ─── GET single property (public) ─────────────────────────────────────────────

@router.get("/{property_id}", response_model=PropertyEnvelope)
async def get_property(
    property_id: UUID,
    db: Session = Depends(get_db),
):
    """Get a single property. Every fetch counts as a view."""
    prop = property_service.get_property(db, property_id)
    return {"success": True, "property": prop}


# ─── CREATE: multipart form + image uploads ───────────────────────────────────

@router.post("", response_model=PropertyEnvelope, status_code=status.HTTP_201_CREATED)
async def create_property(
    # ── Required fields ───────────────────────────────────────────────────────
    title: str = Form(...),
    description: str = Form(...),
    price: float = Form(...),
    deal_type: DealType = Form(..., alias="dealType"),
    property_type: PropertyType = Form(..., alias="propertyType"),
    beds: int = Form(...),
    baths: int = Form(...),
    area: float = Form(...),
    city: str = Form(...),
    locality: str = Form(...),
    address: str = Form(...),
    pincode: str = Form(...),

    # ── Optional fields ───────────────────────────────────────────────────────
    amenities: Optional[List[str]] = Form(None),    # repeated field
    highlights: Optional[str] = Form(None),         # one per line
    furnishing: Optional[Furnishing] = Form(None),
    status_: Optional[PropertyStatus] = Form(None, alias="status"),
    lat: Optional[float] = Form(None),
    lng: Optional[float] = Form(None),

    # ── Image files (1 to 3) ──────────────────────────────────────────────────
    images: Optional[List[UploadFile]] = File(None),

    db: Session = Depends(get_db),
    current_user: User = Depends(require_lister),
):
    """Create a listing owned by the current user. At least one image is required."""
    data = _validated(
        PropertyCreate,
        title=title,
        description=description,
        price=price,
        deal_type=deal_type,
        property_type=property_type,
        beds=beds,
        baths=baths,
        area=area,
        city=city,
        locality=locality,
        address=address,
        pincode=pincode,
        amenities=amenities,
        highlights=highlights,
        furnishing=furnishing,
        status=status_,
        latitude=lat,
        longitude=lng,
    )

    image_paths = await _store_images(images)
    try:
        prop = property_service.create_property(db, data, current_user.id, image_paths)
    except EstateHubError:
        _discard(image_paths)
        raise

    return {"success": True, "property": prop}


# ─── UPDATE: owner only, images replaced only when re-uploaded ────────────────

@router.put("/{property_id}", response_model=PropertyEnvelope)
async def update_property(
    property_id: UUID,

    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    deal_type: Optional[DealType] = Form(None, alias="dealType"),
    property_type: Optional[PropertyType] = Form(None, alias="propertyType"),
    beds: Optional[int] = Form(None),
    baths: Optional[int] = Form(None),
    area: Optional[float] = Form(None),
    city: Optional[str] = Form(None),
    locality: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    pincode: Optional[str] = Form(None),
    amenities: Optional[List[str]] = Form(None),
    highlights: Optional[str] = Form(None),
    furnishing: Optional[Furnishing] = Form(None),
    status_: Optional[PropertyStatus] = Form(None, alias="status"),
    lat: Optional[float] = Form(None),
    lng: Optional[float] = Form(None),

    images: Optional[List[UploadFile]] = File(None),

    db: Session = Depends(get_db),
    current_user: User = Depends(require_lister),
):
    """Update a property. Omit images to keep the existing ones."""
    changes = _validated(
        PropertyUpdate,
        title=title,
        description=description,
        price=price,
        deal_type=deal_type,
        property_type=property_type,
        beds=beds,
        baths=baths,
        area=area,
        city=city,
        locality=locality,
        address=address,
        pincode=pincode,
        amenities=amenities,
        highlights=highlights,
        furnishing=furnishing,
        status=status_,
        latitude=lat,
        longitude=lng,
    )

    image_paths = await _store_images(images)
    try:
        prop = property_service.update_property(db, property_id, current_user.id, changes, image_paths)
    except EstateHubError:
        _discard(image_paths)
        raise

    return {"success": True, "property": prop}


# ─── DELETE: owner only ───────────────────────────────────────────────────────

@router.delete("/{property_id}", response_model=MessageResponse)
async def delete_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_lister),
):
    property_service.delete_property(db, property_id, current_user.id)
    return {"success": True, "message": "Property deleted"}


# ─── SAVE / UNSAVE ────────────────────────────────────────────────────────────

@router.post("/{property_id}/save", response_model=SavedPropertiesResponse)
async def toggle_save_property(
    property_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
):
    saved = property_service.toggle_saved_property(db, current_user.id, property_id)
    return {"success": True, "saved_properties": saved}
