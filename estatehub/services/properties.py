import logging
from typing import List, Optional
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from estatehub.core.config import settings
from estatehub.core.exceptions import NotAuthorizedError, NotFoundError, ValidationError
from estatehub.models.property import Property
from estatehub.models.user import saved_properties
from estatehub.schemas.property import PropertyCreate, PropertyUpdate
from estatehub.services import property_stats
from estatehub.utils.file_storage import delete_property_image

logger = logging.getLogger(__name__)


def _check_image_count(image_paths: List[str]):
    if not image_paths:
        raise ValidationError("At least 1 property image is required")
    if len(image_paths) > settings.MAX_PROPERTY_IMAGES:
        raise ValidationError(f"A maximum of {settings.MAX_PROPERTY_IMAGES} images is allowed")


def _get_owned(db: Session, property_id, actor_id, action: str) -> Property:
    prop = db.get(Property, property_id)
    if prop is None:
        raise NotFoundError("Property not found")
    if prop.listed_by_id != actor_id:
        raise NotAuthorizedError(f"Not authorized to {action} this property")
    return prop


def create_property(db: Session, data: PropertyCreate, owner_id, image_paths: List[str]) -> Property:
    _check_image_count(image_paths)

    prop = Property(
        **data.model_dump(),
        images=list(image_paths),
        listed_by_id=owner_id,
    )
    db.add(prop)
    db.commit()
    db.refresh(prop)

    logger.info("Property %s created by %s", prop.id, owner_id)
    return prop


def get_property(db: Session, property_id) -> Property:
    """Fetch a property and count the view."""
    if not property_stats.record_view(db, property_id):
        raise NotFoundError("Property not found")
    db.commit()
    return db.get(Property, property_id, populate_existing=True)


def update_property(
    db: Session,
    property_id,
    actor_id,
    changes: PropertyUpdate,
    image_paths: Optional[List[str]] = None,
) -> Property:
    """
    Apply the fields present in ``changes``. Images are replaced only when
    new ones were uploaded; the replaced files are removed from disk.
    """
    prop = _get_owned(db, property_id, actor_id, "update")

    for field, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(prop, field, value)

    replaced = []
    if image_paths:
        _check_image_count(image_paths)
        replaced = list(prop.images or [])
        prop.images = list(image_paths)

    db.commit()
    db.refresh(prop)

    for path in replaced:
        delete_property_image(path)
    return prop


def delete_property(db: Session, property_id, actor_id):
    """Hard delete. Chats about the property are left as they are."""
    prop = _get_owned(db, property_id, actor_id, "delete")
    images = list(prop.images or [])

    db.execute(delete(saved_properties).where(saved_properties.c.property_id == property_id))
    db.delete(prop)
    db.commit()

    for path in images:
        delete_property_image(path)
    logger.info("Property %s deleted by %s", property_id, actor_id)


def saved_property_ids(db: Session, user_id) -> List:
    return list(
        db.scalars(
            select(saved_properties.c.property_id)
            .where(saved_properties.c.user_id == user_id)
            .order_by(saved_properties.c.saved_at)
        )
    )


def toggle_saved_property(db: Session, user_id, property_id) -> List:
    """
    Save the property if the user has not saved it, otherwise unsave it, and
    move the property's save counter by the same step. Returns the user's
    saved property ids.
    """
    if db.get(Property, property_id) is None:
        raise NotFoundError("Property not found")

    removed = db.execute(
        delete(saved_properties).where(
            saved_properties.c.user_id == user_id,
            saved_properties.c.property_id == property_id,
        )
    ).rowcount

    if removed:
        property_stats.adjust_saves(db, property_id, -1)
    else:
        try:
            db.execute(insert(saved_properties).values(user_id=user_id, property_id=property_id))
        except IntegrityError:
            # A concurrent request by the same user saved it first.
            db.rollback()
            return saved_property_ids(db, user_id)
        property_stats.adjust_saves(db, property_id, 1)
    db.commit()

    return saved_property_ids(db, user_id)


def list_properties_for_owner(db: Session, owner_id) -> List[Property]:
    stmt = (
        select(Property)
        .where(Property.listed_by_id == owner_id)
        .order_by(Property.created_at.desc())
    )
    return list(db.scalars(stmt))
