"""
Property search: turns the optional listing filters into one AND-ed set of
predicates over the ``properties`` table.

Only ``active`` listings are ever returned. The free-text search is a single
OR-group (title / city / locality) sitting next to the other constraints, so a
``city`` filter narrows the result set on its own rather than narrowing which
column the text search may match.
"""

import logging
from typing import List, Optional, Sequence
from sqlalchemy import or_, false, select
from sqlalchemy.orm import Session, joinedload
from estatehub.models.property import Property, PropertyStatus
from estatehub.models.user import User, UserRole
from estatehub.schemas.property import PropertyFilters

logger = logging.getLogger(__name__)

ALL = "all"
FOUR_PLUS = "4+"


def _is_set(value) -> bool:
    return value is not None and value != ALL


def build_property_criteria(filters: PropertyFilters, lister_ids: Optional[Sequence] = None) -> list:
    """
    Return the list of predicates for ``filters``.

    ``lister_ids`` is the already-resolved set of user ids for the ``listed_by``
    role filter; pass None when that filter is not in use. An empty sequence
    matches nothing.
    """
    criteria = [Property.status == PropertyStatus.ACTIVE]

    if filters.search_query:
        term = filters.search_query
        criteria.append(
            or_(
                Property.title.icontains(term, autoescape=True),
                Property.city.icontains(term, autoescape=True),
                Property.locality.icontains(term, autoescape=True),
            )
        )

    if filters.city:
        criteria.append(Property.city.icontains(filters.city, autoescape=True))
    if _is_set(filters.deal_type):
        criteria.append(Property.deal_type == filters.deal_type)
    if _is_set(filters.property_type):
        criteria.append(Property.property_type == filters.property_type)

    if filters.min_price is not None:
        criteria.append(Property.price >= filters.min_price)
    if filters.max_price is not None:
        criteria.append(Property.price <= filters.max_price)

    if _is_set(filters.beds):
        if filters.beds == FOUR_PLUS:
            criteria.append(Property.beds >= 4)
        else:
            criteria.append(Property.beds == int(filters.beds))

    if lister_ids is not None:
        criteria.append(Property.listed_by_id.in_(lister_ids) if lister_ids else false())

    return criteria


def lister_ids_for_role(db: Session, role: str) -> List:
    """First half of the ``listed_by`` join: ids of every user with ``role``."""
    if role not in {r.value for r in UserRole}:
        return []
    return list(db.scalars(select(User.id).where(User.role == UserRole(role))))


def search_properties(db: Session, filters: PropertyFilters) -> List[Property]:
    lister_ids = None
    if _is_set(filters.listed_by):
        lister_ids = lister_ids_for_role(db, filters.listed_by)
        logger.debug("listedBy=%s resolved to %d users", filters.listed_by, len(lister_ids))

    stmt = (
        select(Property)
        .options(joinedload(Property.listed_by))
        .where(*build_property_criteria(filters, lister_ids))
        .order_by(Property.created_at.desc())
    )
    return list(db.scalars(stmt).unique())
