"""
Engagement counters on a property (views, saves, inquiries).

Every adjustment is a single ``UPDATE ... SET col = col + n`` so concurrent
requests never lose an increment. Callers own the transaction: these helpers
do not commit.
"""

from sqlalchemy import update
from sqlalchemy.orm import Session
from estatehub.models.property import Property


def _bump(db: Session, property_id, column, delta: int) -> bool:
    result = db.execute(
        update(Property)
        .where(Property.id == property_id)
        .values({column: column + delta})
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


def record_view(db: Session, property_id) -> bool:
    """Count one view. Returns False when the property does not exist."""
    return _bump(db, property_id, Property.views, 1)


def adjust_saves(db: Session, property_id, delta: int) -> bool:
    return _bump(db, property_id, Property.saves, delta)


def record_inquiry(db: Session, property_id) -> bool:
    return _bump(db, property_id, Property.inquiries, 1)
