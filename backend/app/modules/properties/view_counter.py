from typing import Iterable, List
import uuid
from sqlalchemy import update
from sqlalchemy.orm import Session, sessionmaker
from app.db.models import Property
import logging

logger = logging.getLogger(__name__)


def _as_uuids(property_ids: Iterable) -> List[uuid.UUID]:
    return [pid if isinstance(pid, uuid.UUID) else uuid.UUID(str(pid)) for pid in property_ids]


def increment_views(db: Session, property_ids: Iterable) -> int:
    """Atomically add one view to each property; returns rows updated"""
    ids = _as_uuids(property_ids)
    if not ids:
        return 0

    result = db.execute(
        update(Property)
        .where(Property.id.in_(ids))
        .values(views=Property.views + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def record_views(session_factory: sessionmaker, property_ids: List[str]) -> None:
    """
    Background task run after a listing response has been sent.

    One batched UPDATE per page. A failure only loses these view counts, so it
    is logged and never re-raised.
    """
    if not property_ids:
        return

    db = session_factory()
    try:
        updated = increment_views(db, property_ids)
        db.commit()
        logger.debug(f"Recorded views for {updated} properties")
    except Exception as e:
        db.rollback()
        logger.warning(f"Failed to record views for {len(property_ids)} properties: {e}")
    finally:
        db.close()
