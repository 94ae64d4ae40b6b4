from typing import List, Optional, Tuple, BinaryIO
import uuid
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.core.config import settings
from app.core.exceptions import NotFoundError, ForbiddenError, BusinessRuleError
from app.db.models import Property as DBProperty, FACILITY_COLUMNS, FACILITY_KEYS
from app.models.common import Pagination
from app.models.property import (
    PropertyCreate, PropertyUpdate, PropertyView, PropertyListResponse, PublicPropertyListResponse,
    PropertyCollection, PublicPropertyCollection, MapPropertyCollection, PublicPropertyView,
)
from app.models.search import ListingFilters, MapFilters
from app.models.user import CurrentUser
from app.modules.properties.query_builder import PropertyQueryBuilder
from app.modules.properties.storage import ImageStorage
from app.modules.properties.view_counter import increment_views
from app.modules.properties.visibility import (
    ViewerContext, project, to_full_view, to_map_view,
)
import logging

logger = logging.getLogger(__name__)

LISTED_MESSAGE = "Property listed successfully"
DELISTED_MESSAGE = "Property delisted successfully"

# PropertyDetails field -> column
DETAIL_COLUMNS = {
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "area": "floor_area",
    "floor": "floor",
    "total_floors": "total_floors",
}

# Location field -> column
LOCATION_COLUMNS = {
    "city": "city",
    "area": "area",
    "pin_code": "pin_code",
    "address": "address",
}


def _parse_id(property_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(property_id))
    except ValueError:
        raise NotFoundError("Property not found")


class PropertyService:
    """Listing search, visibility and owner-only mutations"""

    def __init__(self, db: Session, storage: Optional[ImageStorage] = None):
        self.db = db
        self.query_builder = PropertyQueryBuilder()
        self.storage = storage or ImageStorage()

    # Reads

    def _fetch_page(self, filters: ListingFilters) -> Tuple[List[DBProperty], int]:
        records = self.db.execute(self.query_builder.build_listing_query(filters)).scalars().all()
        total = self.db.execute(self.query_builder.build_count_query(filters)).scalar_one()
        return list(records), total

    def list_properties(self, filters: ListingFilters, current_user: CurrentUser) -> PropertyListResponse:
        """Full listing for authenticated callers"""
        records, total = self._fetch_page(filters)
        viewer = ViewerContext.for_user(current_user)

        return PropertyListResponse(
            properties=[to_full_view(record, viewer) for record in records],
            pagination=Pagination.build(filters.page, filters.limit, total),
        )

    def list_public_properties(self, filters: ListingFilters) -> PublicPropertyListResponse:
        """Teaser listing for anonymous callers"""
        records, total = self._fetch_page(filters)

        return PublicPropertyListResponse(
            properties=[project(record, ViewerContext.anonymous()) for record in records],
            pagination=Pagination.build(filters.page, filters.limit, total),
        )

    def list_map_properties(self, filters: MapFilters) -> MapPropertyCollection:
        records = self.db.execute(self.query_builder.build_map_query(filters)).scalars().all()
        return MapPropertyCollection(properties=[to_map_view(record) for record in records])

    def list_featured(self, current_user: CurrentUser) -> PropertyCollection:
        records = self.db.execute(self.query_builder.build_featured_query()).scalars().all()
        viewer = ViewerContext.for_user(current_user)
        return PropertyCollection(properties=[to_full_view(record, viewer) for record in records])

    def list_public_featured(self) -> PublicPropertyCollection:
        records = self.db.execute(self.query_builder.build_featured_query()).scalars().all()
        return PublicPropertyCollection(properties=[project(record, ViewerContext.anonymous()) for record in records])

    def list_owner_properties(self, current_user: CurrentUser) -> PropertyCollection:
        query = self.query_builder.build_owner_query(uuid.UUID(current_user.id))
        records = self.db.execute(query).scalars().all()
        viewer = ViewerContext.for_user(current_user)
        return PropertyCollection(properties=[to_full_view(record, viewer) for record in records])

    def get_property(self, property_id: str, current_user: CurrentUser) -> PropertyView:
        """Full detail view; counts as a view"""
        record = self._get(property_id)
        self._count_view(record)
        return to_full_view(record, ViewerContext.for_user(current_user))

    def get_public_property(self, property_id: str) -> PublicPropertyView:
        """Teaser detail; only available listings are visible"""
        record = self._get(property_id)
        if not record.is_available:
            raise NotFoundError("Property not found")
        self._count_view(record)
        return project(record, ViewerContext.anonymous())

    @staticmethod
    def facilities() -> List[str]:
        return list(FACILITY_KEYS)

    # Mutations

    def create_property(self, data: PropertyCreate, current_user: CurrentUser) -> PropertyView:
        if not current_user.can_list_properties():
            raise ForbiddenError(f"User role {current_user.role.value} is not authorized to list properties")

        record = DBProperty(
            id=uuid.uuid4(),
            owner_id=uuid.UUID(current_user.id),
            title=data.title,
            description=data.description,
            property_type=data.property_type.value,
            rent=data.rent,
            rent_type=data.rent_type.value,
            images=[image.model_dump() for image in data.images],
            show_on_map=data.show_on_map,
            is_available=True,
            is_verified=False,
            views=0,
        )
        self._apply_location(record, data.location.model_dump())
        self._apply_facilities(record, data.facilities.model_dump())
        self._apply_details(record, data.property_details.model_dump())
        self._apply_contact_info(record, data.contact_info.model_dump())

        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Property {record.id} created by {current_user.id}")
        return to_full_view(record, ViewerContext.for_user(current_user))

    def update_property(self, property_id: str, data: PropertyUpdate, current_user: CurrentUser) -> PropertyView:
        record = self._get_owned(property_id, current_user)
        changes = data.model_dump(exclude_unset=True)

        for field in ("title", "description", "rent", "show_on_map"):
            if field in changes and changes[field] is not None:
                setattr(record, field, changes[field])
        if data.property_type is not None:
            record.property_type = data.property_type.value
        if data.rent_type is not None:
            record.rent_type = data.rent_type.value

        if data.location is not None:
            self._apply_location(record, data.location.model_dump(exclude_unset=True))
        if data.facilities is not None:
            self._apply_facilities(record, data.facilities.model_dump(exclude_none=True))
        if data.property_details is not None:
            self._apply_details(record, data.property_details.model_dump(exclude_none=True))
        if data.contact_info is not None:
            self._apply_contact_info(record, data.contact_info.model_dump(exclude_none=True))

        # New images are appended after the existing ones
        if data.images:
            self._append_images(record, [image.model_dump() for image in data.images])

        try:
            self.db.commit()
            self.db.refresh(record)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Property {record.id} updated by {current_user.id}")
        return to_full_view(record, ViewerContext.for_user(current_user))

    def delete_property(self, property_id: str, current_user: CurrentUser) -> None:
        record = self._get_owned(property_id, current_user)
        image_urls = [image.get("url", "") for image in (record.images or [])]

        try:
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for url in image_urls:
            self.storage.delete(url)

        logger.info(f"Property {property_id} deleted by {current_user.id}")

    def set_availability(
        self, property_id: str, current_user: CurrentUser, available: Optional[bool] = None
    ) -> Tuple[str, PropertyView]:
        """
        List (True), delist (False) or toggle (None) a property.

        Setting the current state again is a no-op. Returns the status message
        and the owner view.
        """
        record = self._get_owned(property_id, current_user)
        target = (not record.is_available) if available is None else available

        if record.is_available != target:
            record.is_available = target
            try:
                self.db.commit()
                self.db.refresh(record)
            except Exception:
                self.db.rollback()
                raise
            logger.info(f"Property {record.id} availability set to {target}")

        message = LISTED_MESSAGE if record.is_available else DELISTED_MESSAGE
        return message, to_full_view(record, ViewerContext.for_user(current_user))

    def add_images(
        self, property_id: str, uploads: List[Tuple[BinaryIO, str, Optional[str]]], current_user: CurrentUser
    ) -> PropertyView:
        """Store uploaded files and append them to the listing's images"""
        record = self._get_owned(property_id, current_user)
        if not uploads:
            raise BusinessRuleError("No images provided")

        self._check_image_capacity(record, len(uploads))
        for _, filename, content_type in uploads:
            self.storage.validate(filename, content_type)

        stored = []
        try:
            for stream, filename, content_type in uploads:
                stored.append(self.storage.save(stream, filename, content_type))
        except Exception:
            # A rejected file aborts the batch; remove the ones already written
            for image in stored:
                self.storage.delete(image.url)
            raise

        self._append_images(record, [image.model_dump() for image in stored])

        try:
            self.db.commit()
            self.db.refresh(record)
        except Exception:
            self.db.rollback()
            for image in stored:
                self.storage.delete(image.url)
            raise

        return to_full_view(record, ViewerContext.for_user(current_user))

    # Helpers

    def _get(self, property_id: str) -> DBProperty:
        record = self.db.get(DBProperty, _parse_id(property_id))
        if not record:
            raise NotFoundError("Property not found")
        return record

    def _get_owned(self, property_id: str, current_user: CurrentUser) -> DBProperty:
        """Existence is checked before ownership"""
        record = self._get(property_id)
        if str(record.owner_id) != current_user.id:
            raise ForbiddenError("Not authorized to modify this property")
        return record

    def _count_view(self, record: DBProperty) -> None:
        try:
            increment_views(self.db, [record.id])
            self.db.commit()
            self.db.refresh(record)
        except Exception as e:
            self.db.rollback()
            logger.warning(f"Failed to count view for property {record.id}: {e}")

    def _check_image_capacity(self, record: DBProperty, incoming: int) -> None:
        existing = len(record.images or [])
        if existing + incoming > settings.MAX_IMAGES_PER_PROPERTY:
            raise BusinessRuleError(
                f"A property can have at most {settings.MAX_IMAGES_PER_PROPERTY} images"
            )

    def _append_images(self, record: DBProperty, images: List[dict]) -> None:
        self._check_image_capacity(record, len(images))
        # Reassign so the JSON column is flagged dirty
        record.images = list(record.images or []) + images

    @staticmethod
    def _apply_location(record: DBProperty, location: dict) -> None:
        for field, column in LOCATION_COLUMNS.items():
            if location.get(field) is not None:
                setattr(record, column, location[field])

        coordinates = location.get("coordinates")
        if coordinates:
            record.latitude = coordinates["latitude"]
            record.longitude = coordinates["longitude"]

    @staticmethod
    def _apply_facilities(record: DBProperty, facilities: dict) -> None:
        for column in FACILITY_COLUMNS.values():
            if column in facilities:
                setattr(record, column, facilities[column])

    @staticmethod
    def _apply_details(record: DBProperty, details: dict) -> None:
        for field, column in DETAIL_COLUMNS.items():
            if field in details:
                setattr(record, column, details[field])

    @staticmethod
    def _apply_contact_info(record: DBProperty, contact_info: dict) -> None:
        for field in ("show_phone", "show_email"):
            if field in contact_info:
                setattr(record, field, contact_info[field])
