"""
Tiered projection of property records.

Every response that carries a property goes through ``project`` (or one of the
view builders below), so field disclosure is decided in one place:

- anonymous callers get the teaser view,
- authenticated callers get the full record with owner phone/email gated by
  the listing's contact settings,
- the owner gets everything.
"""
from dataclasses import dataclass
from typing import Optional, Union
from app.db.models import Property, FACILITY_COLUMNS
from app.models.property import (
    PublicPropertyView, PropertyView, MapPropertyView, OwnerSummary, OwnerContact,
    PublicLocation, Location, Coordinates, Facilities, PropertyDetails, PropertyImage,
    ContactInfo, MapLocation,
)
from app.models.user import CurrentUser


@dataclass(frozen=True)
class ViewerContext:
    """Who is looking at a record"""
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def owns(self, record: Property) -> bool:
        return self.is_authenticated and str(record.owner_id) == self.user_id

    @classmethod
    def anonymous(cls) -> "ViewerContext":
        return cls()

    @classmethod
    def for_user(cls, user: CurrentUser) -> "ViewerContext":
        return cls(user_id=user.id)


def project(record: Property, viewer: ViewerContext) -> Union[PublicPropertyView, PropertyView]:
    if not viewer.is_authenticated:
        return to_public_view(record)
    return to_full_view(record, viewer)


def _images(record: Property):
    return [PropertyImage.model_validate(image) for image in (record.images or [])]


def _coordinates(record: Property) -> Optional[Coordinates]:
    if record.latitude is None or record.longitude is None:
        return None
    return Coordinates(latitude=record.latitude, longitude=record.longitude)


def to_public_view(record: Property) -> PublicPropertyView:
    return PublicPropertyView(
        id=str(record.id),
        title=record.title,
        property_type=record.property_type,
        location=PublicLocation(city=record.city),
        images=_images(record),
        owner=OwnerSummary(name=record.owner.name, role=record.owner.role),
        views=record.views,
        created_at=record.created_at,
    )


def owner_contact(record: Property, viewer: ViewerContext) -> OwnerContact:
    owner = record.owner
    is_owner = viewer.owns(record)
    return OwnerContact(
        id=str(owner.id),
        name=owner.name,
        role=owner.role,
        phone=owner.phone if is_owner or record.show_phone else None,
        email=owner.email if is_owner or record.show_email else None,
    )


def to_full_view(record: Property, viewer: ViewerContext) -> PropertyView:
    facilities = Facilities(**{
        column: getattr(record, column) for column in FACILITY_COLUMNS.values()
    })

    return PropertyView(
        id=str(record.id),
        title=record.title,
        description=record.description,
        property_type=record.property_type,
        rent=record.rent,
        rent_type=record.rent_type,
        location=Location(
            city=record.city,
            area=record.area,
            pin_code=record.pin_code,
            address=record.address,
            coordinates=_coordinates(record),
        ),
        full_address=record.full_address,
        facilities=facilities,
        property_details=PropertyDetails(
            bedrooms=record.bedrooms,
            bathrooms=record.bathrooms,
            area=record.floor_area,
            floor=record.floor,
            total_floors=record.total_floors,
        ),
        images=_images(record),
        is_available=record.is_available,
        is_verified=record.is_verified,
        show_on_map=record.show_on_map,
        views=record.views,
        contact_info=ContactInfo(show_phone=record.show_phone, show_email=record.show_email),
        owner=owner_contact(record, viewer),
        is_owner=viewer.owns(record),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def to_map_view(record: Property) -> MapPropertyView:
    return MapPropertyView(
        id=str(record.id),
        title=record.title,
        rent=record.rent,
        property_type=record.property_type,
        location=MapLocation(
            city=record.city,
            area=record.area,
            coordinates=_coordinates(record),
        ),
        images=_images(record),
    )
