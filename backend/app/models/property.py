from pydantic import Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
from app.models.common import CamelModel, Pagination


class PropertyType(str, Enum):
    PG = "PG"
    HOUSE = "house"
    FLAT = "flat"


class RentType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class SortField(str, Enum):
    RENT = "rent"
    CREATED_AT = "createdAt"
    VIEWS = "views"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


PIN_CODE_PATTERN = r"^[0-9]{6}$"


class Coordinates(CamelModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class Location(CamelModel):
    city: str = Field(..., min_length=1, max_length=100)
    area: str = Field(..., min_length=1, max_length=100)
    pin_code: str = Field(..., pattern=PIN_CODE_PATTERN)
    address: str = Field(..., min_length=1, max_length=500)
    coordinates: Optional[Coordinates] = None

    @field_validator('city', 'area', 'address', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class Facilities(CamelModel):
    wifi: bool = False
    parking: bool = False
    ac: bool = False
    kitchen: bool = False
    laundry: bool = False
    security: bool = False
    gym: bool = False
    pool: bool = False
    garden: bool = False
    balcony: bool = False
    furnished: bool = False
    pet_friendly: bool = False


class PropertyDetails(CamelModel):
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    area: float = Field(0, ge=0)
    floor: int = Field(0, ge=0)
    total_floors: int = Field(0, ge=0)


class PropertyImage(CamelModel):
    url: str = Field(..., min_length=1)
    caption: str = ""


class ContactInfo(CamelModel):
    show_phone: bool = True
    show_email: bool = False


class PropertyCreate(CamelModel):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20, max_length=1000)
    property_type: PropertyType
    rent: float = Field(..., ge=0, allow_inf_nan=False)
    rent_type: RentType = RentType.MONTHLY
    location: Location
    facilities: Facilities = Facilities()
    property_details: PropertyDetails = PropertyDetails()
    images: List[PropertyImage] = Field(default_factory=list, max_length=10)
    show_on_map: bool = True
    contact_info: ContactInfo = ContactInfo()

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class LocationUpdate(CamelModel):
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    area: Optional[str] = Field(None, min_length=1, max_length=100)
    pin_code: Optional[str] = Field(None, pattern=PIN_CODE_PATTERN)
    address: Optional[str] = Field(None, min_length=1, max_length=500)
    coordinates: Optional[Coordinates] = None

    @field_validator('city', 'area', 'address', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class FacilitiesUpdate(CamelModel):
    wifi: Optional[bool] = None
    parking: Optional[bool] = None
    ac: Optional[bool] = None
    kitchen: Optional[bool] = None
    laundry: Optional[bool] = None
    security: Optional[bool] = None
    gym: Optional[bool] = None
    pool: Optional[bool] = None
    garden: Optional[bool] = None
    balcony: Optional[bool] = None
    furnished: Optional[bool] = None
    pet_friendly: Optional[bool] = None


class PropertyDetailsUpdate(CamelModel):
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    area: Optional[float] = Field(None, ge=0)
    floor: Optional[int] = Field(None, ge=0)
    total_floors: Optional[int] = Field(None, ge=0)


class ContactInfoUpdate(CamelModel):
    show_phone: Optional[bool] = None
    show_email: Optional[bool] = None


class PropertyUpdate(CamelModel):
    """Partial update; nested objects are merged field by field"""
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    description: Optional[str] = Field(None, min_length=20, max_length=1000)
    property_type: Optional[PropertyType] = None
    rent: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    rent_type: Optional[RentType] = None
    location: Optional[LocationUpdate] = None
    facilities: Optional[FacilitiesUpdate] = None
    property_details: Optional[PropertyDetailsUpdate] = None
    images: Optional[List[PropertyImage]] = None
    show_on_map: Optional[bool] = None
    contact_info: Optional[ContactInfoUpdate] = None

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


# Response views

class OwnerSummary(CamelModel):
    """Owner fields shown to the public"""
    name: str
    role: str


class OwnerContact(CamelModel):
    """Owner fields shown to authenticated callers; phone/email are gated by contactInfo"""
    id: str
    name: str
    role: str
    phone: Optional[str] = None
    email: Optional[str] = None


class PublicLocation(CamelModel):
    city: str


class PublicPropertyView(CamelModel):
    """Teaser view for unauthenticated callers"""
    id: str
    title: str
    property_type: PropertyType
    location: PublicLocation
    images: List[PropertyImage] = []
    owner: OwnerSummary
    views: int
    created_at: datetime


class PropertyView(CamelModel):
    """Full view for authenticated callers and owners"""
    id: str
    title: str
    description: str
    property_type: PropertyType
    rent: float
    rent_type: RentType
    location: Location
    full_address: str
    facilities: Facilities
    property_details: PropertyDetails
    images: List[PropertyImage] = []
    is_available: bool
    is_verified: bool
    show_on_map: bool
    views: int
    contact_info: ContactInfo
    owner: OwnerContact
    is_owner: bool = False
    created_at: datetime
    updated_at: datetime


class MapLocation(CamelModel):
    city: str
    area: str
    coordinates: Coordinates


class MapPropertyView(CamelModel):
    id: str
    title: str
    rent: float
    property_type: PropertyType
    location: MapLocation
    images: List[PropertyImage] = []


# Response envelopes

class PropertyListResponse(CamelModel):
    properties: List[PropertyView]
    pagination: Pagination


class PublicPropertyListResponse(CamelModel):
    properties: List[PublicPropertyView]
    pagination: Pagination


class PropertyCollection(CamelModel):
    properties: List[PropertyView]


class PublicPropertyCollection(CamelModel):
    properties: List[PublicPropertyView]


class MapPropertyCollection(CamelModel):
    properties: List[MapPropertyView]


class PropertyResponse(CamelModel):
    property: PropertyView


class PublicPropertyResponse(CamelModel):
    property: PublicPropertyView


class PropertyMutationResponse(CamelModel):
    message: str
    property: PropertyView


class FacilitiesListResponse(CamelModel):
    facilities: List[str]


class BoundingBox(CamelModel):
    sw_lat: float = Field(..., ge=-90, le=90)
    sw_lng: float = Field(..., ge=-180, le=180)
    ne_lat: float = Field(..., ge=-90, le=90)
    ne_lng: float = Field(..., ge=-180, le=180)

    @model_validator(mode='after')
    def validate_corners(self):
        if self.sw_lat > self.ne_lat or self.sw_lng > self.ne_lng:
            raise ValueError('south-west corner must not exceed north-east corner')
        return self

    @classmethod
    def split(cls, raw: str) -> dict:
        """Split 'swLat,swLng,neLat,neLng' into corner fields"""
        parts = [part.strip() for part in raw.split(",")]
        if len(parts) != 4:
            raise ValueError('bounds must be swLat,swLng,neLat,neLng')
        try:
            sw_lat, sw_lng, ne_lat, ne_lng = (float(part) for part in parts)
        except ValueError:
            raise ValueError('bounds must contain four numbers')
        return {"sw_lat": sw_lat, "sw_lng": sw_lng, "ne_lat": ne_lat, "ne_lng": ne_lng}
