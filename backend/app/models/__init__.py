# Pydantic models for API contracts

from .common import CamelModel, FieldError, Pagination, StatusResponse
from .property import (
    # Enums
    PropertyType, RentType, SortField, SortOrder,

    # Input models
    Coordinates, Location, Facilities, PropertyDetails, PropertyImage, ContactInfo,
    PropertyCreate, PropertyUpdate, BoundingBox,

    # Views
    OwnerSummary, OwnerContact, PublicPropertyView, PropertyView, MapPropertyView,
)
from .message import (
    MessageType, MessageBox, ContactPreferences, SenderContact, MessageCreate, MessageView
)
from .user import User, UserRole, UserRegistration, UserLogin, TokenResponse, CurrentUser

__all__ = [
    # Common
    "CamelModel", "FieldError", "Pagination", "StatusResponse",

    # Property models
    "PropertyType", "RentType", "SortField", "SortOrder",
    "Coordinates", "Location", "Facilities", "PropertyDetails", "PropertyImage", "ContactInfo",
    "PropertyCreate", "PropertyUpdate", "BoundingBox",
    "OwnerSummary", "OwnerContact", "PublicPropertyView", "PropertyView", "MapPropertyView",

    # Message models
    "MessageType", "MessageBox", "ContactPreferences", "SenderContact", "MessageCreate", "MessageView",

    # User models
    "User", "UserRole", "UserRegistration", "UserLogin", "TokenResponse", "CurrentUser",
]
