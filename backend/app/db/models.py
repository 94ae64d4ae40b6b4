from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Text, JSON, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from app.core.database import Base
import uuid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


FACILITY_KEYS = (
    "wifi", "parking", "ac", "kitchen", "laundry", "security",
    "gym", "pool", "garden", "balcony", "furnished", "petFriendly",
)

# API facility key -> Property column name
FACILITY_COLUMNS = {
    key: "pet_friendly" if key == "petFriendly" else key
    for key in FACILITY_KEYS
}


class User(Base):
    """User model for authentication and owner/sender summaries"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Profile
    name = Column(String(50), nullable=False)
    phone = Column(String(20))
    role = Column(String(20), nullable=False, default="tenant")  # homeowner, broker, tenant

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    last_login = Column(DateTime(timezone=True))

    # Relationships
    properties = relationship("Property", back_populates="owner")

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )


class Property(Base):
    """Rental listing owned by a homeowner or broker"""
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey('users.id'), nullable=False)

    # Descriptive
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    property_type = Column(String(20), nullable=False)  # PG, house, flat
    rent = Column(Float, nullable=False)
    rent_type = Column(String(20), nullable=False, default="monthly")  # monthly, yearly

    # Location
    city = Column(String(100), nullable=False)
    area = Column(String(100), nullable=False)
    pin_code = Column(String(6), nullable=False)
    address = Column(String(500), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)

    # Facilities
    wifi = Column(Boolean, default=False, nullable=False)
    parking = Column(Boolean, default=False, nullable=False)
    ac = Column(Boolean, default=False, nullable=False)
    kitchen = Column(Boolean, default=False, nullable=False)
    laundry = Column(Boolean, default=False, nullable=False)
    security = Column(Boolean, default=False, nullable=False)
    gym = Column(Boolean, default=False, nullable=False)
    pool = Column(Boolean, default=False, nullable=False)
    garden = Column(Boolean, default=False, nullable=False)
    balcony = Column(Boolean, default=False, nullable=False)
    furnished = Column(Boolean, default=False, nullable=False)
    pet_friendly = Column(Boolean, default=False, nullable=False)

    # Property details
    bedrooms = Column(Integer, default=0, nullable=False)
    bathrooms = Column(Integer, default=0, nullable=False)
    floor_area = Column(Float, default=0, nullable=False)
    floor = Column(Integer, default=0, nullable=False)
    total_floors = Column(Integer, default=0, nullable=False)

    # Media: ordered list of {"url": ..., "caption": ...}
    images = Column(JSON, default=list, nullable=False)

    # Status flags
    is_available = Column(Boolean, default=True, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)
    show_on_map = Column(Boolean, default=True, nullable=False)
    views = Column(Integer, default=0, nullable=False)

    # Owner contact disclosure
    show_phone = Column(Boolean, default=True, nullable=False)
    show_email = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="properties", lazy="joined")
    messages = relationship("Message", back_populates="property", cascade="all, delete-orphan")

    # Indexes for listing search and map view
    __table_args__ = (
        Index('idx_properties_search', 'city', 'area', 'pin_code', 'property_type', 'rent', 'is_available'),
        Index('idx_properties_coordinates', 'latitude', 'longitude'),
        Index('idx_properties_owner', 'owner_id'),
        Index('idx_properties_created_at', 'created_at'),
    )

    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.area}, {self.city} - {self.pin_code}"


class Message(Base):
    """Inquiry sent by a user to a property's owner"""
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    sender_id = Column(Uuid, ForeignKey('users.id'), nullable=False)
    receiver_id = Column(Uuid, ForeignKey('users.id'), nullable=False)
    property_id = Column(Uuid, ForeignKey('properties.id'), nullable=False)

    subject = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    message_type = Column(String(30), nullable=False, default="inquiry")  # inquiry, callback_request, general

    # Read / archive state
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime(timezone=True))
    is_archived = Column(Boolean, default=False, nullable=False)

    # Contact preferences
    prefers_phone = Column(Boolean, default=False, nullable=False)
    prefers_email = Column(Boolean, default=False, nullable=False)
    prefers_whatsapp = Column(Boolean, default=False, nullable=False)

    # Sender contact, persisted only for consented channels
    sender_name = Column(String(50))
    sender_phone = Column(String(20))
    sender_email = Column(String(255))

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    sender = relationship("User", foreign_keys=[sender_id], lazy="joined")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="joined")
    property = relationship("Property", back_populates="messages", lazy="joined")

    __table_args__ = (
        Index('idx_messages_conversation', 'sender_id', 'receiver_id', 'created_at'),
        Index('idx_messages_unread', 'receiver_id', 'is_read'),
    )
