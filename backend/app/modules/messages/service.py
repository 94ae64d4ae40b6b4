from typing import Dict, Optional
from datetime import datetime, timezone
import uuid
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session
from app.core.exceptions import NotFoundError, ForbiddenError, BusinessRuleError
from app.db.models import Message as DBMessage, Property as DBProperty, User as DBUser
from app.models.common import Pagination
from app.models.message import (
    MessageCreate, MessageView, MessageBox, MessageListResponse, ContactPreferences,
    SenderContact, StoredSenderContact, Participant, MessageProperty,
)
from app.models.property import PropertyImage
from app.models.user import CurrentUser
import logging

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_PAGE_SIZE = 20


def redact_sender_contact(preferences: ContactPreferences, contact: SenderContact) -> Dict[str, Optional[str]]:
    """
    Contact fields to persist for a new message.

    Phone and email are kept only when the sender opted into that channel and
    supplied a value. Name is kept whenever given. Everything else is None.
    """
    return {
        "name": contact.name or None,
        "phone": contact.phone if preferences.phone and contact.phone else None,
        "email": str(contact.email) if preferences.email and contact.email else None,
    }


def _participant(user: DBUser) -> Participant:
    return Participant(id=str(user.id), name=user.name, email=user.email)


def to_message_view(record: DBMessage) -> MessageView:
    prop = record.property
    return MessageView(
        id=str(record.id),
        sender=_participant(record.sender),
        receiver=_participant(record.receiver),
        property=MessageProperty(
            id=str(prop.id),
            title=prop.title,
            city=prop.city,
            area=prop.area,
            images=[PropertyImage.model_validate(image) for image in (prop.images or [])],
        ),
        subject=record.subject,
        content=record.content,
        message_type=record.message_type,
        is_read=record.is_read,
        read_at=record.read_at,
        is_archived=record.is_archived,
        contact_preferences=ContactPreferences(
            phone=record.prefers_phone,
            email=record.prefers_email,
            whatsapp=record.prefers_whatsapp,
        ),
        sender_contact=StoredSenderContact(
            name=record.sender_name,
            phone=record.sender_phone,
            email=record.sender_email,
        ),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _parse_id(message_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(message_id))
    except ValueError:
        raise NotFoundError("Message not found")


class MessageService:
    """Inquiries between prospective tenants and property owners"""

    def __init__(self, db: Session):
        self.db = db

    def send_message(self, data: MessageCreate, current_user: CurrentUser) -> MessageView:
        try:
            property_id = uuid.UUID(data.property_id)
        except ValueError:
            raise NotFoundError("Property not found")

        prop = self.db.get(DBProperty, property_id)
        if not prop:
            raise NotFoundError("Property not found")

        if not prop.is_available:
            raise BusinessRuleError("Property is not available")

        if str(prop.owner_id) == current_user.id:
            raise BusinessRuleError("Cannot send message to yourself")

        contact = redact_sender_contact(data.contact_preferences, data.sender_contact)

        record = DBMessage(
            id=uuid.uuid4(),
            sender_id=uuid.UUID(current_user.id),
            receiver_id=prop.owner_id,
            property_id=prop.id,
            subject=data.subject,
            content=data.content,
            message_type=data.message_type.value,
            prefers_phone=data.contact_preferences.phone,
            prefers_email=data.contact_preferences.email,
            prefers_whatsapp=data.contact_preferences.whatsapp,
            sender_name=contact["name"],
            sender_phone=contact["phone"],
            sender_email=contact["email"],
        )

        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Message {record.id} sent by {current_user.id} about property {prop.id}")
        return to_message_view(record)

    def list_messages(
        self,
        current_user: CurrentUser,
        box: MessageBox = MessageBox.ALL,
        is_read: Optional[bool] = None,
        page: int = 1,
        limit: int = DEFAULT_MESSAGE_PAGE_SIZE,
    ) -> MessageListResponse:
        """Non-archived messages in the caller's sent/received boxes, newest first"""
        user_id = uuid.UUID(current_user.id)
        conditions = [DBMessage.is_archived.is_(False)]

        if box == MessageBox.SENT:
            conditions.append(DBMessage.sender_id == user_id)
        elif box == MessageBox.RECEIVED:
            conditions.append(DBMessage.receiver_id == user_id)
        else:
            conditions.append(or_(DBMessage.sender_id == user_id, DBMessage.receiver_id == user_id))

        if is_read is not None:
            conditions.append(DBMessage.is_read.is_(is_read))

        query = (
            select(DBMessage)
            .where(and_(*conditions))
            .order_by(DBMessage.created_at.desc(), DBMessage.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        records = self.db.execute(query).scalars().all()
        total = self.db.execute(
            select(func.count(DBMessage.id)).where(and_(*conditions))
        ).scalar_one()

        return MessageListResponse(
            messages=[to_message_view(record) for record in records],
            pagination=Pagination.build(page, limit, total),
            unread_count=self.unread_count(current_user),
        )

    def get_message(self, message_id: str, current_user: CurrentUser) -> MessageView:
        """Full message for either party; the receiver's first read marks it read"""
        record = self._get(message_id)

        if current_user.id not in (str(record.sender_id), str(record.receiver_id)):
            raise ForbiddenError("Not authorized to view this message")

        if str(record.receiver_id) == current_user.id:
            self._mark_read(record)

        return to_message_view(record)

    def mark_as_read(self, message_id: str, current_user: CurrentUser) -> MessageView:
        record = self._get(message_id)

        if str(record.receiver_id) != current_user.id:
            raise ForbiddenError("Not authorized to mark this message as read")

        self._mark_read(record)
        return to_message_view(record)

    def archive(self, message_id: str, current_user: CurrentUser) -> MessageView:
        record = self._get(message_id)

        if current_user.id not in (str(record.sender_id), str(record.receiver_id)):
            raise ForbiddenError("Not authorized to archive this message")

        if not record.is_archived:
            record.is_archived = True
            self._commit(record)

        return to_message_view(record)

    def delete(self, message_id: str, current_user: CurrentUser) -> None:
        record = self._get(message_id)

        if str(record.sender_id) != current_user.id:
            raise ForbiddenError("Not authorized to delete this message")

        try:
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Message {message_id} deleted by {current_user.id}")

    def unread_count(self, current_user: CurrentUser) -> int:
        return self.db.execute(
            select(func.count(DBMessage.id)).where(
                DBMessage.receiver_id == uuid.UUID(current_user.id),
                DBMessage.is_read.is_(False),
                DBMessage.is_archived.is_(False),
            )
        ).scalar_one()

    # Helpers

    def _get(self, message_id: str) -> DBMessage:
        record = self.db.get(DBMessage, _parse_id(message_id))
        if not record:
            raise NotFoundError("Message not found")
        return record

    def _mark_read(self, record: DBMessage) -> None:
        # read_at is stamped once
        if record.is_read:
            return
        record.is_read = True
        record.read_at = datetime.now(timezone.utc)
        self._commit(record)

    def _commit(self, record: DBMessage) -> None:
        try:
            self.db.commit()
            self.db.refresh(record)
        except Exception:
            self.db.rollback()
            raise
