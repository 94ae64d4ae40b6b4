from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.core.auth import get_current_user
from app.core.database import get_db
from app.core.exceptions import ServiceError
from app.models.common import StatusResponse, MAX_PAGE, MAX_PAGE_SIZE
from app.models.message import (
    MessageBox, MessageCreate, MessageCreatedResponse, MessageResponse,
    MessageListResponse, UnreadCountResponse,
)
from app.models.user import CurrentUser
from app.modules.messages.service import MessageService, DEFAULT_MESSAGE_PAGE_SIZE
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    return MessageService(db)

@router.post("", response_model=MessageCreatedResponse, status_code=status.HTTP_201_CREATED)
def send_message(
    message_data: MessageCreate,
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    """
    Send an inquiry to the owner of an available property.

    Sender phone/email are stored only for the channels the sender opted into.
    """
    try:
        created = message_service.send_message(message_data, current_user)
        return MessageCreatedResponse(message="Message sent successfully", data=created)

    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to send message: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error sending message"
        )

@router.get("", response_model=MessageListResponse)
def get_messages(
    type: MessageBox = Query(MessageBox.ALL, description="sent, received or all"),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(DEFAULT_MESSAGE_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    try:
        return message_service.list_messages(current_user, box=type, is_read=is_read, page=page, limit=limit)

    except Exception as e:
        logger.error(f"Failed to get messages for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching messages"
        )

@router.get("/unread/count", response_model=UnreadCountResponse)
def get_unread_count(
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    try:
        return UnreadCountResponse(unread_count=message_service.unread_count(current_user))

    except Exception as e:
        logger.error(f"Failed to count unread messages for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error counting unread messages"
        )

@router.get("/{message_id}", response_model=MessageResponse)
def get_message(
    message_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    """Message detail for either party. Opening it as the receiver marks it read."""
    try:
        return MessageResponse(message=message_service.get_message(message_id, current_user))

    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to get message {message_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error fetching message"
        )

@router.put("/{message_id}/read", response_model=StatusResponse)
def mark_message_as_read(
    message_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    try:
        message_service.mark_as_read(message_id, current_user)
        return StatusResponse(message="Message marked as read")

    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to mark message {message_id} as read: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error updating message"
        )

@router.put("/{message_id}/archive", response_model=StatusResponse)
def archive_message(
    message_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    try:
        message_service.archive(message_id, current_user)
        return StatusResponse(message="Message archived")

    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to archive message {message_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error archiving message"
        )

@router.delete("/{message_id}", response_model=StatusResponse)
def delete_message(
    message_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    message_service: MessageService = Depends(get_message_service)
):
    try:
        message_service.delete(message_id, current_user)
        return StatusResponse(message="Message deleted successfully")

    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Failed to delete message {message_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error deleting message"
        )
