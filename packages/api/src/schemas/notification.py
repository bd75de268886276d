# This project was developed with assistance from AI tools.
"""Notification inbox schemas."""

from datetime import datetime

from db.enums import NotificationAudience
from pydantic import BaseModel, ConfigDict

from . import Pagination


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    target_id: int
    audience: NotificationAudience
    kind: str
    message: str
    barangay: str | None = None
    is_read: bool
    created_at: datetime | None = None


class NotificationListResponse(BaseModel):
    data: list[NotificationResponse]
    unread_count: int
    pagination: Pagination


class MarkReadResponse(BaseModel):
    updated: int
