from pydantic import Field
from enum import Enum
from typing import List, Optional

from portal.api.schemas import ApiModel, Record


class NotificationType(str, Enum):
    SYSTEM = "system"
    COMPLAINT_UPDATE = "complaint_update"
    RESPONSE_RECEIVED = "response_received"
    STATUS_CHANGE = "status_change"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class NotificationAction(ApiModel):
    label: str
    url: str


class Notification(Record):
    title: str
    message: str
    type: NotificationType = NotificationType.SYSTEM
    priority: NotificationPriority = NotificationPriority.NORMAL
    read: bool = False
    related_id: Optional[str] = Field(None, alias="relatedId")
    on_model: Optional[str] = Field(None, alias="onModel")
    actions: List[NotificationAction] = Field(default_factory=list)
