import re
from pydantic import Field, field_validator
from enum import Enum
from typing import List, Optional

from portal.api.schemas import ApiModel, Record, Ref

CONTACT_EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 20


class ComplaintStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REJECTED = "rejected"


# feedback can only be given once the complaint is finished
FEEDBACK_STATUSES = frozenset({ComplaintStatus.RESOLVED, ComplaintStatus.CLOSED})


class Attachment(ApiModel):
    url: str
    original_name: Optional[str] = Field(None, alias="originalName")
    file_type: Optional[str] = Field(None, alias="fileType")
    resource_type: Optional[str] = Field(None, alias="resourceType")


class AgencyRef(Ref):
    short_name: Optional[str] = Field(None, alias="shortName")


class Location(ApiModel):
    address: str = ""
    city: str = ""


class ContactInfo(ApiModel):
    email: str = ""
    phone: str = ""


class Complaint(Record):
    title: str
    description: str
    tracking_id: str = Field(alias="trackingId")
    status: ComplaintStatus = ComplaintStatus.PENDING
    priority: Optional[str] = None
    category: Optional[Ref] = None
    agency: Optional[AgencyRef] = None
    location: Optional[Location] = None
    attachments: List[Attachment] = Field(default_factory=list)

    @property
    def accepts_feedback(self) -> bool:
        return self.status in FEEDBACK_STATUSES


class StatusChange(ApiModel):
    old_status: str = Field(alias="oldStatus")
    new_status: str = Field(alias="newStatus")


class Response(Record):
    content: str
    user_type: str = Field(alias="userType")
    staff: Optional[Ref] = None
    attachments: List[Attachment] = Field(default_factory=list)
    status_change: Optional[StatusChange] = Field(None, alias="statusChange")


class ComplaintCategory(ApiModel):
    """Public category option on the submission form."""

    id: str = Field(alias="_id")
    name: str
    description: Optional[str] = None


# SUBMISSION FORM
class ComplaintDraft(ApiModel):
    title: str = ""
    description: str = ""
    category: str = ""
    address: str = ""
    city: str = ""
    contact_email: str = ""
    contact_phone: str = ""

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        if len(v) < MIN_TITLE_LENGTH:
            raise ValueError(f"Title must be at least {MIN_TITLE_LENGTH} characters")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if not v or not v.strip():
            raise ValueError("Description is required")
        if len(v) < MIN_DESCRIPTION_LENGTH:
            raise ValueError(f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters")
        return v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        if not v:
            raise ValueError("Please select a category")
        return v

    @field_validator("contact_email")
    @classmethod
    def validate_contact_email(cls, v):
        if v and not CONTACT_EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        return v


# FEEDBACK FORM
class FeedbackDraft(ApiModel):
    satisfaction_level: int = Field(3, ge=1, le=5, alias="satisfactionLevel")
    comment: str = ""
    response_time_rating: int = Field(3, ge=1, le=5, alias="responseTimeRating")
    staff_professionalism_rating: int = Field(3, ge=1, le=5, alias="staffProfessionalismRating")
    resolution_satisfaction_rating: int = Field(3, ge=1, le=5, alias="resolutionSatisfactionRating")
    communication_rating: int = Field(3, ge=1, le=5, alias="communicationRating")
    would_recommend: bool = Field(True, alias="wouldRecommend")
    is_public: bool = Field(True, alias="isPublic")
