from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class TicketCategory(str, Enum):
    DELAYED_FLIGHT = "Delayed Flight"
    CANCELED_FLIGHT = "Canceled Flight"
    MISSED_CONNECTION = "Missed Connection"
    LOST_BAGGAGE = "Lost Baggage"
    DAMAGED_BAGGAGE = "Damaged Baggage"
    DELAYED_BAGGAGE = "Delayed Baggage"
    INCORRECT_BOOKING = "Incorrect Booking Details"
    REFUND = "Refund & Compensation"
    SEAT_ASSIGNMENT = "Seat Assignment Issue"
    UNCOMFORTABLE_SEATS = "Uncomfortable Seats"
    FOOD = "Food & Catering Issue"
    CLEANLINESS = "Restroom & Cleanliness"
    RUDE_STAFF = "Rude Staff"
    CUSTOMER_SERVICE = "Customer Service Complaint"
    CHECK_IN = "Online Check-in Problem"
    APP_OR_WEBSITE = "App or Website Issue"
    DISABILITY = "Disability Assistance"
    INFANT_CHILD = "Infant & Child Services"
    OTHER = "Other"


class TicketStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In progress"
    RESOLVED = "Resolved"
    CLOSED = "Closed"


class TicketCreate(BaseModel):
    subject: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: TicketCategory


class TicketUpdate(BaseModel):
    # Only these fields can be patched; anything else in the body is dropped
    subject: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[TicketCategory] = None
    status: Optional[TicketStatus] = None
    # last revision the client saw; a mismatch is rejected
    revision: Optional[int] = None

    def changes(self) -> dict:
        data = self.model_dump(mode="json", exclude_unset=True, exclude={"revision"})
        return {k: v for k, v in data.items() if v is not None}


class ReviewCreate(BaseModel):
    text: str = Field(..., min_length=1)


class ReviewUpdate(BaseModel):
    text: str = Field(..., min_length=1)


class TicketStats(BaseModel):
    labels: List[str]
    data: List[int]
