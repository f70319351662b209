from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELED = "Canceled"
    COMPLETED = "Completed"


class Review(BaseModel):
    client_id: str
    rating: int = Field(ge=1, le=5)
    comment: str
    created_at: int


class ServiceProvider(BaseModel):
    id: str
    name: str
    service_type: str
    contact_info: str
    created_at: int
    average_rating: int = 0
    reviews: list[Review] = Field(default_factory=list)
    availability: list[int] = Field(default_factory=list)


class Client(BaseModel):
    id: str
    name: str
    contact_info: str


class Booking(BaseModel):
    id: str
    service_provider_id: str
    client_id: str
    service_date: int
    service_type: str
    status: BookingStatus = BookingStatus.PENDING
    created_at: int
    reviewed: bool = False


class ServiceProviderCreateRequest(BaseModel):
    name: Optional[str] = None
    service_type: Optional[str] = None
    contact_info: Optional[str] = None
    availability: Optional[list[int]] = None


class ClientCreateRequest(BaseModel):
    name: Optional[str] = None
    contact_info: Optional[str] = None


class BookingRequest(BaseModel):
    service_provider_id: Optional[str] = None
    client_id: Optional[str] = None
    service_date: Optional[int] = None
    service_type: Optional[str] = None


class BookingRescheduleRequest(BaseModel):
    new_date: Optional[int] = None


class ReviewRequest(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = None


class ReadinessResponse(BaseModel):
    status: str
    store_reachable: bool
    repeat_reviews_allowed: bool
