from fastapi import APIRouter, Depends

from marketplace.auth import require_admin
from marketplace.models import (
    Booking,
    BookingRequest,
    BookingRescheduleRequest,
    ReviewRequest,
    ServiceProvider,
)
from marketplace.routers.common import raise_marketplace_http_error
from marketplace.services.marketplace_store import MarketplaceError, marketplace_store

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=Booking)
def create_booking(request: BookingRequest):
    try:
        return marketplace_store.create_booking(
            service_provider_id=request.service_provider_id,
            client_id=request.client_id,
            service_date=request.service_date,
            service_type=request.service_type,
        )
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.get("/{booking_id}", response_model=Booking)
def get_booking(booking_id: str):
    try:
        return marketplace_store.get_booking(booking_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.post("/{booking_id}/reschedule", response_model=Booking)
def reschedule_booking(booking_id: str, request: BookingRescheduleRequest):
    try:
        return marketplace_store.reschedule_booking(booking_id, request.new_date)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.post("/{booking_id}/confirm", response_model=Booking)
def confirm_booking(booking_id: str):
    try:
        return marketplace_store.confirm_booking(booking_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.post("/{booking_id}/cancel", response_model=Booking)
def cancel_booking(booking_id: str):
    try:
        return marketplace_store.cancel_booking(booking_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.post("/{booking_id}/complete", response_model=Booking, dependencies=[Depends(require_admin)])
def complete_booking(booking_id: str):
    try:
        return marketplace_store.complete_booking(booking_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.post("/{booking_id}/review", response_model=ServiceProvider)
def add_review(booking_id: str, request: ReviewRequest):
    try:
        return marketplace_store.add_review(booking_id, rating=request.rating, comment=request.comment)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)
