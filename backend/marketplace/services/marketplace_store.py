import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock
from typing import Callable, List, Optional

from marketplace.models import Booking, BookingStatus, Client, ServiceProvider
from marketplace.services import booking_rules
from marketplace.services.entity_store import EntityStore
from marketplace.services.errors import (
    MarketplaceAvailabilityError,
    MarketplaceError,
    MarketplaceNotFoundError,
    MarketplaceStateError,
    MarketplaceValidationError,
)
from marketplace.services.identity import MonotonicClock, new_id
from marketplace.services.validation import (
    require_text,
    require_timestamp,
    validate_availability,
    validate_client_fields,
    validate_comment,
    validate_provider_fields,
    validate_rating,
)

logger = logging.getLogger(__name__)

__all__ = [
    "Marketplace",
    "MarketplaceAvailabilityError",
    "MarketplaceError",
    "MarketplaceNotFoundError",
    "MarketplaceStateError",
    "MarketplaceValidationError",
    "marketplace_store",
]


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


@dataclass
class Marketplace:
    db_path: str
    allow_repeat_reviews: bool = False
    clock: MonotonicClock = field(default_factory=MonotonicClock)
    id_factory: Callable[[str], str] = new_id

    def __post_init__(self) -> None:
        self._lock = Lock()
        path = Path(self.db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(path)
        self.store = EntityStore(self.db_path)

    # -- lookups -----------------------------------------------------------

    def _load_provider(self, provider_id: str, message: str = "Service provider not found.") -> ServiceProvider:
        provider = self.store.providers.get(provider_id)
        if provider is None:
            raise MarketplaceNotFoundError(message)
        return provider

    def _load_booking(self, booking_id: str) -> Booking:
        booking = self.store.bookings.get(booking_id)
        if booking is None:
            raise MarketplaceNotFoundError("Booking not found.")
        return booking

    def _load_client(self, client_id: str) -> Client:
        client = self.store.clients.get(client_id)
        if client is None:
            raise MarketplaceNotFoundError("Client not found.")
        return client

    def get_service_provider(self, provider_id: str) -> ServiceProvider:
        return self._load_provider(provider_id)

    def get_booking(self, booking_id: str) -> Booking:
        return self._load_booking(booking_id)

    def get_client(self, client_id: str) -> Client:
        return self._load_client(client_id)

    def ping(self) -> bool:
        return self.store.ping()

    # -- registration ------------------------------------------------------

    def create_service_provider(
        self,
        *,
        name: Optional[str],
        service_type: Optional[str],
        contact_info: Optional[str],
        availability: Optional[List[int]] = None,
    ) -> ServiceProvider:
        name, service_type, contact_info = validate_provider_fields(name, service_type, contact_info)
        slots = validate_availability(availability)

        provider = ServiceProvider(
            id=self.id_factory("sp"),
            name=name,
            service_type=service_type,
            contact_info=contact_info,
            created_at=self.clock.now(),
            average_rating=0,
            reviews=[],
            availability=slots,
        )
        with self._lock:
            self.store.providers.insert(provider.id, provider)
        logger.info("Registered service provider %s with %d availability slots", provider.id, len(slots))
        return provider

    def create_client(self, *, name: Optional[str], contact_info: Optional[str]) -> Client:
        name, contact_info = validate_client_fields(name, contact_info)
        client = Client(id=self.id_factory("cl"), name=name, contact_info=contact_info)
        with self._lock:
            self.store.clients.insert(client.id, client)
        logger.info("Registered client %s", client.id)
        return client

    # -- booking lifecycle -------------------------------------------------

    def create_booking(
        self,
        *,
        service_provider_id: Optional[str],
        client_id: Optional[str],
        service_date: Optional[int],
        service_type: Optional[str],
    ) -> Booking:
        service_provider_id = require_text(service_provider_id, "service_provider_id")
        client_id = require_text(client_id, "client_id")
        service_date = require_timestamp(service_date, "service_date")
        service_type = require_text(service_type, "service_type")

        with self._lock:
            provider = self._load_provider(service_provider_id, "Invalid service provider.")
            self._load_client(client_id)
            try:
                booking_rules.ensure_available(
                    provider,
                    service_date,
                    message="Service provider is not available on the selected date.",
                )
            except MarketplaceAvailabilityError:
                logger.info("Rejected booking for %s at %s: not available", service_provider_id, service_date)
                raise

            booking = Booking(
                id=self.id_factory("bk"),
                service_provider_id=service_provider_id,
                client_id=client_id,
                service_date=service_date,
                service_type=service_type,
                status=BookingStatus.PENDING,
                created_at=self.clock.now(),
            )
            self.store.bookings.insert(booking.id, booking)
        logger.info("Created booking %s for provider %s at %s", booking.id, service_provider_id, service_date)
        return booking

    def reschedule_booking(self, booking_id: str, new_date: Optional[int]) -> Booking:
        new_date = require_timestamp(new_date, "new_date")
        with self._lock:
            booking = self._load_booking(booking_id)
            # Status is checked before the provider lookup and the availability test.
            booking_rules.guard_transition(booking, "reschedule")
            provider = self._load_provider(booking.service_provider_id)
            updated = booking_rules.reschedule(booking, provider, new_date)
            self.store.bookings.insert(updated.id, updated)
        logger.info("Rescheduled booking %s to %s", updated.id, new_date)
        return updated

    def _transition(self, booking_id: str, apply: Callable[[Booking], Booking]) -> Booking:
        with self._lock:
            booking = self._load_booking(booking_id)
            try:
                updated = apply(booking)
            except MarketplaceStateError as exc:
                logger.info("Rejected transition for booking %s: %s", booking_id, exc)
                raise
            self.store.bookings.insert(updated.id, updated)
        logger.info("Booking %s moved %s -> %s", updated.id, booking.status.value, updated.status.value)
        return updated

    def confirm_booking(self, booking_id: str) -> Booking:
        return self._transition(booking_id, booking_rules.confirm)

    def cancel_booking(self, booking_id: str) -> Booking:
        return self._transition(booking_id, booking_rules.cancel)

    def complete_booking(self, booking_id: str) -> Booking:
        return self._transition(booking_id, booking_rules.complete)

    # -- reviews -----------------------------------------------------------

    def add_review(self, booking_id: str, *, rating: Optional[int], comment: Optional[str]) -> ServiceProvider:
        rating = validate_rating(rating)
        comment = validate_comment(comment)

        with self._lock:
            booking = self._load_booking(booking_id)
            booking_rules.guard_reviewable(booking, allow_repeat=self.allow_repeat_reviews)
            provider = self._load_provider(booking.service_provider_id)
            updated_provider, updated_booking = booking_rules.apply_review(
                provider,
                booking,
                rating=rating,
                comment=comment,
                created_at=self.clock.now(),
                allow_repeat=self.allow_repeat_reviews,
            )
            # Provider first: a failure before the booking write can only allow a repeat review.
            self.store.providers.insert(updated_provider.id, updated_provider)
            self.store.bookings.insert(updated_booking.id, updated_booking)
        logger.info(
            "Review on booking %s: provider %s now averages %d over %d reviews",
            booking_id,
            updated_provider.id,
            updated_provider.average_rating,
            len(updated_provider.reviews),
        )
        return updated_provider

    # -- queries -----------------------------------------------------------

    def get_service_provider_history(self, provider_id: str) -> List[Booking]:
        bookings = booking_rules.bookings_for_provider(self.store.bookings.values(), provider_id)
        if not bookings:
            raise MarketplaceNotFoundError("No bookings found for this service provider.")
        return bookings

    def get_client_history(self, client_id: str) -> List[Booking]:
        bookings = booking_rules.bookings_for_client(self.store.bookings.values(), client_id)
        if not bookings:
            raise MarketplaceNotFoundError("No bookings found for this client.")
        return bookings

    def get_all_service_providers(self) -> List[ServiceProvider]:
        providers = self.store.providers.values()
        if not providers:
            raise MarketplaceNotFoundError("No service providers found.")
        return providers


default_db = str(Path(__file__).resolve().parents[2] / "data" / "marketplace.sqlite3")
marketplace_store = Marketplace(
    db_path=os.getenv("MARKETPLACE_DB_PATH", default_db),
    allow_repeat_reviews=_env_flag("MARKETPLACE_ALLOW_REPEAT_REVIEWS"),
)
