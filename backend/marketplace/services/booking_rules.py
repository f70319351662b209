from typing import Dict, FrozenSet, Iterable, List, Tuple

from marketplace.models import Booking, BookingStatus, Review, ServiceProvider
from marketplace.services.errors import MarketplaceAvailabilityError, MarketplaceStateError

# operation -> (allowed source statuses, target status, past-tense verb)
BOOKING_TRANSITIONS: Dict[str, Tuple[FrozenSet[BookingStatus], BookingStatus, str]] = {
    "confirm": (frozenset({BookingStatus.PENDING}), BookingStatus.CONFIRMED, "confirmed"),
    "reschedule": (frozenset({BookingStatus.PENDING}), BookingStatus.PENDING, "rescheduled"),
    "cancel": (
        frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED}),
        BookingStatus.CANCELED,
        "canceled",
    ),
    "complete": (frozenset({BookingStatus.CONFIRMED}), BookingStatus.COMPLETED, "completed"),
}

REVIEWABLE_STATUSES = frozenset({BookingStatus.COMPLETED})

_STATUS_ORDER = [
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.CANCELED,
    BookingStatus.COMPLETED,
]


def _describe(statuses: Iterable[BookingStatus]) -> str:
    names = [status.value.lower() for status in _STATUS_ORDER if status in set(statuses)]
    if len(names) <= 1:
        return "".join(names)
    return ", ".join(names[:-1]) + f" or {names[-1]}"


def is_available(provider: ServiceProvider, date: int) -> bool:
    return date in provider.availability


def ensure_available(provider: ServiceProvider, date: int, *, message: str) -> None:
    if not is_available(provider, date):
        raise MarketplaceAvailabilityError(message)


def guard_transition(booking: Booking, operation: str) -> BookingStatus:
    allowed, target, verb = BOOKING_TRANSITIONS[operation]
    if booking.status not in allowed:
        raise MarketplaceStateError(
            f"Only {_describe(allowed)} bookings can be {verb} (booking is {booking.status.value})."
        )
    return target


def confirm(booking: Booking) -> Booking:
    return booking.model_copy(update={"status": guard_transition(booking, "confirm")})


def cancel(booking: Booking) -> Booking:
    return booking.model_copy(update={"status": guard_transition(booking, "cancel")})


def complete(booking: Booking) -> Booking:
    return booking.model_copy(update={"status": guard_transition(booking, "complete")})


def reschedule(booking: Booking, provider: ServiceProvider, new_date: int) -> Booking:
    # State is checked before availability.
    target = guard_transition(booking, "reschedule")
    ensure_available(provider, new_date, message="Service provider is not available on the new date.")
    return booking.model_copy(update={"status": target, "service_date": new_date})


def average_rating(reviews: List[Review]) -> int:
    if not reviews:
        return 0
    return sum(review.rating for review in reviews) // len(reviews)


def guard_reviewable(booking: Booking, *, allow_repeat: bool) -> None:
    if booking.status not in REVIEWABLE_STATUSES:
        raise MarketplaceStateError(
            f"Only {_describe(REVIEWABLE_STATUSES)} bookings can be reviewed (booking is {booking.status.value})."
        )
    if booking.reviewed and not allow_repeat:
        raise MarketplaceStateError("Booking has already been reviewed.")


def apply_review(
    provider: ServiceProvider,
    booking: Booking,
    *,
    rating: int,
    comment: str,
    created_at: int,
    allow_repeat: bool = False,
) -> Tuple[ServiceProvider, Booking]:
    """Return the provider with the new review appended and its average
    recomputed over the full review list, plus the booking marked reviewed.
    """
    guard_reviewable(booking, allow_repeat=allow_repeat)
    review = Review(client_id=booking.client_id, rating=rating, comment=comment, created_at=created_at)
    reviews = [*provider.reviews, review]
    updated_provider = provider.model_copy(update={"reviews": reviews, "average_rating": average_rating(reviews)})
    updated_booking = booking.model_copy(update={"reviewed": True})
    return updated_provider, updated_booking


def bookings_for_provider(bookings: Iterable[Booking], provider_id: str) -> List[Booking]:
    return [booking for booking in bookings if booking.service_provider_id == provider_id]


def bookings_for_client(bookings: Iterable[Booking], client_id: str) -> List[Booking]:
    return [booking for booking in bookings if booking.client_id == client_id]
