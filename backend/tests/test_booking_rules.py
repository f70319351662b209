import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from marketplace.models import Booking, BookingStatus, Review, ServiceProvider
from marketplace.services import booking_rules
from marketplace.services.errors import MarketplaceAvailabilityError, MarketplaceStateError


def _provider(availability=None, reviews=None) -> ServiceProvider:
    return ServiceProvider(
        id="sp_1",
        name="Tidy Homes",
        service_type="cleaning",
        contact_info="tidy@example.com",
        created_at=1,
        availability=[100, 200] if availability is None else availability,
        reviews=reviews or [],
    )


def _booking(status: BookingStatus = BookingStatus.PENDING, **overrides) -> Booking:
    values = {
        "id": "bk_1",
        "service_provider_id": "sp_1",
        "client_id": "cl_1",
        "service_date": 100,
        "service_type": "cleaning",
        "status": status,
        "created_at": 2,
    }
    values.update(overrides)
    return Booking(**values)


def _review(rating: int) -> Review:
    return Review(client_id="cl_1", rating=rating, comment="ok", created_at=3)


def test_is_available_is_exact_membership():
    provider = _provider(availability=[100, 200])
    assert booking_rules.is_available(provider, 100)
    assert booking_rules.is_available(provider, 200)
    assert not booking_rules.is_available(provider, 150)


def test_empty_availability_is_never_available():
    assert not booking_rules.is_available(_provider(availability=[]), 100)


def test_duplicate_slots_are_left_alone():
    provider = _provider(availability=[200, 100, 200])
    assert booking_rules.is_available(provider, 200)
    assert provider.availability == [200, 100, 200]


def test_confirm_moves_pending_to_confirmed_without_mutating_input():
    booking = _booking()
    confirmed = booking_rules.confirm(booking)
    assert confirmed.status == BookingStatus.CONFIRMED
    assert booking.status == BookingStatus.PENDING


@pytest.mark.parametrize("status", [BookingStatus.CONFIRMED, BookingStatus.CANCELED, BookingStatus.COMPLETED])
def test_confirm_requires_pending(status):
    with pytest.raises(MarketplaceStateError, match="Only pending bookings can be confirmed"):
        booking_rules.confirm(_booking(status))


@pytest.mark.parametrize("status", [BookingStatus.PENDING, BookingStatus.CONFIRMED])
def test_cancel_allowed_from_pending_or_confirmed(status):
    assert booking_rules.cancel(_booking(status)).status == BookingStatus.CANCELED


@pytest.mark.parametrize("status", [BookingStatus.CANCELED, BookingStatus.COMPLETED])
def test_cancel_rejected_from_terminal_states(status):
    with pytest.raises(MarketplaceStateError, match="pending or confirmed"):
        booking_rules.cancel(_booking(status))


def test_complete_requires_confirmed():
    assert booking_rules.complete(_booking(BookingStatus.CONFIRMED)).status == BookingStatus.COMPLETED
    with pytest.raises(MarketplaceStateError):
        booking_rules.complete(_booking(BookingStatus.PENDING))


def test_reschedule_updates_date_and_keeps_pending():
    updated = booking_rules.reschedule(_booking(), _provider(), 200)
    assert updated.service_date == 200
    assert updated.status == BookingStatus.PENDING


def test_reschedule_rejects_unavailable_date():
    with pytest.raises(MarketplaceAvailabilityError):
        booking_rules.reschedule(_booking(), _provider(), 300)


def test_reschedule_checks_state_before_availability():
    confirmed = _booking(BookingStatus.CONFIRMED)
    with pytest.raises(MarketplaceStateError):
        booking_rules.reschedule(confirmed, _provider(), 200)
    with pytest.raises(MarketplaceStateError):
        booking_rules.reschedule(confirmed, _provider(), 999)


def test_average_rating_is_truncated_mean():
    assert booking_rules.average_rating([]) == 0
    assert booking_rules.average_rating([_review(4), _review(2)]) == 3
    assert booking_rules.average_rating([_review(5), _review(4)]) == 4
    assert booking_rules.average_rating([_review(1), _review(1), _review(2)]) == 1


def test_average_rating_recomputed_from_full_sequence():
    # Folding truncated averages one rating at a time would give 3 here.
    ratings = [2, 5, 5]
    provider = _provider()
    for index, rating in enumerate(ratings):
        booking = _booking(BookingStatus.COMPLETED, id=f"bk_{index}")
        provider, _ = booking_rules.apply_review(provider, booking, rating=rating, comment="fine", created_at=index)
    assert provider.average_rating == sum(ratings) // len(ratings) == 4


def test_apply_review_appends_review_and_marks_booking():
    provider = _provider()
    booking = _booking(BookingStatus.COMPLETED)
    updated_provider, updated_booking = booking_rules.apply_review(
        provider, booking, rating=4, comment="Great job", created_at=10
    )
    assert [review.rating for review in updated_provider.reviews] == [4]
    assert updated_provider.reviews[0].client_id == "cl_1"
    assert updated_provider.average_rating == 4
    assert updated_booking.reviewed is True
    assert provider.reviews == []
    assert booking.reviewed is False


def test_apply_review_requires_completed_booking():
    with pytest.raises(MarketplaceStateError, match="Only completed bookings can be reviewed"):
        booking_rules.apply_review(_provider(), _booking(BookingStatus.CONFIRMED), rating=4, comment="x", created_at=1)


def test_apply_review_rejects_second_review_unless_repeat_allowed():
    reviewed = _booking(BookingStatus.COMPLETED, reviewed=True)
    with pytest.raises(MarketplaceStateError, match="already been reviewed"):
        booking_rules.apply_review(_provider(), reviewed, rating=4, comment="again", created_at=1)

    provider, _ = booking_rules.apply_review(
        _provider(reviews=[_review(2)]), reviewed, rating=4, comment="again", created_at=1, allow_repeat=True
    )
    assert len(provider.reviews) == 2
    assert provider.average_rating == 3


def test_history_filters_preserve_order():
    bookings = [
        _booking(id="bk_a", service_provider_id="sp_1", client_id="cl_2"),
        _booking(id="bk_b", service_provider_id="sp_2", client_id="cl_1"),
        _booking(id="bk_c", service_provider_id="sp_1", client_id="cl_1"),
    ]
    assert [b.id for b in booking_rules.bookings_for_provider(bookings, "sp_1")] == ["bk_a", "bk_c"]
    assert [b.id for b in booking_rules.bookings_for_client(bookings, "cl_1")] == ["bk_b", "bk_c"]
    assert booking_rules.bookings_for_provider(bookings, "sp_missing") == []
