from typing import Iterable, List, Optional

from marketplace.services.errors import MarketplaceValidationError

MIN_RATING = 1
MAX_RATING = 5


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_text(value: Optional[str], label: str) -> str:
    if value is None or not str(value).strip():
        raise MarketplaceValidationError(f"{label} is required")
    return str(value).strip()


def require_timestamp(value: Optional[int], label: str) -> int:
    if value is None:
        raise MarketplaceValidationError(f"{label} is required")
    if not _is_int(value):
        raise MarketplaceValidationError(f"{label} must be an integer timestamp")
    if value < 0:
        raise MarketplaceValidationError(f"{label} must be a non-negative timestamp")
    return value


def validate_availability(slots: Optional[Iterable[int]]) -> List[int]:
    # Kept as given: no dedup, no sorting.
    if slots is None:
        return []
    return [require_timestamp(slot, "availability slot") for slot in slots]


def validate_provider_fields(name: Optional[str], service_type: Optional[str], contact_info: Optional[str]) -> tuple[str, str, str]:
    if not (name and name.strip()) or not (service_type and service_type.strip()) or not (contact_info and contact_info.strip()):
        raise MarketplaceValidationError("Ensure 'name', 'service_type', and 'contact_info' are provided.")
    return name.strip(), service_type.strip(), contact_info.strip()


def validate_client_fields(name: Optional[str], contact_info: Optional[str]) -> tuple[str, str]:
    if not (name and name.strip()) or not (contact_info and contact_info.strip()):
        raise MarketplaceValidationError("Ensure 'name' and 'contact_info' are provided.")
    return name.strip(), contact_info.strip()


def validate_rating(rating: Optional[int]) -> int:
    if rating is None:
        raise MarketplaceValidationError("rating is required")
    if not _is_int(rating):
        raise MarketplaceValidationError("rating must be an integer")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise MarketplaceValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def validate_comment(comment: Optional[str]) -> str:
    return require_text(comment, "comment")
