from fastapi import APIRouter

from marketplace.models import Booking, ServiceProvider, ServiceProviderCreateRequest
from marketplace.routers.common import raise_marketplace_http_error
from marketplace.services.marketplace_store import MarketplaceError, marketplace_store

router = APIRouter(prefix="/providers", tags=["providers"])


@router.post("", response_model=ServiceProvider)
def create_service_provider(request: ServiceProviderCreateRequest):
    try:
        return marketplace_store.create_service_provider(
            name=request.name,
            service_type=request.service_type,
            contact_info=request.contact_info,
            availability=request.availability,
        )
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.get("", response_model=list[ServiceProvider])
def list_service_providers():
    try:
        return marketplace_store.get_all_service_providers()
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.get("/{provider_id}", response_model=ServiceProvider)
def get_service_provider(provider_id: str):
    try:
        return marketplace_store.get_service_provider(provider_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.get("/{provider_id}/bookings", response_model=list[Booking])
def service_provider_history(provider_id: str):
    try:
        return marketplace_store.get_service_provider_history(provider_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)
